"""
Family Days — Cron Runner.

Composition root: builds the store, ledger, providers and scheduler from
settings, and registers the three daily reminder runs with APScheduler.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from familydays.config import settings
from familydays.data.models import TimeSlot
from familydays.ports.store_port import StoreError

if TYPE_CHECKING:
    from familydays.core.scheduler import ReminderScheduler, RunSummary
    from familydays.data.db import DocumentDB

logger = logging.getLogger(__name__)


def _job_id(slot: TimeSlot) -> str:
    return f"reminders:{slot.value}"


def slot_hours() -> dict[TimeSlot, int]:
    return {
        TimeSlot.MORNING: settings.MORNING_HOUR,
        TimeSlot.AFTERNOON: settings.AFTERNOON_HOUR,
        TimeSlot.EVENING: settings.EVENING_HOUR,
    }


def build_scheduler(
    store: DocumentDB | None = None,
    providers: dict | None = None,
) -> ReminderScheduler:
    """Wire a ReminderScheduler from settings. Arguments override the defaults."""
    from familydays.adapters.channel_factory import create_channel_providers
    from familydays.core.access_policy import AccessPolicy
    from familydays.core.dispatcher import NotificationDispatcher
    from familydays.core.ledger import DeliveryLedger
    from familydays.core.scheduler import ReminderScheduler
    from familydays.data.db import DocumentDB, EventDB, UserDB

    if store is None:
        store = DocumentDB()
    if providers is None:
        providers = create_channel_providers()

    users = UserDB(store)
    return ReminderScheduler(
        EventDB(store),
        users,
        DeliveryLedger(store, atomic_claim=settings.LEDGER_ATOMIC_CLAIM),
        NotificationDispatcher(providers, email_subject=settings.EMAIL_SUBJECT),
        timezone=settings.SCHEDULER_TIMEZONE,
        leap_day_rule=settings.LEAP_DAY_RULE,
        access_policy=AccessPolicy(users),
    )


async def run_slot(reminder_scheduler: ReminderScheduler, slot: TimeSlot | str) -> RunSummary | None:
    """One reminder run. A store outage aborts the run with an error log."""
    try:
        return await reminder_scheduler.run(slot)
    except StoreError as exc:
        logger.error("Reminder run for %s aborted, store unavailable: %s", TimeSlot(slot).value, exc)
        return None


def schedule_reminder_jobs(
    scheduler: AsyncIOScheduler,
    reminder_scheduler: ReminderScheduler,
) -> list[str]:
    """Register one daily cron job per time slot. Returns the job ids."""
    tz = ZoneInfo(settings.SCHEDULER_TIMEZONE)
    job_ids = []
    for slot, hour in slot_hours().items():
        job_id = _job_id(slot)
        scheduler.add_job(
            run_slot,
            trigger=CronTrigger(hour=hour, minute=0, timezone=tz),
            id=job_id,
            name=f"{slot.value} reminders",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            kwargs={"reminder_scheduler": reminder_scheduler, "slot": slot},
        )
        logger.info("Scheduled %s reminders daily at %02d:00 %s", slot.value, hour, tz.key)
        job_ids.append(job_id)
    return job_ids


async def serve() -> None:
    """Run the cron scheduler until cancelled."""
    reminder_scheduler = build_scheduler()
    scheduler = AsyncIOScheduler(timezone=ZoneInfo(settings.SCHEDULER_TIMEZONE))
    schedule_reminder_jobs(scheduler, reminder_scheduler)
    scheduler.start()
    logger.info("Reminder scheduler started")
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        await reminder_scheduler.close()
        logger.info("Reminder scheduler stopped")


async def run_once(reminder_scheduler: ReminderScheduler, slot: TimeSlot | str) -> RunSummary | None:
    """One-shot run that releases provider sessions afterwards."""
    try:
        return await run_slot(reminder_scheduler, slot)
    finally:
        await reminder_scheduler.close()


def import_documents(path: str, store: DocumentDB | None = None) -> tuple[int, int]:
    """Load users and events from a JSON export into the store.

    The file holds ``{"users": {id: {...}}, "events": {id: {...}}}``. Each
    document is validated before it is written; malformed ones are logged
    and skipped. Returns (imported, rejected).
    """
    from familydays.data.db import DocumentDB, EventDB, UserDB
    from familydays.data.models import DataError

    with open(path, encoding="utf-8") as fh:
        payload = json.load(fh)

    if store is None:
        store = DocumentDB()
    users, events = UserDB(store), EventDB(store)

    imported = rejected = 0
    for kind, add in (("users", users.add_profile), ("events", events.add_event)):
        for doc_id, data in (payload.get(kind) or {}).items():
            try:
                add(doc_id, data)
                imported += 1
            except DataError as exc:
                logger.warning("Skipping %s document %s: %s", kind, doc_id, exc)
                rejected += 1
    logger.info("Import from %s: %d imported, %d rejected", path, imported, rejected)
    return imported, rejected
