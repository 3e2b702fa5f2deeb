"""
Family Days — Reminder Scheduler.

One run per daily time slot (morning, afternoon, evening) over every
stored event:

    event -> days until next occurrence -> due offsets for the slot
          -> owner preferences -> for each channel with a destination:
             ledger check -> send -> ledger record

Failures stay local to one (event, channel) unit. A malformed event or
user record skips that event; a store failure during the ledger check
skips that unit; a provider failure is recorded as a failed attempt and
is not retried the same day.

``test_send`` is the on-demand entry point: one message, no ledger.

This module is provider-agnostic: it depends on the dispatcher and the
store-backed readers, not on specific implementations.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from familydays.core.access_policy import PermissionDenied
from familydays.core.dispatcher import DeliveryOutcome
from familydays.core.ledger import ledger_key
from familydays.core.messages import compose_message
from familydays.core.occurrence import days_until_next_occurrence
from familydays.core.reminder_rules import due_offsets
from familydays.data.models import (
    Channel,
    DataError,
    DeliveryLogEntry,
    DeliveryStatus,
    TimeSlot,
    parse_channel,
    parse_event,
)
from familydays.ports.channel_port import ChannelError
from familydays.ports.store_port import StoreError

if TYPE_CHECKING:
    from familydays.core.access_policy import AccessPolicy
    from familydays.core.dispatcher import NotificationDispatcher
    from familydays.core.ledger import DeliveryLedger
    from familydays.data.db import EventDB, UserDB
    from familydays.data.models import Event

logger = logging.getLogger(__name__)

# Offsets used when an event has no custom reminder rules
SLOT_FALLBACK_OFFSETS: dict[TimeSlot, frozenset[int]] = {
    TimeSlot.MORNING: frozenset({3, 1, 0}),
    TimeSlot.AFTERNOON: frozenset({0}),
    TimeSlot.EVENING: frozenset({0}),
}


@dataclass
class RunSummary:
    """Counters for one scheduler run."""

    time_slot: TimeSlot
    day: date
    events_scanned: int = 0
    events_skipped: int = 0
    sent: int = 0
    failed: int = 0
    already_attempted: int = 0
    store_errors: int = 0


@dataclass
class ManualSendResult:
    """Result of an on-demand test message."""

    success: bool
    channel: Channel | None = None
    result_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.success:
            return {
                "success": True,
                "channel": self.channel.value if self.channel else None,
                "result_id": self.result_id,
            }
        return {"success": False, "error": self.error}


class ReminderScheduler:
    """Drives one reminder run per time slot."""

    def __init__(
        self,
        events: EventDB,
        users: UserDB,
        ledger: DeliveryLedger,
        dispatcher: NotificationDispatcher,
        *,
        timezone: str = "America/New_York",
        leap_day_rule: str = "mar1",
        access_policy: AccessPolicy | None = None,
        fallback_offsets: Mapping[TimeSlot, Iterable[int]] | None = None,
    ) -> None:
        self._events = events
        self._users = users
        self._ledger = ledger
        self._dispatcher = dispatcher
        self._tz = ZoneInfo(timezone)
        self._leap_day_rule = leap_day_rule
        self._access_policy = access_policy
        offsets = fallback_offsets if fallback_offsets is not None else SLOT_FALLBACK_OFFSETS
        self._fallback_offsets = {TimeSlot(k): frozenset(v) for k, v in offsets.items()}

    def today(self, now: datetime | None = None) -> date:
        """Civil day of ``now`` in the scheduler timezone.

        A naive ``now`` is taken to be local time in that timezone.
        """
        if now is None:
            now = datetime.now(self._tz)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=self._tz)
        return now.astimezone(self._tz).date()

    async def close(self) -> None:
        await self._dispatcher.close()

    # ------------------------------------------------------------------
    # Scheduled run
    # ------------------------------------------------------------------

    async def run(self, time_slot: TimeSlot | str, now: datetime | None = None) -> RunSummary:
        """Process every event for ``time_slot``.

        Raises StoreError when the events collection cannot be read.
        """
        slot = TimeSlot(time_slot)
        today = self.today(now)
        summary = RunSummary(time_slot=slot, day=today)
        logger.info("Reminder run started: slot=%s day=%s", slot.value, today.isoformat())

        for doc_id, data in self._events.list_documents():
            summary.events_scanned += 1
            try:
                await self._process_event(doc_id, data, slot, today, summary)
            except DataError as exc:
                logger.warning("Skipping event %s: %s", doc_id, exc)
                summary.events_skipped += 1
            except Exception:
                logger.exception("Unexpected error processing event %s, skipping", doc_id)
                summary.events_skipped += 1

        logger.info(
            "Reminder run finished: slot=%s day=%s scanned=%d skipped=%d sent=%d "
            "failed=%d already_attempted=%d store_errors=%d",
            slot.value, today.isoformat(), summary.events_scanned, summary.events_skipped,
            summary.sent, summary.failed, summary.already_attempted, summary.store_errors,
        )
        return summary

    async def _process_event(
        self,
        doc_id: str,
        data: dict,
        slot: TimeSlot,
        today: date,
        summary: RunSummary,
    ) -> None:
        event = parse_event(doc_id, data)
        if not event.owner_id:
            logger.debug("Event %s has no owner, skipping", doc_id)
            summary.events_skipped += 1
            return

        days_until = days_until_next_occurrence(event, today, self._leap_day_rule)
        if days_until not in due_offsets(event, slot, self._fallback_offsets.get(slot, frozenset())):
            return

        try:
            preferences = self._users.get_preferences(event.owner_id)
        except StoreError as exc:
            logger.error("Could not load preferences of user %s: %s", event.owner_id, exc)
            summary.store_errors += 1
            return
        if preferences is None:
            logger.info("Owner %s of event %s has no profile, skipping", event.owner_id, doc_id)
            summary.events_skipped += 1
            return

        message = compose_message(event, days_until, slot)
        for channel in preferences.notification_channels:
            destination = preferences.destination_for(channel)
            if not destination:
                logger.debug("No %s destination for user %s", channel.value, event.owner_id)
                continue
            await self._deliver(event, days_until, slot, channel, destination, message, today, summary)

    async def _deliver(
        self,
        event: Event,
        days_until: int,
        slot: TimeSlot,
        channel: Channel,
        destination: str,
        message: str,
        today: date,
        summary: RunSummary,
    ) -> None:
        key = ledger_key(event.id, days_until, slot, channel, today)
        try:
            if not self._ledger.acquire(key):
                logger.debug("Already attempted %s", key)
                summary.already_attempted += 1
                return
        except StoreError as exc:
            logger.error("Ledger check failed for %s, skipping: %s", key, exc)
            summary.store_errors += 1
            return

        try:
            outcome = await self._dispatcher.try_send(channel, destination, message)
        except Exception as exc:
            logger.exception("Unexpected error sending %s", key)
            outcome = DeliveryOutcome(
                channel=channel,
                destination=destination,
                status=DeliveryStatus.FAILED,
                error=str(exc),
            )

        if outcome.ok:
            summary.sent += 1
        else:
            summary.failed += 1

        entry = DeliveryLogEntry(
            status=outcome.status,
            channel=channel,
            message=message,
            event_id=event.id,
            user_id=event.owner_id or "",
            offset_days=days_until,
            time_slot=slot,
            result_id=outcome.result_id,
            error=outcome.error,
        )
        try:
            self._ledger.record_attempt(key, entry)
        except StoreError as exc:
            logger.error("Could not record outcome of %s: %s", key, exc)
            summary.store_errors += 1

    # ------------------------------------------------------------------
    # On-demand test message
    # ------------------------------------------------------------------

    async def test_send(
        self,
        destination: str,
        message: str,
        channel: Channel | str = Channel.CHAT,
        subject: str | None = None,
        requested_by: str | None = None,
    ) -> ManualSendResult:
        """Send one message immediately, bypassing rules and the ledger.

        Raises PermissionDenied when ``requested_by`` is not an admin.
        """
        if requested_by is not None:
            if self._access_policy is None:
                raise PermissionDenied("No access policy configured")
            self._access_policy.require_admin(requested_by)

        if not destination or not message:
            return ManualSendResult(success=False, error="Missing required fields: to, message")
        try:
            target = parse_channel(channel)
        except ValueError:
            return ManualSendResult(success=False, error=f"Invalid method: {channel}")

        try:
            result = await self._dispatcher.send_via_channel(target, destination, message, subject)
        except ChannelError as exc:
            logger.warning("Test message via %s failed: %s", target.value, exc)
            return ManualSendResult(success=False, channel=target, error=str(exc))

        logger.info("Test message sent via %s (id=%s)", target.value, result.result_id)
        return ManualSendResult(success=True, channel=target, result_id=result.result_id)
