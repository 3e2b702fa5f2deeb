"""
Family Days — Idempotency Ledger.

One entry per (event, offset, time slot, channel, day). A present entry of
any status means the unit was already attempted and must not be sent again
that day. Entries are written once and never updated or deleted.

With atomic claims enabled, a unit is first claimed with a create-if-absent
write to ``deliveryClaims``; only the caller that created the claim sends.
The outcome is then written once to ``notificationLogs``. Without claims the
check-then-record pattern is used and two overlapping runs may both send.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from familydays.data.models import Channel, DeliveryLogEntry, TimeSlot
from familydays.ports.store_port import SERVER_TIMESTAMP

if TYPE_CHECKING:
    from familydays.ports.store_port import DocumentStore

logger = logging.getLogger(__name__)

NOTIFICATION_LOGS = "notificationLogs"
DELIVERY_CLAIMS = "deliveryClaims"


def ledger_key(
    event_id: str,
    offset_days: int,
    time_slot: TimeSlot | str,
    channel: Channel | str,
    day: date,
) -> str:
    """Deterministic key, e.g. ``evt1_3_morning_email_2024-06-12``."""
    return (
        f"{event_id}_{offset_days}_{TimeSlot(time_slot).value}"
        f"_{Channel(channel).value}_{day.isoformat()}"
    )


class DeliveryLedger:
    """Write-once delivery log over a DocumentStore.

    Store failures propagate as StoreError; callers skip the unit.
    """

    def __init__(self, store: DocumentStore, atomic_claim: bool = True) -> None:
        self._store = store
        self._atomic_claim = atomic_claim

    def already_attempted(self, key: str) -> bool:
        if self._store.get(NOTIFICATION_LOGS, key) is not None:
            return True
        return self._atomic_claim and self._store.get(DELIVERY_CLAIMS, key) is not None

    def claim(self, key: str) -> bool:
        """Create the claim marker for ``key``. False when someone else holds it."""
        return self._store.create(
            DELIVERY_CLAIMS, key, {"status": "pending", "claimedAt": SERVER_TIMESTAMP},
        )

    def acquire(self, key: str) -> bool:
        """True when the caller may send for ``key`` now."""
        if self.already_attempted(key):
            return False
        if self._atomic_claim:
            return self.claim(key)
        return True

    def record_attempt(self, key: str, entry: DeliveryLogEntry) -> bool:
        """Write the outcome for ``key``. An existing entry is never overwritten."""
        data = entry.model_dump(mode="json")
        if entry.sent_at is None:
            data["sent_at"] = SERVER_TIMESTAMP
        created = self._store.create(NOTIFICATION_LOGS, key, data)
        if not created:
            logger.warning("Ledger entry %s already exists; keeping the first outcome", key)
        return created

    def get_entry(self, key: str) -> DeliveryLogEntry | None:
        data = self._store.get(NOTIFICATION_LOGS, key)
        return DeliveryLogEntry.model_validate(data) if data is not None else None
