"""Reminder rule evaluator — which day-offsets fire in a given time slot."""

from __future__ import annotations

from collections.abc import Iterable

from familydays.data.models import Event, TimeSlot


def due_offsets(
    event: Event,
    time_slot: TimeSlot,
    fallback_offsets: Iterable[int],
) -> frozenset[int]:
    """Offsets (days before the occurrence) that fire for ``event`` in ``time_slot``.

    Custom rules win when the event has any enabled; an event whose rules
    only name other slots fires nothing in this one. Otherwise the slot's
    ``fallback_offsets`` apply.
    """
    rules = event.reminder_rules
    if not rules:
        return frozenset(fallback_offsets)
    return frozenset(rule.offset_days for rule in rules if rule.time_slot == time_slot)
