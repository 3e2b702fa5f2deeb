"""Tests for familydays.core.reminder_rules — offsets due in a time slot."""

from datetime import date

from familydays.core.reminder_rules import due_offsets
from familydays.core.scheduler import SLOT_FALLBACK_OFFSETS
from familydays.data.models import Event, TimeSlot


def _event(reminders=None, enabled=True) -> Event:
    data = {"id": "e1", "title": "Anniversary", "reference_date": date(2015, 8, 20)}
    if reminders is not None:
        data["reminderConfig"] = {"isEnabled": enabled, "reminders": reminders}
    return Event.model_validate(data)


class TestDueOffsets:
    def test_custom_rules_by_slot(self):
        event = _event([
            {"daysBefore": 0, "timeOfDay": "morning"},
            {"daysBefore": 1, "timeOfDay": "evening"},
        ])
        fallback = {3, 1, 0}
        assert due_offsets(event, TimeSlot.MORNING, fallback) == frozenset({0})
        assert due_offsets(event, TimeSlot.EVENING, fallback) == frozenset({1})
        assert due_offsets(event, TimeSlot.AFTERNOON, fallback) == frozenset()

    def test_duplicate_offsets_collapse(self):
        event = _event([
            {"daysBefore": 2, "timeOfDay": "morning"},
            {"daysBefore": 2, "timeOfDay": "morning"},
        ])
        assert due_offsets(event, TimeSlot.MORNING, {0}) == frozenset({2})

    def test_no_rules_uses_fallback(self):
        event = _event()
        assert due_offsets(event, TimeSlot.MORNING, SLOT_FALLBACK_OFFSETS[TimeSlot.MORNING]) == frozenset({3, 1, 0})
        assert due_offsets(event, TimeSlot.AFTERNOON, SLOT_FALLBACK_OFFSETS[TimeSlot.AFTERNOON]) == frozenset({0})

    def test_empty_rules_use_fallback(self):
        assert due_offsets(_event([]), TimeSlot.EVENING, {0}) == frozenset({0})

    def test_disabled_rules_use_fallback(self):
        event = _event([{"daysBefore": 5, "timeOfDay": "morning"}], enabled=False)
        assert due_offsets(event, TimeSlot.MORNING, {3, 1, 0}) == frozenset({3, 1, 0})
