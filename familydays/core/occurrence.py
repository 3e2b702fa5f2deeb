"""Occurrence calculator — pure business logic.

Signed number of days from a scheduler "today" to an event's next
occurrence. Recurring Gregorian events repeat on the same month/day;
recurring Hebrew events repeat on the same Hebrew day/month (see
hebrew_calendar for the Adar and short-month policies). One-off events
use their literal date, so the offset may be negative once it has passed.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import calendar
from datetime import date

from familydays.core import hebrew_calendar
from familydays.data.models import DataError, Event


def anniversary_in_year(reference: date, year: int, leap_day_rule: str = "mar1") -> date:
    """The Gregorian anniversary of ``reference`` in ``year``.

    Feb 29 in a common year moves to Mar 1 ("mar1") or Feb 28 ("feb28").
    """
    if reference.month == 2 and reference.day == 29 and not calendar.isleap(year):
        if leap_day_rule == "feb28":
            return date(year, 2, 28)
        if leap_day_rule == "mar1":
            return date(year, 3, 1)
        raise ValueError(f"Unknown leap day rule: {leap_day_rule!r}")
    return reference.replace(year=year)


def next_occurrence_date(event: Event, today: date, leap_day_rule: str = "mar1") -> date:
    """Date of the event's next occurrence on or after ``today``.

    For one-off events this is the literal date, which may be in the past.
    Raises DataError when a Hebrew-calendar event has no Hebrew date, or one
    that cannot be converted.
    """
    if event.uses_hebrew_date:
        hebrew = event.hebrew_date
        if hebrew is None:
            raise DataError(f"Event {event.id!r} uses the Hebrew calendar but has no hebrew_date")
        try:
            if not event.is_recurring:
                return hebrew_calendar.to_gregorian(hebrew)
            return hebrew_calendar.next_occurrence(
                hebrew.day, hebrew.month, today, origin_leap=hebrew.is_leap_year,
            )
        except (ValueError, OverflowError) as exc:
            raise DataError(f"Event {event.id!r} has an unusable hebrew_date: {exc}") from exc

    if not event.is_recurring:
        return event.reference_date

    candidate = anniversary_in_year(event.reference_date, today.year, leap_day_rule)
    if candidate < today:
        candidate = anniversary_in_year(event.reference_date, today.year + 1, leap_day_rule)
    return candidate


def days_until_next_occurrence(event: Event, today: date, leap_day_rule: str = "mar1") -> int:
    """Whole days from ``today`` to the next occurrence (0 = today)."""
    return (next_occurrence_date(event, today, leap_day_rule) - today).days
