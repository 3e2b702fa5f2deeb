"""
Family Days — Hebrew Calendar Converter.

Gregorian/Hebrew conversion and leap-year structure come from pyluach.
This module adds the policies for recurring dates on top of it.

A Hebrew day is mapped to the civil day it shares from midnight onward.
The sundown day boundary of the traditional calendar is not modelled.

Month numbering (same as pyluach): 1 = Nisan ... 7 = Tishrei ... 12 = Adar
(Adar I in leap years), 13 = Adar II. The year begins with Tishrei.

Adar policy for recurring dates:
- In a common year, Adar I and Adar II both fall back to Adar (12).
- In a leap year, an Adar date is observed in Adar II (13), unless the
  origin date was itself in a leap year (a true Adar I date).
- A day missing from the target month (30 Cheshvan or 30 Kislev in a short
  year, 30 Adar I folded into a 29-day Adar) rolls forward to the 1st of
  the following month.

No I/O: this module only transforms data.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from pyluach import dates, hebrewcal

if TYPE_CHECKING:
    from familydays.data.models import HebrewDate

NISAN = 1
IYYAR = 2
SIVAN = 3
TAMUZ = 4
AV = 5
ELUL = 6
TISHREI = 7
CHESHVAN = 8
KISLEV = 9
TEVET = 10
SHVAT = 11
ADAR_I = 12
ADAR_II = 13

_MONTH_NAMES = {
    NISAN: "Nisan",
    IYYAR: "Iyyar",
    SIVAN: "Sivan",
    TAMUZ: "Tamuz",
    AV: "Av",
    ELUL: "Elul",
    TISHREI: "Tishrei",
    CHESHVAN: "Cheshvan",
    KISLEV: "Kislev",
    TEVET: "Tevet",
    SHVAT: "Sh'vat",
    ADAR_I: "Adar",
    ADAR_II: "Adar II",
}


# ---------------------------------------------------------------------------
# Year structure
# ---------------------------------------------------------------------------


def is_leap_year(year: int) -> bool:
    return hebrewcal.Year(year).leap


def months_in_year(year: int) -> int:
    return 13 if is_leap_year(year) else 12


def _first_of_month(year: int, month: int) -> date:
    return dates.HebrewDate(year, month, 1).to_pydate()


def days_in_year(year: int) -> int:
    return (_first_of_month(year + 1, TISHREI) - _first_of_month(year, TISHREI)).days


def days_in_month(month: int, year: int) -> int:
    """Number of days in ``month`` of Hebrew ``year`` (29 or 30)."""
    if month == ADAR_II:
        return 29
    if month == ELUL:
        following = _first_of_month(year + 1, TISHREI)
    elif month == months_in_year(year):
        following = _first_of_month(year, NISAN)
    else:
        following = _first_of_month(year, month + 1)
    return (following - _first_of_month(year, month)).days


def month_name(month: int, year: int) -> str:
    """Display name of ``month`` in ``year``; month 12 reads "Adar I" in leap years."""
    if month == ADAR_I and is_leap_year(year):
        return "Adar I"
    return _MONTH_NAMES[month]


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def to_hebrew(gregorian: date) -> HebrewDate:
    """Convert a Gregorian day to its Hebrew date."""
    from familydays.data.models import HebrewDate

    hebrew = dates.HebrewDate.from_pydate(gregorian)
    return HebrewDate(day=hebrew.day, month=hebrew.month, year=hebrew.year)


def to_gregorian(hebrew: HebrewDate) -> date:
    """Convert a Hebrew date to the civil day it starts at midnight.

    Raises ValueError when the date falls outside ``datetime.date``'s range.
    """
    return dates.HebrewDate(hebrew.year, hebrew.month, hebrew.day).to_pydate()


def observed_month(month: int, year: int, origin_leap: bool = False) -> int:
    """Map a stored month onto the months that exist in ``year`` (Adar policy)."""
    if month == ADAR_II:
        return ADAR_II if is_leap_year(year) else ADAR_I
    if month == ADAR_I and is_leap_year(year) and not origin_leap:
        return ADAR_II
    return month


def occurrence_in_year(day: int, month: int, year: int, origin_leap: bool = False) -> date:
    """Gregorian day on which day/month is observed in Hebrew ``year``."""
    _check_day_month(day, month)
    target = observed_month(month, year, origin_leap)
    return _first_of_month(year, target) + timedelta(days=day - 1)


def next_occurrence(
    day: int,
    month: int,
    reference: date,
    origin_leap: bool = False,
) -> date:
    """First Gregorian day on or after ``reference`` observing Hebrew day/month.

    The candidate is built in the Hebrew year containing ``reference``; if it
    falls strictly before ``reference``, the following Hebrew year is used.
    """
    year = dates.HebrewDate.from_pydate(reference).year
    candidate = occurrence_in_year(day, month, year, origin_leap)
    if candidate < reference:
        candidate = occurrence_in_year(day, month, year + 1, origin_leap)
    return candidate


def format_hebrew_date(hebrew: HebrewDate) -> str:
    """Render a Hebrew date, e.g. "15 Tishrei 5783"."""
    return f"{hebrew.day} {month_name(hebrew.month, hebrew.year)} {hebrew.year}"


def today_hebrew(today: date | None = None) -> HebrewDate:
    return to_hebrew(today or date.today())


def _check_day_month(day: int, month: int) -> None:
    if not 1 <= month <= 13:
        raise ValueError(f"Hebrew month out of range: {month}")
    if not 1 <= day <= 30:
        raise ValueError(f"Hebrew day out of range: {day}")
