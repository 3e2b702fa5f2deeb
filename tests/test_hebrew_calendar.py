"""Tests for familydays.core.hebrew_calendar — Gregorian/Hebrew conversion."""

from datetime import date, timedelta

import pytest

from familydays.core import hebrew_calendar as hc
from familydays.data.models import HebrewDate


class TestLeapYears:
    @pytest.mark.parametrize("year", [5784, 5782, 5779, 5787])
    def test_leap_years(self, year):
        assert hc.is_leap_year(year) is True
        assert hc.months_in_year(year) == 13

    @pytest.mark.parametrize("year", [5783, 5785, 5786, 5788])
    def test_common_years(self, year):
        assert hc.is_leap_year(year) is False
        assert hc.months_in_year(year) == 12

    def test_seven_leap_years_per_cycle(self):
        assert sum(hc.is_leap_year(y) for y in range(5701, 5720)) == 7


class TestYearStructure:
    def test_year_lengths(self):
        assert hc.days_in_year(5783) == 355
        assert hc.days_in_year(5784) == 383
        assert hc.days_in_year(5785) == 355

    def test_year_length_is_always_valid(self):
        for year in range(5700, 5850):
            assert hc.days_in_year(year) in (353, 354, 355, 383, 384, 385)

    def test_short_cheshvan_and_kislev_in_deficient_year(self):
        assert hc.days_in_month(hc.CHESHVAN, 5784) == 29
        assert hc.days_in_month(hc.KISLEV, 5784) == 29

    def test_long_cheshvan_in_complete_year(self):
        assert hc.days_in_month(hc.CHESHVAN, 5785) == 30
        assert hc.days_in_month(hc.KISLEV, 5785) == 30

    def test_adar_lengths(self):
        assert hc.days_in_month(hc.ADAR_I, 5784) == 30
        assert hc.days_in_month(hc.ADAR_II, 5784) == 29
        assert hc.days_in_month(hc.ADAR_I, 5785) == 29


class TestMonthNames:
    def test_adar_in_common_year(self):
        assert hc.month_name(hc.ADAR_I, 5785) == "Adar"

    def test_adar_i_and_ii_in_leap_year(self):
        assert hc.month_name(hc.ADAR_I, 5784) == "Adar I"
        assert hc.month_name(hc.ADAR_II, 5784) == "Adar II"

    def test_format_hebrew_date(self):
        assert hc.format_hebrew_date(HebrewDate(day=15, month=7, year=5783)) == "15 Tishrei 5783"


class TestToHebrew:
    @pytest.mark.parametrize(
        "gregorian, expected",
        [
            (date(2024, 10, 3), (1, 7, 5785)),
            (date(2024, 10, 17), (15, 7, 5785)),
            (date(2023, 9, 30), (15, 7, 5784)),
            (date(2024, 3, 24), (14, 13, 5784)),
            (date(2024, 2, 23), (14, 12, 5784)),
            (date(2025, 3, 14), (14, 12, 5785)),
            (date(2024, 4, 23), (15, 1, 5784)),
            (date(2024, 12, 25), (25, 9, 5785)),
        ],
    )
    def test_known_dates(self, gregorian, expected):
        hebrew = hc.to_hebrew(gregorian)
        assert (hebrew.day, hebrew.month, hebrew.year) == expected

    def test_day_before_new_year_is_elul(self):
        hebrew = hc.to_hebrew(date(2024, 10, 2))
        assert (hebrew.day, hebrew.month, hebrew.year) == (29, hc.ELUL, 5784)

    def test_today_hebrew_uses_given_day(self):
        assert hc.today_hebrew(date(2024, 10, 3)) == HebrewDate(day=1, month=7, year=5785)


class TestToGregorian:
    def test_known_dates(self):
        assert hc.to_gregorian(HebrewDate(day=1, month=7, year=5785)) == date(2024, 10, 3)
        assert hc.to_gregorian(HebrewDate(day=15, month=1, year=5785)) == date(2025, 4, 13)
        assert hc.to_gregorian(HebrewDate(day=25, month=9, year=5784)) == date(2023, 12, 8)

    def test_round_trip(self):
        day = date(2019, 1, 1)
        while day < date(2027, 1, 1):
            assert hc.to_gregorian(hc.to_hebrew(day)) == day
            day += timedelta(days=3)

    def test_consecutive_days_stay_consecutive(self):
        day = date(2024, 9, 1)
        prev = hc.to_hebrew(day)
        for _ in range(60):
            day += timedelta(days=1)
            current = hc.to_hebrew(day)
            assert hc.to_gregorian(current) - hc.to_gregorian(prev) == timedelta(days=1)
            prev = current


class TestAdarPolicy:
    def test_common_year_adar_moves_to_adar_ii_in_leap_year(self):
        assert hc.next_occurrence(14, hc.ADAR_I, date(2024, 1, 1)) == date(2024, 3, 24)

    def test_leap_year_adar_i_stays_in_adar_i(self):
        assert hc.next_occurrence(14, hc.ADAR_I, date(2024, 1, 1), origin_leap=True) == date(2024, 2, 23)

    def test_adar_ii_falls_back_to_adar_in_common_year(self):
        assert hc.next_occurrence(14, hc.ADAR_II, date(2024, 10, 1)) == date(2025, 3, 14)

    def test_observed_month(self):
        assert hc.observed_month(hc.ADAR_II, 5785) == hc.ADAR_I
        assert hc.observed_month(hc.ADAR_II, 5784) == hc.ADAR_II
        assert hc.observed_month(hc.ADAR_I, 5784) == hc.ADAR_II
        assert hc.observed_month(hc.ADAR_I, 5784, origin_leap=True) == hc.ADAR_I
        assert hc.observed_month(hc.NISAN, 5784) == hc.NISAN


class TestShortMonthPolicy:
    def test_missing_30_cheshvan_rolls_to_1_kislev(self):
        assert hc.occurrence_in_year(30, hc.CHESHVAN, 5784) == date(2023, 11, 14)
        assert hc.occurrence_in_year(30, hc.CHESHVAN, 5784) == hc.to_gregorian(
            HebrewDate(day=1, month=hc.KISLEV, year=5784)
        )

    def test_existing_30_cheshvan_is_kept(self):
        observed = hc.occurrence_in_year(30, hc.CHESHVAN, 5785)
        assert hc.to_hebrew(observed) == HebrewDate(day=30, month=hc.CHESHVAN, year=5785)

    def test_out_of_range_input_raises(self):
        with pytest.raises(ValueError):
            hc.occurrence_in_year(31, hc.NISAN, 5785)
        with pytest.raises(ValueError):
            hc.occurrence_in_year(1, 14, 5785)


class TestNextOccurrence:
    def test_same_day_counts(self):
        assert hc.next_occurrence(15, hc.TISHREI, date(2024, 10, 17)) == date(2024, 10, 17)

    def test_passed_occurrence_moves_to_next_year(self):
        assert hc.next_occurrence(15, hc.TISHREI, date(2024, 10, 18)) == date(2025, 10, 7)

    def test_never_before_reference_and_within_a_year(self):
        reference = date(2023, 1, 1)
        for _ in range(120):
            result = hc.next_occurrence(15, hc.TISHREI, reference)
            assert reference <= result <= reference + timedelta(days=385)
            reference += timedelta(days=7)

    def test_monotonic_in_reference(self):
        reference = date(2023, 1, 1)
        previous = hc.next_occurrence(14, hc.ADAR_I, reference)
        for _ in range(200):
            reference += timedelta(days=5)
            current = hc.next_occurrence(14, hc.ADAR_I, reference)
            assert current >= previous
            previous = current
