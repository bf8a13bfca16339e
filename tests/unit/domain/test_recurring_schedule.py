"""Unit tests for recurring schedule arithmetic"""

import pytest
from datetime import date

from receivables.domain.recurring_template import Frequency
from receivables.domain.schedule import is_past_end, next_occurrence, period_delta


class TestNextOccurrence:

    @pytest.mark.parametrize("frequency,current,expected", [
        (Frequency.DAILY, date(2025, 1, 31), date(2025, 2, 1)),
        (Frequency.WEEKLY, date(2025, 1, 31), date(2025, 2, 7)),
        (Frequency.MONTHLY, date(2025, 1, 15), date(2025, 2, 15)),
        (Frequency.QUARTERLY, date(2025, 1, 15), date(2025, 4, 15)),
        (Frequency.YEARLY, date(2025, 1, 15), date(2026, 1, 15)),
    ])
    def test_one_period(self, frequency, current, expected):
        assert next_occurrence(current, frequency) == expected

    def test_month_end_clamps(self):
        """2025-01-31 monthly -> 2025-02-28, no rollover into March"""
        assert next_occurrence(date(2025, 1, 31), Frequency.MONTHLY) == date(2025, 2, 28)

    def test_month_end_anchor_does_not_drift(self):
        """
        Given: A monthly schedule anchored on the 31st
        When: It is advanced three times
        Then: Each date is the last day of its month, not the 28th
        """
        current = date(2025, 1, 31)
        dates = []
        for _ in range(3):
            current = next_occurrence(current, Frequency.MONTHLY, anchor_day=31)
            dates.append(current)

        assert dates == [date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30)]

    def test_anchor_applies_to_quarterly_and_yearly(self):
        assert next_occurrence(date(2026, 2, 28), Frequency.QUARTERLY, anchor_day=30) == date(2026, 5, 30)
        assert next_occurrence(date(2027, 2, 28), Frequency.YEARLY, anchor_day=29) == date(2028, 2, 29)

    def test_anchor_ignored_for_daily_and_weekly(self):
        assert next_occurrence(date(2025, 2, 28), Frequency.DAILY, anchor_day=31) == date(2025, 3, 1)
        assert next_occurrence(date(2025, 2, 28), Frequency.WEEKLY, anchor_day=31) == date(2025, 3, 7)

    def test_month_end_leap_year(self):
        assert next_occurrence(date(2024, 1, 31), Frequency.MONTHLY) == date(2024, 2, 29)

    def test_quarterly_from_month_end(self):
        assert next_occurrence(date(2025, 11, 30), Frequency.QUARTERLY) == date(2026, 2, 28)

    def test_yearly_from_leap_day(self):
        assert next_occurrence(date(2024, 2, 29), Frequency.YEARLY) == date(2025, 2, 28)

    def test_interval_multiplies_period(self):
        assert next_occurrence(date(2025, 1, 10), Frequency.WEEKLY, interval=2) == date(2025, 1, 24)
        assert next_occurrence(date(2025, 1, 10), Frequency.MONTHLY, interval=6) == date(2025, 7, 10)

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            period_delta(Frequency.MONTHLY, 0)


class TestIsPastEnd:

    def test_no_end_date(self):
        assert is_past_end(date(2030, 1, 1), None) is False

    def test_on_end_date_is_not_past(self):
        assert is_past_end(date(2025, 6, 30), date(2025, 6, 30)) is False

    def test_after_end_date(self):
        assert is_past_end(date(2025, 7, 1), date(2025, 6, 30)) is True
