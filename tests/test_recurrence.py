"""Tests for the recurrence projector."""

from datetime import date, timedelta

import pytest

from finflow.exceptions import InvalidFrequency
from finflow.models import Frequency
from finflow.recurrence import (
    advance_once,
    next_occurrence,
    occurrences_between,
    shift_months,
)

ALL_FREQUENCIES = list(Frequency)


class TestShiftMonths:
    """Calendar month arithmetic with clamping."""

    def test_clamps_to_leap_february(self):
        assert shift_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_clamps_to_common_february(self):
        assert shift_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_crosses_year_boundary(self):
        assert shift_months(date(2023, 11, 15), 3) == date(2024, 2, 15)

    def test_anchor_day_restores_day(self):
        assert shift_months(date(2024, 2, 29), 1, anchor_day=31) == date(2024, 3, 31)


class TestNextOccurrence:
    """Projection of the next due date."""

    def test_monthly_leap_clamp(self):
        """Jan 31 monthly lands on Feb 29 in a leap year."""
        assert next_occurrence(date(2024, 1, 31), Frequency.MONTHLY, date(2024, 2, 1)) == date(2024, 2, 29)

    def test_monthly_after_clamped_month(self):
        """The day-of-month comes back once the month is long enough."""
        assert next_occurrence(date(2024, 1, 31), Frequency.MONTHLY, date(2024, 3, 1)) == date(2024, 3, 31)

    def test_future_start_returned_unchanged(self):
        start = date(2025, 6, 1)
        for frequency in ALL_FREQUENCIES:
            assert next_occurrence(start, frequency, date(2025, 1, 1)) == start

    def test_reference_equal_to_start_moves_one_period(self):
        start = date(2024, 5, 10)
        assert next_occurrence(start, Frequency.WEEKLY, start) == date(2024, 5, 17)
        assert next_occurrence(start, Frequency.MONTHLY, start) == date(2024, 6, 10)

    def test_daily(self):
        assert next_occurrence(date(2024, 1, 1), "daily", date(2024, 1, 10)) == date(2024, 1, 11)

    def test_weekly(self):
        # 2024-01-01 + 7k: Jan 29 <= ref, Feb 5 > ref
        assert next_occurrence(date(2024, 1, 1), Frequency.WEEKLY, date(2024, 2, 1)) == date(2024, 2, 5)

    def test_reference_on_occurrence_is_skipped(self):
        assert next_occurrence(date(2024, 1, 1), Frequency.WEEKLY, date(2024, 1, 29)) == date(2024, 2, 5)

    def test_quarterly(self):
        assert next_occurrence(date(2024, 1, 15), Frequency.QUARTERLY, date(2024, 3, 20)) == date(2024, 4, 15)
        assert next_occurrence(date(2024, 1, 15), Frequency.QUARTERLY, date(2024, 4, 15)) == date(2024, 7, 15)

    def test_yearly_from_leap_day(self):
        assert next_occurrence(date(2024, 2, 29), Frequency.YEARLY, date(2024, 3, 1)) == date(2025, 2, 28)
        assert next_occurrence(date(2024, 2, 29), Frequency.YEARLY, date(2027, 3, 1)) == date(2028, 2, 29)

    def test_very_old_start(self):
        """Closed form: centuries of daily steps resolve immediately."""
        assert next_occurrence(date(1900, 1, 1), Frequency.DAILY, date(2024, 6, 30)) == date(2024, 7, 1)

    def test_result_strictly_after_reference(self):
        """Property: result > reference whenever start <= reference."""
        starts = [date(2023, 1, 31), date(2023, 2, 28), date(2024, 2, 29), date(2020, 12, 31)]
        references = [date(2024, 1, 1) + timedelta(days=d) for d in range(0, 400, 17)]
        for start in starts:
            for reference in references:
                for frequency in ALL_FREQUENCIES:
                    result = next_occurrence(start, frequency, reference)
                    assert result > reference

    def test_result_is_earliest(self):
        """Stepping back one period lands on or before the reference."""
        start = date(2023, 1, 31)
        reference = date(2024, 5, 30)
        result = next_occurrence(start, Frequency.MONTHLY, reference)
        assert result == date(2024, 5, 31)
        assert shift_months(start, 15) <= reference

    def test_unknown_frequency(self):
        with pytest.raises(InvalidFrequency):
            next_occurrence(date(2024, 1, 1), "fortnightly", date(2024, 2, 1))


class TestAdvanceOnce:
    """Single-period advance used by fulfilment."""

    def test_daily_and_weekly(self):
        assert advance_once(date(2024, 12, 31), Frequency.DAILY) == date(2025, 1, 1)
        assert advance_once(date(2024, 12, 28), Frequency.WEEKLY) == date(2025, 1, 4)

    def test_monthly_without_anchor_keeps_day(self):
        assert advance_once(date(2024, 2, 29), Frequency.MONTHLY) == date(2024, 3, 29)

    def test_monthly_with_anchor_restores_day(self):
        assert advance_once(date(2024, 2, 29), Frequency.MONTHLY, anchor_day=31) == date(2024, 3, 31)

    def test_snoozed_date_ignores_anchor(self):
        """A due date moved off the anchored schedule continues from the override."""
        assert advance_once(date(2024, 3, 5), Frequency.MONTHLY, anchor_day=31) == date(2024, 4, 5)

    def test_quarterly_and_yearly(self):
        assert advance_once(date(2024, 11, 30), Frequency.QUARTERLY) == date(2025, 2, 28)
        assert advance_once(date(2024, 2, 29), Frequency.YEARLY, anchor_day=29) == date(2025, 2, 28)

    def test_matches_projection_sequence(self):
        """Repeated advance_once reproduces next_occurrence stepping from the start."""
        for start in [date(2024, 1, 31), date(2023, 8, 30), date(2024, 2, 29), date(2024, 1, 1)]:
            for frequency in ALL_FREQUENCIES:
                current = start
                for _ in range(30):
                    advanced = advance_once(current, frequency, anchor_day=start.day)
                    assert advanced == next_occurrence(start, frequency, current)
                    current = advanced


class TestOccurrencesBetween:
    """Occurrence windows."""

    def test_monthly_window(self):
        result = occurrences_between(
            date(2024, 1, 31), Frequency.MONTHLY, date(2024, 2, 1), date(2024, 5, 31)
        )
        assert result == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30), date(2024, 5, 31)]

    def test_includes_first_bound(self):
        result = occurrences_between(
            date(2024, 1, 1), Frequency.WEEKLY, date(2024, 1, 8), date(2024, 1, 15)
        )
        assert result == [date(2024, 1, 8), date(2024, 1, 15)]

    def test_empty_window(self):
        assert occurrences_between(
            date(2024, 1, 1), Frequency.YEARLY, date(2024, 2, 1), date(2024, 12, 31)
        ) == []

    def test_from_current_due_date_with_anchor(self):
        """A clamped due date regains the start day on the next step."""
        result = occurrences_between(
            date(2024, 2, 29), Frequency.MONTHLY, date(2024, 2, 29), date(2024, 4, 30),
            anchor_day=31,
        )
        assert result == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]
