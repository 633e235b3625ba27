"""
Tests for working-day calendar arithmetic.
"""

from datetime import date

from sprint_metrics.analytics.calculators.working_calendar import (
    date_range,
    ideal_remaining,
    is_working_day,
    total_working_days,
    weekday_index,
    working_days_elapsed,
)

WEEKDAYS = (1, 2, 3, 4, 5)


class TestWeekdays:
    """Test weekday conventions"""

    def test_sunday_is_zero(self):
        """Test 0 = Sunday, 6 = Saturday"""
        assert weekday_index(date(2025, 3, 9)) == 0  # Sunday
        assert weekday_index(date(2025, 3, 10)) == 1  # Monday
        assert weekday_index(date(2025, 3, 15)) == 6  # Saturday

    def test_is_working_day(self):
        """Test working weekdays and holidays"""
        assert is_working_day(date(2025, 3, 10), WEEKDAYS)
        assert not is_working_day(date(2025, 3, 15), WEEKDAYS)
        assert not is_working_day(date(2025, 3, 10), WEEKDAYS, holidays={date(2025, 3, 10)})


class TestCounting:
    """Test working day counts"""

    def test_date_range_is_inclusive(self):
        """Test both ends are included"""
        days = date_range(date(2025, 3, 10), date(2025, 3, 12))
        assert days == [date(2025, 3, 10), date(2025, 3, 11), date(2025, 3, 12)]
        assert date_range(date(2025, 3, 12), date(2025, 3, 10)) == []

    def test_total_working_days_two_weeks(self):
        """Test a Monday..Friday two-week sprint has 10 working days"""
        assert total_working_days(date(2025, 3, 10), date(2025, 3, 21), WEEKDAYS) == 10

    def test_holidays_reduce_total(self):
        """Test holidays on working days are excluded"""
        holidays = {date(2025, 3, 14), date(2025, 3, 15)}  # Friday and Saturday
        assert total_working_days(date(2025, 3, 10), date(2025, 3, 21), WEEKDAYS, holidays) == 9

    def test_elapsed(self):
        """Test elapsed count is inclusive of the reference day"""
        assert working_days_elapsed(date(2025, 3, 10), date(2025, 3, 12), WEEKDAYS) == 3
        assert working_days_elapsed(date(2025, 3, 10), date(2025, 3, 16), WEEKDAYS) == 5

    def test_elapsed_before_start_is_zero(self):
        """Test reference day before the sprint"""
        assert working_days_elapsed(date(2025, 3, 10), date(2025, 3, 1), WEEKDAYS) == 0

    def test_no_working_days(self):
        """Test an empty working set"""
        assert total_working_days(date(2025, 3, 10), date(2025, 3, 21), ()) == 0


class TestIdealRemaining:
    """Test the ideal trajectory"""

    def test_linear_decay(self):
        """Test halfway through the working days leaves half the scope"""
        assert ideal_remaining(50, 5, 10) == 25
        assert ideal_remaining(50, 10, 10) == 0
        assert ideal_remaining(50, 0, 10) == 50

    def test_never_negative(self):
        """Test overshooting the working days clamps at 0"""
        assert ideal_remaining(50, 12, 10) == 0

    def test_zero_working_days_keeps_scope(self):
        """Test no division by zero"""
        assert ideal_remaining(50, 0, 0) == 50
