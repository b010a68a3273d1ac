"""
Tests for the pay period calendar helpers.
"""

from datetime import date
from decimal import Decimal

import pytest

from payroll_kernel.domain.calendar import (
    count_working_days,
    expected_hours,
    month_bounds,
    period_name,
)


class TestCountWorkingDays:
    @pytest.mark.parametrize(
        "year,month,expected",
        [
            (2025, 1, 23),
            (2025, 2, 20),
            (2025, 3, 21),
            (2024, 2, 21),  # leap year
            (2025, 11, 20),
        ],
    )
    def test_calendar_months(self, year, month, expected):
        start, end = month_bounds(year, month)
        assert count_working_days(start, end) == expected

    def test_bounds_inclusive(self):
        # Monday through Friday
        assert count_working_days(date(2025, 1, 6), date(2025, 1, 10)) == 5

    def test_weekend_only(self):
        assert count_working_days(date(2025, 1, 4), date(2025, 1, 5)) == 0

    def test_single_day(self):
        assert count_working_days(date(2025, 1, 6), date(2025, 1, 6)) == 1

    def test_reversed_range(self):
        assert count_working_days(date(2025, 1, 31), date(2025, 1, 1)) == 0


class TestMonthHelpers:
    def test_month_bounds(self):
        assert month_bounds(2025, 2) == (date(2025, 2, 1), date(2025, 2, 28))
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_period_name(self):
        assert period_name(2025, 1) == "January 2025"

    def test_expected_hours(self):
        assert expected_hours(23) == Decimal("184")
        assert expected_hours(20, Decimal("7.5")) == Decimal("150.0")
