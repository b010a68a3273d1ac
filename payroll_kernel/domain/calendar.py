"""
Pay Period Calendar (``payroll_kernel.domain.calendar``).

Pure date helpers used when pay periods are created:

* ``count_working_days`` -- Monday to Friday, both bounds inclusive.
* ``month_bounds`` -- first and last day of a calendar month.
* ``period_name`` -- display name such as "January 2025".
* ``expected_hours`` -- working days x hours per day.

No holiday calendar: public holidays count as working days.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from decimal import Decimal

# date.weekday(): Monday == 0 ... Sunday == 6
WORKING_WEEKDAYS = frozenset({0, 1, 2, 3, 4})


def count_working_days(start_date: date, end_date: date) -> int:
    """Number of Monday-Friday days in [start_date, end_date]."""
    if end_date < start_date:
        return 0
    total_days = (end_date - start_date).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * len(WORKING_WEEKDAYS)
    for offset in range(remainder):
        if (start_date + timedelta(days=full_weeks * 7 + offset)).weekday() in WORKING_WEEKDAYS:
            count += 1
    return count


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def period_name(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def expected_hours(working_days: int, hours_per_day: Decimal = Decimal("8")) -> Decimal:
    return Decimal(working_days) * hours_per_day
