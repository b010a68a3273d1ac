"""
Attendance Aggregation (``payroll_engines.attendance_aggregation``).

Responsibility
--------------
Sum one employee's daily credited hours over a pay period into worked,
regular and overtime totals plus a working-day count.

* regular  = min(daily total, max_daily_hours)
* overtime = max(0, daily total - max_daily_hours)

Late hours
----------
``total_late_hours`` is always 0.  Attendance punches carry no tardiness
source (grace rounding already removes late minutes from worked hours),
so there is nothing to aggregate.  The field exists so a late-hour source
can be added without changing the record layout.

Architecture position
---------------------
**Engines layer** -- pure.  ZERO I/O.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from payroll_config.schema import AttendanceConfig
from payroll_engines.hours_calculator import DailyHoursResult, calculate_from_sessions
from payroll_engines.tracer import traced_engine
from payroll_kernel.db.types import ZERO, round_hours
from payroll_kernel.domain.dtos import AttendanceDay, AttendanceSession
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.attendance_aggregation")


@dataclass(frozen=True)
class DailyAttendance:
    work_date: date
    hours: DailyHoursResult
    regular_hours: Decimal
    overtime_hours: Decimal


@dataclass(frozen=True)
class AttendanceTotals:
    """Aggregated attendance for one employee over one date range."""

    total_worked_hours: Decimal
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_late_hours: Decimal
    working_days: int
    days: tuple[DailyAttendance, ...] = ()


EMPTY_TOTALS = AttendanceTotals(
    total_worked_hours=ZERO,
    total_regular_hours=ZERO,
    total_overtime_hours=ZERO,
    total_late_hours=ZERO,
    working_days=0,
)


def split_daily_hours(
    daily_total: Decimal,
    max_daily_hours: Decimal,
) -> tuple[Decimal, Decimal]:
    """Split a day's hours into (regular, overtime)."""
    regular = min(daily_total, max_daily_hours)
    overtime = max(ZERO, daily_total - max_daily_hours)
    return regular, overtime


@traced_engine("attendance_aggregation", "1.0", fingerprint_fields=("days",))
def aggregate_attendance(
    days: Iterable[AttendanceDay],
    config: AttendanceConfig | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> AttendanceTotals:
    """Aggregate credited hours across days.

    Days sharing a ``work_date`` are merged before hours are credited.
    When ``start_date``/``end_date`` are given, days outside the inclusive
    range are ignored.

    Returns:
        AttendanceTotals with totals rounded to 2 decimals and days sorted
        by date.
    """
    config = config or AttendanceConfig()

    sessions_by_date: dict[date, list[AttendanceSession]] = defaultdict(list)
    for day in days:
        if start_date is not None and day.work_date < start_date:
            continue
        if end_date is not None and day.work_date > end_date:
            continue
        sessions_by_date[day.work_date].extend(day.sessions)

    if not sessions_by_date:
        return EMPTY_TOTALS

    daily: list[DailyAttendance] = []
    worked = regular = overtime = ZERO
    working_days = 0

    for work_date in sorted(sessions_by_date):
        result = calculate_from_sessions(sessions_by_date[work_date], config)
        day_regular, day_overtime = split_daily_hours(
            result.total_hours, config.max_daily_hours,
        )
        daily.append(
            DailyAttendance(
                work_date=work_date,
                hours=result,
                regular_hours=day_regular,
                overtime_hours=day_overtime,
            )
        )
        worked += result.total_hours
        regular += day_regular
        overtime += day_overtime
        if result.total_hours > 0:
            working_days += 1

    totals = AttendanceTotals(
        total_worked_hours=round_hours(worked),
        total_regular_hours=round_hours(regular),
        total_overtime_hours=round_hours(overtime),
        total_late_hours=ZERO,
        working_days=working_days,
        days=tuple(daily),
    )

    logger.debug(
        "attendance_aggregated",
        extra={
            "day_count": len(daily),
            "working_days": working_days,
            "total_worked_hours": str(totals.total_worked_hours),
            "total_overtime_hours": str(totals.total_overtime_hours),
        },
    )
    return totals
