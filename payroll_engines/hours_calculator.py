"""
Hours Calculator (``payroll_engines.hours_calculator``).

Responsibility
--------------
Turn one day's clock-in/clock-out punches into credited morning and
afternoon hours:

* grace-period rounding of late clock-ins,
* clamping of early clock-ins and late clock-outs to the window,
* a per-session cap.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO database,
ZERO clock reads.  Timestamps and configuration are parameters.

Algorithm (per session)
-----------------------
1. Reduce clock times to seconds since midnight.  Timezone-aware values are
   converted to the configured timezone first; naive values are wall time.
2. Clock-in at or after the window start: effective start is
   ``ceil_to_hour(clock_in - grace)``.  With a 30 minute grace, 08:30 still
   counts as 08:00 and 08:31 becomes 09:00.  Clock-in before the window
   start is clamped to the window start.
3. Effective end is ``min(clock_out, window_end)``; a missing clock-out
   means the session ran to window end.
4. Effective start past the window end credits nothing.
5. Hours are ``min(cap, max(0, end - start))`` rounded to 2 decimals.

A day punched only with a morning clock-in and an afternoon clock-out is
treated as one continuous shift (see ``calculate_hours``).

All arithmetic is on integer seconds, so rounding only happens once.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, time
from decimal import Decimal
from functools import lru_cache
from zoneinfo import ZoneInfo

from payroll_config.schema import AttendanceConfig
from payroll_kernel.db.types import ZERO, round_hours
from payroll_kernel.domain.dtos import AttendanceSession

_SECONDS_PER_HOUR = 3600
_SECONDS_PER_DAY = 86400
_DEFAULT_CONFIG = AttendanceConfig()


@dataclass(frozen=True)
class SessionHours:
    """Credited hours for one half-day session.

    ``effective_start``/``effective_end`` are None when nothing could be
    credited (no clock-in, or effective start past the window end).
    """

    hours: Decimal
    effective_start: time | None = None
    effective_end: time | None = None


NO_HOURS = SessionHours(hours=ZERO)


@dataclass(frozen=True)
class DailyHoursResult:
    """Credited hours for one day."""

    morning: SessionHours
    afternoon: SessionHours
    total_hours: Decimal

    @property
    def morning_hours(self) -> Decimal:
        return self.morning.hours

    @property
    def afternoon_hours(self) -> Decimal:
        return self.afternoon.hours


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@lru_cache(maxsize=16)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def _to_wall_time(value: datetime, tz_name: str) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(_zone(tz_name))


def _seconds_of_day(value: time) -> int:
    return value.hour * _SECONDS_PER_HOUR + value.minute * 60 + value.second


def _time_from_seconds(seconds: int) -> time:
    return time(seconds // _SECONDS_PER_HOUR, (seconds % _SECONDS_PER_HOUR) // 60, seconds % 60)


def _ceil_to_hour(seconds: int) -> int:
    return -(-seconds // _SECONDS_PER_HOUR) * _SECONDS_PER_HOUR


# ---------------------------------------------------------------------------
# Session calculation
# ---------------------------------------------------------------------------


def calculate_session_hours(
    clock_in: datetime | None,
    clock_out: datetime | None,
    window_start: time,
    window_end: time,
    config: AttendanceConfig = _DEFAULT_CONFIG,
) -> SessionHours:
    """Credit hours for one session against one attendance window.

    Args:
        clock_in: Punch-in timestamp, or None when the employee never
            clocked in (credits 0 hours).
        clock_out: Punch-out timestamp, or None (runs to window end).
        window_start: Official window start.
        window_end: Official window end.
        config: Grace period, cap and timezone.

    Returns:
        SessionHours with the credited hours and effective bounds.
    """
    if clock_in is None:
        return NO_HOURS

    local_in = _to_wall_time(clock_in, config.timezone)
    start_of_window = _seconds_of_day(window_start)
    end_of_window = _seconds_of_day(window_end)
    grace = config.grace_period_minutes * 60

    arrived = _seconds_of_day(local_in.time())
    if arrived >= start_of_window:
        effective_start = max(start_of_window, _ceil_to_hour(arrived - grace))
    else:
        effective_start = start_of_window

    if effective_start > end_of_window:
        return NO_HOURS

    if clock_out is None:
        effective_end = end_of_window
    else:
        local_out = _to_wall_time(clock_out, config.timezone)
        left = _seconds_of_day(local_out.time())
        # Clock-out on a later calendar day is past any window end
        left += (local_out.date() - local_in.date()).days * _SECONDS_PER_DAY
        effective_end = min(left, end_of_window)

    worked_seconds = max(0, effective_end - effective_start)
    hours = min(
        config.session_cap_hours,
        Decimal(worked_seconds) / Decimal(_SECONDS_PER_HOUR),
    )

    return SessionHours(
        hours=round_hours(hours),
        effective_start=_time_from_seconds(effective_start),
        effective_end=_time_from_seconds(max(0, effective_end)),
    )


def calculate_hours(
    morning_in: datetime | None,
    morning_out: datetime | None,
    afternoon_in: datetime | None,
    afternoon_out: datetime | None,
    config: AttendanceConfig = _DEFAULT_CONFIG,
) -> DailyHoursResult:
    """Credit morning and afternoon hours for one day.

    A day with a morning clock-in and an afternoon clock-out but no lunch
    punches is one continuous shift: the morning clock-in also opens the
    afternoon session (and is clamped to the afternoon window start).  With
    the default config, in 08:31 / out 18:00 credits 3h (09:00-12:00) plus
    4h (13:00-17:00) = 7h.
    """
    if (
        morning_in is not None
        and morning_out is None
        and afternoon_in is None
        and afternoon_out is not None
    ):
        afternoon_in = morning_in

    morning = calculate_session_hours(
        morning_in, morning_out, config.morning_start, config.morning_end, config,
    )
    afternoon = calculate_session_hours(
        afternoon_in, afternoon_out, config.afternoon_start, config.afternoon_end, config,
    )
    return DailyHoursResult(
        morning=morning,
        afternoon=afternoon,
        total_hours=round_hours(morning.hours + afternoon.hours),
    )


def calculate_from_sessions(
    sessions: Iterable[AttendanceSession],
    config: AttendanceConfig = _DEFAULT_CONFIG,
) -> DailyHoursResult:
    """Credit one day's hours from raw punch rows.

    ``morning_in``/``afternoon_in`` rows supply the clock-in and
    ``morning_out``/``afternoon_out`` rows the clock-out.  A row that
    carries both timestamps contributes both.  With duplicate punches the
    earliest clock-in and the latest clock-out win.
    """
    morning_in: list[datetime] = []
    morning_out: list[datetime] = []
    afternoon_in: list[datetime] = []
    afternoon_out: list[datetime] = []

    for session in sessions:
        ins, outs = (
            (morning_in, morning_out)
            if session.session_type.is_morning
            else (afternoon_in, afternoon_out)
        )
        if session.clock_in is not None:
            ins.append(session.clock_in)
        if session.clock_out is not None:
            outs.append(session.clock_out)

    return calculate_hours(
        min(morning_in) if morning_in else None,
        max(morning_out) if morning_out else None,
        min(afternoon_in) if afternoon_in else None,
        max(afternoon_out) if afternoon_out else None,
        config,
    )
