"""
Payroll Configuration Schema (``payroll_config.schema``).

Frozen dataclasses describing the tunable parts of the payroll engine:

* ``AttendanceConfig`` -- morning/afternoon windows, grace period,
  per-session cap, daily regular-hour threshold, local timezone.
* ``LeavePolicyDef`` -- one row of the leave payment table.
* ``PayrollEngineConfig`` -- the assembled configuration handed to the
  employee calculator and the batch generator.

Every dataclass validates itself in ``__post_init__`` and raises
``InvalidPayrollConfigError`` listing all problems found, not just the
first one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Self

from payroll_kernel.exceptions import InvalidPayrollConfigError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.schema")


@dataclass(frozen=True)
class AttendanceConfig:
    """
    Attendance windows and hour-crediting rules.

    Defaults: morning 08:00-12:00, afternoon 13:00-17:00, 30 minute grace,
    4 hour cap per session, 8 regular hours per day, Asia/Manila wall time.
    """

    morning_start: time = time(8, 0)
    morning_end: time = time(12, 0)
    afternoon_start: time = time(13, 0)
    afternoon_end: time = time(17, 0)
    grace_period_minutes: int = 30
    session_cap_hours: Decimal = Decimal("4")
    max_daily_hours: Decimal = Decimal("8")
    timezone: str = "Asia/Manila"

    def __post_init__(self):
        errors = self.validate()
        if errors:
            raise InvalidPayrollConfigError(errors)

    def validate(self) -> list[str]:
        """Return every validation problem (empty list when valid)."""
        errors: list[str] = []
        if self.morning_start >= self.morning_end:
            errors.append("morning_start must be before morning_end")
        if self.afternoon_start >= self.afternoon_end:
            errors.append("afternoon_start must be before afternoon_end")
        if self.morning_end >= self.afternoon_start:
            errors.append("morning_end must be before afternoon_start")
        if not 0 <= self.grace_period_minutes <= 60:
            errors.append("grace_period_minutes must be between 0 and 60")
        if not Decimal("0") < self.session_cap_hours <= Decimal("12"):
            errors.append("session_cap_hours must be greater than 0 and at most 12")
        if not Decimal("0") < self.max_daily_hours <= Decimal("24"):
            errors.append("max_daily_hours must be greater than 0 and at most 24")
        if not self.timezone:
            errors.append("timezone must not be empty")
        return errors


@dataclass(frozen=True)
class LeavePolicyDef:
    """Payment rule for one leave type.

    ``max_paid_days_per_year`` is declared but not enforced across pay
    periods; see ``payroll_engines.leave_policy``.
    """

    leave_type: str
    is_paid: bool
    payment_percentage: Decimal
    max_paid_days_per_year: int | None = None

    def __post_init__(self):
        errors: list[str] = []
        if not self.leave_type:
            errors.append("leave_type must not be empty")
        if not Decimal("0") <= self.payment_percentage <= Decimal("100"):
            errors.append(
                f"{self.leave_type}: payment_percentage must be between 0 and 100"
            )
        if not self.is_paid and self.payment_percentage != 0:
            errors.append(f"{self.leave_type}: unpaid leave must have payment_percentage 0")
        if self.max_paid_days_per_year is not None and self.max_paid_days_per_year < 0:
            errors.append(f"{self.leave_type}: max_paid_days_per_year cannot be negative")
        if errors:
            raise InvalidPayrollConfigError(errors)


DEFAULT_LEAVE_POLICIES: tuple[LeavePolicyDef, ...] = (
    LeavePolicyDef("vacation", True, Decimal("100")),
    LeavePolicyDef("sick", True, Decimal("100"), max_paid_days_per_year=10),
    LeavePolicyDef("maternity", True, Decimal("100")),
    LeavePolicyDef("paternity", True, Decimal("100")),
    LeavePolicyDef("bereavement", True, Decimal("100"), max_paid_days_per_year=3),
    LeavePolicyDef("personal", False, Decimal("0")),
    LeavePolicyDef("other", False, Decimal("0")),
)


@dataclass(frozen=True)
class PayrollEngineConfig:
    """
    Configuration for the payroll engine as a whole.

    Override at instantiation, or load from YAML through
    ``payroll_config.get_active_config()``:

        config = PayrollEngineConfig(
            attendance=AttendanceConfig(grace_period_minutes=15),
            hours_per_day=Decimal("8"),
        )
    """

    attendance: AttendanceConfig = field(default_factory=AttendanceConfig)
    leave_policies: tuple[LeavePolicyDef, ...] = DEFAULT_LEAVE_POLICIES
    # Hours credited per working day and per paid leave day
    hours_per_day: Decimal = Decimal("8")

    def __post_init__(self):
        errors: list[str] = []
        if self.hours_per_day <= 0:
            errors.append("hours_per_day must be positive")
        seen: set[str] = set()
        for policy in self.leave_policies:
            key = policy.leave_type.lower()
            if key in seen:
                errors.append(f"duplicate leave policy for '{policy.leave_type}'")
            seen.add(key)
        if errors:
            raise InvalidPayrollConfigError(errors)
        logger.debug(
            "payroll_config_initialized",
            extra={
                "hours_per_day": str(self.hours_per_day),
                "leave_policy_count": len(self.leave_policies),
                "timezone": self.attendance.timezone,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create a config with all default values."""
        return cls()
