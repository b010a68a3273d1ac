"""
Module: payroll_engines
Responsibility:
    Re-exports the pure calculation functions of the payroll engine.  This
    is the import surface for ``payroll_services`` and ``payroll_batch``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import ``payroll_kernel.domain``, ``payroll_kernel.db.types``,
    ``payroll_kernel.logging_config`` and ``payroll_config.schema``.
    MUST NOT import ``payroll_services`` or ``payroll_batch``.

Invariants enforced:
    - Purity: engines never read a clock; dates are parameters.
    - Decimal-only arithmetic for hours and money.
    - Determinism: identical inputs always produce identical outputs.
"""

from payroll_engines.amortization import (
    AmortizationResult,
    DeductionInstallment,
    amortize_balances,
    compute_installment,
)
from payroll_engines.attendance_aggregation import (
    AttendanceTotals,
    DailyAttendance,
    aggregate_attendance,
    split_daily_hours,
)
from payroll_engines.benefits import BenefitLine, BenefitResult, resolve_benefits
from payroll_engines.hours_calculator import (
    DailyHoursResult,
    SessionHours,
    calculate_from_sessions,
    calculate_hours,
    calculate_session_hours,
)
from payroll_engines.leave_policy import (
    LeavePayLine,
    LeavePaymentPolicy,
    PaidLeaveResult,
    compute_paid_leave,
    overlap_days,
)
from payroll_engines.standing_deductions import (
    StandingDeductionLine,
    StandingDeductionResult,
    apply_standing_deductions,
    compute_standing_amount,
)

__all__ = [
    "AmortizationResult",
    "AttendanceTotals",
    "BenefitLine",
    "BenefitResult",
    "DailyAttendance",
    "DailyHoursResult",
    "DeductionInstallment",
    "LeavePayLine",
    "LeavePaymentPolicy",
    "PaidLeaveResult",
    "SessionHours",
    "StandingDeductionLine",
    "StandingDeductionResult",
    "aggregate_attendance",
    "amortize_balances",
    "apply_standing_deductions",
    "calculate_from_sessions",
    "calculate_hours",
    "calculate_session_hours",
    "compute_installment",
    "compute_paid_leave",
    "compute_standing_amount",
    "overlap_days",
    "resolve_benefits",
    "split_daily_hours",
]
