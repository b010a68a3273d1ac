"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable data structures that cross the boundary between persistence
    (models, selectors) and calculation (engines, the employee calculator).
    Inputs: EmployeeInfo, PayPeriodInfo, AttendanceDay/AttendanceSession,
    LeaveGrant, DeductionBalanceInfo, DeductionTypeInfo,
    BenefitAssignmentInfo.
    Outputs: PayrollRecordInfo, PayrollDeductionLineInfo,
    PayrollApprovalInfo, ApprovalWorkflowStatus, PayrollSummary.
    Write-side values: PayrollRecordValues, DeductionLineValues,
    ApproverAssignment.

Architecture position:
    Kernel > Domain -- pure core, zero I/O.  Engines import from here;
    nothing here imports SQLAlchemy.

Invariants enforced:
    - All DTOs are frozen dataclasses; collections are tuples.
    - Monetary and hour fields are Decimal, never float.
    - Status fields are ``str`` enums whose values match the strings stored
      in the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


# =============================================================================
# Status enums
# =============================================================================


class PayPeriodStatus(str, Enum):
    """Pay period lifecycle status."""

    DRAFT = "draft"
    PROCESSING = "processing"  # Generation run holds the period
    SENT_FOR_REVIEW = "sent_for_review"  # Records generated, awaiting approvals
    COMPLETED = "completed"  # All approvals granted


class PayrollRecordStatus(str, Enum):
    """Per-employee payroll record status."""

    DRAFT = "draft"
    PROCESSED = "processed"
    PAID = "paid"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SessionType(str, Enum):
    """Kind of attendance punch recorded by the attendance subsystem."""

    MORNING_IN = "morning_in"
    MORNING_OUT = "morning_out"
    AFTERNOON_IN = "afternoon_in"
    AFTERNOON_OUT = "afternoon_out"

    @property
    def is_morning(self) -> bool:
        return self in (SessionType.MORNING_IN, SessionType.MORNING_OUT)


# =============================================================================
# Calculation inputs
# =============================================================================


@dataclass(frozen=True)
class EmployeeInfo:
    """Employee master data needed by payroll."""

    id: UUID
    employee_code: str
    full_name: str
    department_id: UUID | None
    base_salary: Decimal
    status: EmployeeStatus = EmployeeStatus.ACTIVE


@dataclass(frozen=True)
class PayPeriodInfo:
    """Immutable snapshot of a pay period.  Date bounds are inclusive."""

    id: UUID
    name: str
    start_date: date
    end_date: date
    working_days: int
    expected_hours: Decimal
    status: PayPeriodStatus = PayPeriodStatus.DRAFT

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class AttendanceSession:
    """One attendance punch row.

    ``clock_in`` / ``clock_out`` are either naive wall-clock datetimes or
    timezone-aware datetimes (converted to the configured timezone by the
    hours calculator).
    """

    session_type: SessionType
    clock_in: datetime | None = None
    clock_out: datetime | None = None


@dataclass(frozen=True)
class AttendanceDay:
    """All punches of one employee on one calendar day."""

    employee_id: UUID
    work_date: date
    sessions: tuple[AttendanceSession, ...] = ()


@dataclass(frozen=True)
class LeaveGrant:
    """Approved leave.  Both bounds are inclusive."""

    id: UUID
    employee_id: UUID
    leave_type: str
    start_date: date
    end_date: date

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class DeductionBalanceInfo:
    """Recurring deduction balance (loan, advance) paid down per period."""

    id: UUID
    employee_id: UUID
    deduction_type_id: UUID
    deduction_name: str
    original_amount: Decimal
    remaining_balance: Decimal
    monthly_installment: Decimal
    start_date: date
    end_date: date | None = None
    is_active: bool = True


@dataclass(frozen=True)
class DeductionTypeInfo:
    """
    Deduction category.

    A type carrying a percentage of gross pay or a fixed amount is a
    standing deduction charged to every employee each period.  A type with
    neither is only charged through an employee's deduction balance.
    """

    id: UUID
    name: str
    percentage: Decimal | None = None
    fixed_amount: Decimal | None = None
    is_active: bool = True

    @property
    def is_standing(self) -> bool:
        return self.percentage is not None or self.fixed_amount is not None


@dataclass(frozen=True)
class BenefitAssignmentInfo:
    """Fixed-amount benefit assigned to an employee."""

    id: UUID
    employee_id: UUID
    benefit_type_id: UUID
    benefit_name: str
    amount: Decimal
    start_date: date
    end_date: date | None = None
    is_active: bool = True


# =============================================================================
# Persisted outputs
# =============================================================================


@dataclass(frozen=True)
class PayrollRecordInfo:
    """Immutable snapshot of one employee's settlement for one period."""

    id: UUID
    pay_period_id: UUID
    employee_id: UUID
    base_salary: Decimal
    hourly_rate: Decimal
    total_worked_hours: Decimal
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_late_hours: Decimal
    late_deductions: Decimal
    paid_leave_hours: Decimal
    gross_pay: Decimal
    total_deductions: Decimal
    total_benefits: Decimal
    net_pay: Decimal
    status: PayrollRecordStatus = PayrollRecordStatus.DRAFT


@dataclass(frozen=True)
class PayrollDeductionLineInfo:
    id: UUID
    payroll_record_id: UUID
    deduction_type_id: UUID
    deduction_balance_id: UUID | None
    name: str
    amount: Decimal


@dataclass(frozen=True)
class PayrollApprovalInfo:
    id: UUID
    pay_period_id: UUID
    approver_id: UUID
    department_id: UUID | None
    status: ApprovalStatus
    comments: str | None = None
    decided_at: datetime | None = None


@dataclass(frozen=True)
class ApprovalWorkflowStatus:
    """Approval counts for one pay period."""

    pay_period_id: UUID
    total: int
    pending: int
    approved: int
    rejected: int

    @property
    def is_fully_approved(self) -> bool:
        return self.total > 0 and self.approved == self.total


@dataclass(frozen=True)
class PayrollSummary:
    """Period-level totals over all payroll records.

    ``processed_count`` counts records in PROCESSED or PAID status;
    ``pending_count`` counts DRAFT records.
    """

    pay_period_id: UUID
    total_employees: int
    total_gross_pay: Decimal
    total_deductions: Decimal
    total_benefits: Decimal
    total_net_pay: Decimal
    processed_count: int
    pending_count: int


@dataclass(frozen=True)
class ApproverAssignment:
    """Approver expected to sign off a generated pay period.

    ``department_id`` is None for an approver covering every department.
    """

    approver_id: UUID
    department_id: UUID | None = None


# =============================================================================
# Write-side values
# =============================================================================


@dataclass(frozen=True)
class PayrollRecordValues:
    """Calculated amounts written onto a payroll record by an upsert."""

    base_salary: Decimal
    hourly_rate: Decimal
    total_worked_hours: Decimal
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_late_hours: Decimal
    late_deductions: Decimal
    paid_leave_hours: Decimal
    gross_pay: Decimal
    total_deductions: Decimal
    total_benefits: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class DeductionLineValues:
    """One deduction line to persist; ``amount`` is taken off the balance."""

    deduction_type_id: UUID
    name: str
    amount: Decimal
    deduction_balance_id: UUID | None = None
