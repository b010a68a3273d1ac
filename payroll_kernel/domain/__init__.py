"""
Pure domain layer.

Data transfer objects and the clock abstraction, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.dtos import (
    ApprovalStatus,
    ApproverAssignment,
    ApprovalWorkflowStatus,
    AttendanceDay,
    AttendanceSession,
    BenefitAssignmentInfo,
    DeductionLineValues,
    DeductionBalanceInfo,
    EmployeeInfo,
    EmployeeStatus,
    LeaveGrant,
    PayPeriodInfo,
    PayPeriodStatus,
    PayrollApprovalInfo,
    PayrollRecordValues,
    PayrollDeductionLineInfo,
    PayrollRecordInfo,
    PayrollRecordStatus,
    PayrollSummary,
    SessionType,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ApprovalStatus",
    "ApproverAssignment",
    "ApprovalWorkflowStatus",
    "AttendanceDay",
    "AttendanceSession",
    "BenefitAssignmentInfo",
    "DeductionLineValues",
    "DeductionBalanceInfo",
    "EmployeeInfo",
    "EmployeeStatus",
    "LeaveGrant",
    "PayPeriodInfo",
    "PayPeriodStatus",
    "PayrollApprovalInfo",
    "PayrollRecordValues",
    "PayrollDeductionLineInfo",
    "PayrollRecordInfo",
    "PayrollRecordStatus",
    "PayrollSummary",
    "SessionType",
]
