"""
payroll_services.data_source -- the calculator's data-access port.

``EmployeePayrollCalculator`` reads every input through this protocol so it
can run against the database (``SqlPayrollDataSource``) or an in-memory
fake in tests.
"""

from datetime import date
from typing import Protocol, runtime_checkable
from uuid import UUID

from payroll_kernel.domain.dtos import (
    AttendanceDay,
    BenefitAssignmentInfo,
    DeductionBalanceInfo,
    DeductionTypeInfo,
    EmployeeInfo,
    LeaveGrant,
    PayPeriodInfo,
)


@runtime_checkable
class PayrollDataSource(Protocol):
    """Read-only access to payroll calculation inputs."""

    def get_employee(self, employee_id: UUID) -> EmployeeInfo | None: ...

    def get_pay_period(self, pay_period_id: UUID) -> PayPeriodInfo | None: ...

    def list_attendance_days(
        self, employee_id: UUID, start_date: date, end_date: date,
    ) -> tuple[AttendanceDay, ...]: ...

    def list_approved_leaves(
        self, employee_id: UUID, start_date: date, end_date: date,
    ) -> tuple[LeaveGrant, ...]: ...

    def list_deduction_balances(self, employee_id: UUID) -> tuple[DeductionBalanceInfo, ...]: ...

    def list_benefit_assignments(self, employee_id: UUID) -> tuple[BenefitAssignmentInfo, ...]: ...

    def list_standing_deductions(self) -> tuple[DeductionTypeInfo, ...]: ...

    def list_active_employees(
        self, department_id: UUID | None = None,
    ) -> tuple[EmployeeInfo, ...]: ...
