"""
payroll_services._payroll_types -- calculator output.

Responsibility:
    ``EmployeePayrollData`` is the full calculation for one employee and one
    pay period: the engine results it was built from plus the settlement
    amounts.  It converts itself into the write-side values the kernel's
    ``PayrollRecordService`` persists.

Architecture position:
    Services.  The type lives here because the calculator that produces it
    and the batch generator that consumes it both depend on this package.

Invariants enforced:
    - Frozen.
    - net_pay == gross_pay + total_benefits - total_deductions - late_deductions.
    - total_deductions covers balance installments and standing deductions;
      only installment lines carry a deduction_balance_id.
"""

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.amortization import AmortizationResult
from payroll_engines.attendance_aggregation import AttendanceTotals
from payroll_engines.benefits import BenefitResult
from payroll_engines.leave_policy import PaidLeaveResult
from payroll_engines.standing_deductions import StandingDeductionResult
from payroll_kernel.domain.dtos import (
    DeductionLineValues,
    EmployeeInfo,
    PayPeriodInfo,
    PayrollRecordValues,
)


@dataclass(frozen=True)
class EmployeePayrollData:
    """One employee's calculated payroll for one pay period."""

    employee: EmployeeInfo
    pay_period: PayPeriodInfo
    attendance: AttendanceTotals
    paid_leave: PaidLeaveResult
    amortization: AmortizationResult
    standing_deductions: StandingDeductionResult
    benefits: BenefitResult
    hourly_rate: Decimal
    late_deductions: Decimal
    total_paid_hours: Decimal
    gross_pay: Decimal
    net_pay: Decimal

    @property
    def total_deductions(self) -> Decimal:
        return self.amortization.total_deductions + self.standing_deductions.total_deductions

    @property
    def total_benefits(self) -> Decimal:
        return self.benefits.total_benefits

    def to_record_values(self) -> PayrollRecordValues:
        return PayrollRecordValues(
            base_salary=self.employee.base_salary,
            hourly_rate=self.hourly_rate,
            total_worked_hours=self.attendance.total_worked_hours,
            total_regular_hours=self.attendance.total_regular_hours,
            total_overtime_hours=self.attendance.total_overtime_hours,
            total_late_hours=self.attendance.total_late_hours,
            late_deductions=self.late_deductions,
            paid_leave_hours=self.paid_leave.paid_leave_hours,
            gross_pay=self.gross_pay,
            total_deductions=self.total_deductions,
            total_benefits=self.total_benefits,
            net_pay=self.net_pay,
        )

    def deduction_lines(self) -> tuple[DeductionLineValues, ...]:
        """Installment lines first, then standing deductions."""
        installments = tuple(
            DeductionLineValues(
                deduction_type_id=i.deduction_type_id,
                name=i.name,
                amount=i.amount,
                deduction_balance_id=i.deduction_balance_id,
            )
            for i in self.amortization.installments
        )
        standing = tuple(
            DeductionLineValues(
                deduction_type_id=line.deduction_type_id,
                name=line.name,
                amount=line.amount,
            )
            for line in self.standing_deductions.lines
        )
        return installments + standing
