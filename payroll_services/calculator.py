"""
EmployeePayrollCalculator -- one employee, one pay period.

Responsibility:
    Loads an employee's inputs through a ``PayrollDataSource`` and runs the
    calculation engines in order:

        attendance  -> worked / regular / overtime / late hours
        leave       -> paid leave hours
        amortizer   -> deduction installments
        benefits    -> benefit lines
        standing    -> percentage / fixed deductions on gross pay

    then settles the money:

        hourly_rate      = base_salary / expected_hours
        late_deductions  = total_late_hours x hourly_rate
        total_paid_hours = worked hours + paid leave hours
        gross_pay        = total_paid_hours x base_salary / expected_hours
        deductions       = installments + standing deductions
        net_pay          = gross_pay + benefits - deductions - late_deductions

Architecture position:
    Services -- composes pure engines with an injected data source.  Does
    not write anything; the batch generator persists the result.

Invariants enforced:
    - Deterministic: identical inputs give identical Decimal outputs.
    - gross_pay is computed from base_salary directly (not from the rounded
      hourly rate) so a fully attended period pays exactly base_salary.
    - Money is rounded to 2 decimals half-up; hourly_rate keeps 9.

Failure modes:
    - EmployeeNotFoundError: unknown employee.
    - PayPeriodNotFoundError: unknown pay period.
    - InvalidPayPeriodError: expected_hours is zero or negative.
"""

from decimal import Decimal
from uuid import UUID

from payroll_config.schema import PayrollEngineConfig
from payroll_engines.amortization import amortize_balances
from payroll_engines.attendance_aggregation import aggregate_attendance
from payroll_engines.benefits import resolve_benefits
from payroll_engines.leave_policy import LeavePaymentPolicy, compute_paid_leave
from payroll_engines.standing_deductions import apply_standing_deductions
from payroll_kernel.db.types import MONEY_DECIMAL_PLACES, round_money
from payroll_kernel.exceptions import (
    EmployeeNotFoundError,
    InvalidPayPeriodError,
    PayPeriodNotFoundError,
)
from payroll_kernel.logging_config import get_logger
from payroll_services._payroll_types import EmployeePayrollData
from payroll_services.data_source import PayrollDataSource

logger = get_logger("services.calculator")


class EmployeePayrollCalculator:
    """
    Calculates one employee's payroll for one pay period.

    Contract:
        Receives the data source and engine configuration by constructor
        injection; ``calculate`` is a pure function of what the data source
        returns.
    """

    def __init__(
        self,
        data_source: PayrollDataSource,
        config: PayrollEngineConfig | None = None,
    ):
        self._data = data_source
        self._config = config or PayrollEngineConfig.with_defaults()
        self._leave_policy = LeavePaymentPolicy(self._config.leave_policies)

    @property
    def config(self) -> PayrollEngineConfig:
        return self._config

    def calculate(self, employee_id: UUID, pay_period_id: UUID) -> EmployeePayrollData:
        """
        Run the full calculation.

        Raises:
            EmployeeNotFoundError: If the employee does not exist.
            PayPeriodNotFoundError: If the pay period does not exist.
            InvalidPayPeriodError: If the period expects no working hours.
        """
        employee = self._data.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(str(employee_id))

        period = self._data.get_pay_period(pay_period_id)
        if period is None:
            raise PayPeriodNotFoundError(str(pay_period_id))
        if period.expected_hours <= 0:
            raise InvalidPayPeriodError(
                str(pay_period_id), "expected_hours must be greater than zero",
            )

        hourly_rate = round_money(
            employee.base_salary / period.expected_hours, MONEY_DECIMAL_PLACES,
        )

        attendance = aggregate_attendance(
            days=self._data.list_attendance_days(
                employee_id, period.start_date, period.end_date,
            ),
            config=self._config.attendance,
            start_date=period.start_date,
            end_date=period.end_date,
        )
        late_deductions = round_money(attendance.total_late_hours * hourly_rate)

        paid_leave = compute_paid_leave(
            grants=self._data.list_approved_leaves(
                employee_id, period.start_date, period.end_date,
            ),
            period_start=period.start_date,
            period_end=period.end_date,
            policy=self._leave_policy,
            hours_per_day=self._config.hours_per_day,
        )

        amortization = amortize_balances(
            balances=self._data.list_deduction_balances(employee_id),
            period_start=period.start_date,
            period_end=period.end_date,
        )

        benefits = resolve_benefits(
            assignments=self._data.list_benefit_assignments(employee_id),
            period_start=period.start_date,
            period_end=period.end_date,
        )

        total_paid_hours = attendance.total_worked_hours + paid_leave.paid_leave_hours
        gross_pay = prorated_gross(
            total_paid_hours, employee.base_salary, period.expected_hours,
        )
        standing = apply_standing_deductions(
            deduction_types=self._data.list_standing_deductions(),
            gross_pay=gross_pay,
        )
        total_deductions = amortization.total_deductions + standing.total_deductions
        net_pay = round_money(
            gross_pay
            + benefits.total_benefits
            - total_deductions
            - late_deductions
        )

        result = EmployeePayrollData(
            employee=employee,
            pay_period=period,
            attendance=attendance,
            paid_leave=paid_leave,
            amortization=amortization,
            standing_deductions=standing,
            benefits=benefits,
            hourly_rate=hourly_rate,
            late_deductions=late_deductions,
            total_paid_hours=total_paid_hours,
            gross_pay=gross_pay,
            net_pay=net_pay,
        )

        logger.info(
            "employee_payroll_calculated",
            extra={
                "employee_id": str(employee_id),
                "pay_period_id": str(pay_period_id),
                "total_paid_hours": str(total_paid_hours),
                "gross_pay": str(gross_pay),
                "total_deductions": str(total_deductions),
                "total_benefits": str(benefits.total_benefits),
                "net_pay": str(net_pay),
            },
        )
        return result


def prorated_gross(
    total_paid_hours: Decimal,
    base_salary: Decimal,
    expected_hours: Decimal,
) -> Decimal:
    """Gross pay for ``total_paid_hours`` out of ``expected_hours``."""
    return round_money(total_paid_hours * base_salary / expected_hours)
