"""
Module: payroll_kernel.selectors.payroll_input_selector
Responsibility: SQL implementation of the ``PayrollDataSource`` port used by
    ``EmployeePayrollCalculator`` and ``PayrollBatchGenerator``.  Loads an
    employee's calculation inputs for one pay period and returns them as
    frozen DTOs.
Architecture position: Kernel > Selectors.  Read-only.

Invariants enforced:
    - Attendance rows are grouped into one ``AttendanceDay`` per work_date,
      days sorted ascending.
    - Only APPROVED leave requests overlapping the period are returned.
    - Deduction balances and benefit assignments are returned in creation
      order so the engine output is deterministic.
    - Standing deduction types are returned by name.
    - ``list_active_employees`` orders by employee_code.

Failure modes:
    - Absence is reported as None or an empty tuple, never raised.
"""

from collections import defaultdict
from datetime import date
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from payroll_kernel.domain.dtos import (
    AttendanceDay,
    AttendanceSession,
    BenefitAssignmentInfo,
    DeductionBalanceInfo,
    DeductionTypeInfo,
    EmployeeInfo,
    EmployeeStatus,
    LeaveGrant,
    LeaveStatus,
    PayPeriodInfo,
)
from payroll_kernel.models.attendance import AttendanceSessionModel, LeaveRequestModel
from payroll_kernel.models.benefit import EmployeeBenefitModel
from payroll_kernel.models.deduction import DeductionTypeModel, EmployeeDeductionBalanceModel
from payroll_kernel.models.employee import EmployeeModel
from payroll_kernel.models.pay_period import PayPeriodModel
from payroll_kernel.selectors.base import BaseSelector


class SqlPayrollDataSource(BaseSelector[EmployeeModel]):
    """
    Database-backed payroll input reader.

    Contract:
        Satisfies ``payroll_services.data_source.PayrollDataSource``
        structurally; every method takes plain ids and dates and returns
        DTOs.

    Non-goals:
        - Does not lock rows.  The batch generator locks the pay period and
          the deduction balances it writes back.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def get_employee(self, employee_id: UUID) -> EmployeeInfo | None:
        employee = self.session.get(EmployeeModel, employee_id)
        return employee.to_dto() if employee else None

    def get_pay_period(self, pay_period_id: UUID) -> PayPeriodInfo | None:
        period = self.session.get(PayPeriodModel, pay_period_id)
        return period.to_dto() if period else None

    def list_attendance_days(
        self,
        employee_id: UUID,
        start_date: date,
        end_date: date,
    ) -> tuple[AttendanceDay, ...]:
        """Punches in [start_date, end_date] grouped by work date."""
        rows = self.session.execute(
            select(AttendanceSessionModel)
            .where(
                AttendanceSessionModel.employee_id == employee_id,
                AttendanceSessionModel.work_date >= start_date,
                AttendanceSessionModel.work_date <= end_date,
            )
            .order_by(AttendanceSessionModel.work_date, AttendanceSessionModel.created_at)
        ).scalars().all()

        by_date: dict[date, list[AttendanceSession]] = defaultdict(list)
        for row in rows:
            by_date[row.work_date].append(row.to_dto())

        return tuple(
            AttendanceDay(
                employee_id=employee_id,
                work_date=work_date,
                sessions=tuple(sessions),
            )
            for work_date, sessions in sorted(by_date.items())
        )

    def list_approved_leaves(
        self,
        employee_id: UUID,
        start_date: date,
        end_date: date,
    ) -> tuple[LeaveGrant, ...]:
        """Approved leave requests touching [start_date, end_date]."""
        rows = self.session.execute(
            select(LeaveRequestModel)
            .where(
                LeaveRequestModel.employee_id == employee_id,
                LeaveRequestModel.status == LeaveStatus.APPROVED.value,
                LeaveRequestModel.start_date <= end_date,
                LeaveRequestModel.end_date >= start_date,
            )
            .order_by(LeaveRequestModel.start_date)
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def list_deduction_balances(self, employee_id: UUID) -> tuple[DeductionBalanceInfo, ...]:
        """Active balances with something left to pay."""
        rows = self.session.execute(
            select(EmployeeDeductionBalanceModel)
            .where(
                EmployeeDeductionBalanceModel.employee_id == employee_id,
                EmployeeDeductionBalanceModel.is_active.is_(True),
                EmployeeDeductionBalanceModel.remaining_balance > 0,
            )
            .order_by(
                EmployeeDeductionBalanceModel.created_at,
                EmployeeDeductionBalanceModel.id,
            )
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def list_benefit_assignments(self, employee_id: UUID) -> tuple[BenefitAssignmentInfo, ...]:
        rows = self.session.execute(
            select(EmployeeBenefitModel)
            .where(
                EmployeeBenefitModel.employee_id == employee_id,
                EmployeeBenefitModel.is_active.is_(True),
            )
            .order_by(EmployeeBenefitModel.created_at, EmployeeBenefitModel.id)
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def list_standing_deductions(self) -> tuple[DeductionTypeInfo, ...]:
        """Active deduction types that carry a percentage or a fixed amount."""
        rows = self.session.execute(
            select(DeductionTypeModel)
            .where(
                DeductionTypeModel.is_active.is_(True),
                or_(
                    DeductionTypeModel.percentage.is_not(None),
                    DeductionTypeModel.fixed_amount.is_not(None),
                ),
            )
            .order_by(DeductionTypeModel.name)
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def list_active_employees(
        self,
        department_id: UUID | None = None,
    ) -> tuple[EmployeeInfo, ...]:
        """Active employees, optionally limited to one department."""
        stmt = select(EmployeeModel).where(
            EmployeeModel.status == EmployeeStatus.ACTIVE.value,
        )
        if department_id is not None:
            stmt = stmt.where(EmployeeModel.department_id == department_id)
        rows = self.session.execute(
            stmt.order_by(EmployeeModel.employee_code)
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)
