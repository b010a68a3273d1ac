"""
Module: payroll_kernel.selectors.payroll_record_selector
Responsibility: Read-only access to generated payroll records, their
    deduction lines and period-level summaries.
Architecture position: Kernel > Selectors.  Read-only.

Invariants enforced:
    - All public methods return frozen DTOs.
    - Record lists are ordered by employee_code so reports are stable.
    - Filters are expressed as a ``PayrollRecordFilter`` and translated to a
      predicate list; unknown filter keys cannot be passed.

Failure modes:
    - Returns None or an empty tuple when nothing matches.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import ColumnElement, case, func, select
from sqlalchemy.orm import Session

from payroll_kernel.db.types import ZERO, round_money
from payroll_kernel.domain.dtos import (
    PayrollDeductionLineInfo,
    PayrollRecordInfo,
    PayrollRecordStatus,
    PayrollSummary,
)
from payroll_kernel.models.employee import EmployeeModel
from payroll_kernel.models.payroll_record import (
    PayrollDeductionLineModel,
    PayrollRecordModel,
)
from payroll_kernel.selectors.base import BaseSelector


class RecordFilterField(str, Enum):
    """Fields a payroll record query may be filtered on."""

    PAY_PERIOD = "pay_period_id"
    EMPLOYEE = "employee_id"
    DEPARTMENT = "department_id"
    STATUS = "status"


@dataclass(frozen=True)
class PayrollRecordFilter:
    """Filter for ``PayrollRecordSelector.list_records``.

    Every field is optional; set fields are ANDed together.
    """

    pay_period_id: UUID | None = None
    employee_id: UUID | None = None
    department_id: UUID | None = None
    status: PayrollRecordStatus | None = None

    def active_fields(self) -> tuple[RecordFilterField, ...]:
        return tuple(f for f in RecordFilterField if getattr(self, f.value) is not None)


def _predicate(field: RecordFilterField, value) -> ColumnElement[bool]:
    if field is RecordFilterField.PAY_PERIOD:
        return PayrollRecordModel.pay_period_id == value
    if field is RecordFilterField.EMPLOYEE:
        return PayrollRecordModel.employee_id == value
    if field is RecordFilterField.DEPARTMENT:
        return EmployeeModel.department_id == value
    if field is RecordFilterField.STATUS:
        return PayrollRecordModel.status == PayrollRecordStatus(value).value
    raise ValueError(f"Unsupported filter field: {field}")


class PayrollRecordSelector(BaseSelector[PayrollRecordModel]):
    """
    Selector for payroll record queries.

    Guarantees:
        - Read-only.
        - ``get_summary`` totals are rounded to 2 decimal places.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def get_record(self, record_id: UUID) -> PayrollRecordInfo | None:
        record = self.session.get(PayrollRecordModel, record_id)
        return record.to_dto() if record else None

    def get_record_for_employee(
        self,
        pay_period_id: UUID,
        employee_id: UUID,
    ) -> PayrollRecordInfo | None:
        record = self.session.execute(
            select(PayrollRecordModel).where(
                PayrollRecordModel.pay_period_id == pay_period_id,
                PayrollRecordModel.employee_id == employee_id,
            )
        ).scalar_one_or_none()
        return record.to_dto() if record else None

    def list_records(
        self,
        record_filter: PayrollRecordFilter | None = None,
    ) -> tuple[PayrollRecordInfo, ...]:
        """Records matching the filter, ordered by employee code."""
        record_filter = record_filter or PayrollRecordFilter()
        predicates = [
            _predicate(field, getattr(record_filter, field.value))
            for field in record_filter.active_fields()
        ]
        rows = self.session.execute(
            select(PayrollRecordModel)
            .join(EmployeeModel, EmployeeModel.id == PayrollRecordModel.employee_id)
            .where(*predicates)
            .order_by(EmployeeModel.employee_code)
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def list_deduction_lines(self, record_id: UUID) -> tuple[PayrollDeductionLineInfo, ...]:
        rows = self.session.execute(
            select(PayrollDeductionLineModel)
            .where(PayrollDeductionLineModel.payroll_record_id == record_id)
            .order_by(PayrollDeductionLineModel.name, PayrollDeductionLineModel.id)
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def count_records(self, pay_period_id: UUID) -> int:
        return self.session.execute(
            select(func.count(PayrollRecordModel.id)).where(
                PayrollRecordModel.pay_period_id == pay_period_id,
            )
        ).scalar_one()

    def get_summary(self, pay_period_id: UUID) -> PayrollSummary:
        """
        Period totals over every payroll record.

        ``processed_count`` counts PROCESSED and PAID records;
        ``pending_count`` counts DRAFT records.
        """
        processed = case(
            (
                PayrollRecordModel.status.in_(
                    [PayrollRecordStatus.PROCESSED.value, PayrollRecordStatus.PAID.value]
                ),
                1,
            ),
            else_=0,
        )
        pending = case(
            (PayrollRecordModel.status == PayrollRecordStatus.DRAFT.value, 1),
            else_=0,
        )
        row = self.session.execute(
            select(
                func.count(PayrollRecordModel.id),
                func.sum(PayrollRecordModel.gross_pay),
                func.sum(PayrollRecordModel.total_deductions),
                func.sum(PayrollRecordModel.total_benefits),
                func.sum(PayrollRecordModel.net_pay),
                func.sum(processed),
                func.sum(pending),
            ).where(PayrollRecordModel.pay_period_id == pay_period_id)
        ).one()

        count, gross, deductions, benefits, net, processed_count, pending_count = row
        return PayrollSummary(
            pay_period_id=pay_period_id,
            total_employees=count or 0,
            total_gross_pay=_money(gross),
            total_deductions=_money(deductions),
            total_benefits=_money(benefits),
            total_net_pay=_money(net),
            processed_count=int(processed_count or 0),
            pending_count=int(pending_count or 0),
        )


def _money(value) -> Decimal:
    if value is None:
        return ZERO
    return round_money(Decimal(str(value)))
