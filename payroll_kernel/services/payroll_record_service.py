"""
PayrollRecordService -- persistence of generated payroll.

Responsibility:
    Upserts one payroll record per (pay period, employee), replaces its
    itemized deduction lines, applies installments to deduction balances,
    credits them back before regeneration, and moves records through
    DRAFT -> PROCESSED -> PAID.

Architecture position:
    Kernel > Services -- imperative shell.  Driven by the batch generator,
    which wraps each employee in a SAVEPOINT so a record, its lines and
    its balance updates land together or not at all.

Invariants enforced:
    - At most one record per (pay_period_id, employee_id); a second
      generation updates the row in place.
    - Deduction lines are replaced, never merged.
    - Balance updates stay within [0, original_amount]; a balance reaching
      zero is deactivated and reopens when credited back; a balance
      deactivated while money was still owed stays inactive.
    - Crediting back the lines of a record before recalculating makes
      regeneration idempotent with respect to balances.
    - Flush-only.

Failure modes:
    - PayrollRecordNotFoundError: unknown record_id.
    - InvalidRecordStatusError: status change outside ``RECORD_TRANSITIONS``.
"""

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_kernel.db.types import ZERO
from payroll_kernel.domain.dtos import (
    DeductionLineValues,
    PayrollRecordInfo,
    PayrollRecordStatus,
    PayrollRecordValues,
)
from payroll_kernel.exceptions import (
    InvalidRecordStatusError,
    PayrollRecordNotFoundError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.deduction import EmployeeDeductionBalanceModel
from payroll_kernel.models.employee import EmployeeModel
from payroll_kernel.models.payroll_record import (
    PayrollDeductionLineModel,
    PayrollRecordModel,
)
from payroll_kernel.services.base import BaseService

logger = get_logger("services.payroll_record")


RECORD_TRANSITIONS: dict[PayrollRecordStatus, PayrollRecordStatus] = {
    PayrollRecordStatus.DRAFT: PayrollRecordStatus.PROCESSED,
    PayrollRecordStatus.PROCESSED: PayrollRecordStatus.PAID,
}


class PayrollRecordService(BaseService[PayrollRecordModel]):
    """Write side of payroll records, deduction lines and balances."""

    def __init__(self, session: Session):
        super().__init__(session)

    # -----------------------------------------------------------------
    # Records and lines
    # -----------------------------------------------------------------

    def find_record(self, pay_period_id: UUID, employee_id: UUID) -> PayrollRecordModel | None:
        return self.session.execute(
            select(PayrollRecordModel).where(
                PayrollRecordModel.pay_period_id == pay_period_id,
                PayrollRecordModel.employee_id == employee_id,
            )
        ).scalar_one_or_none()

    def upsert_record(
        self,
        pay_period_id: UUID,
        employee_id: UUID,
        values: PayrollRecordValues,
        actor_id: UUID,
    ) -> PayrollRecordModel:
        """
        Insert or update the employee's record for the period.

        An updated record goes back to DRAFT.

        Returns:
            The ORM row, so the caller can replace its deduction lines in
            the same unit of work.
        """
        record = self.find_record(pay_period_id, employee_id)
        created = record is None
        if record is None:
            record = PayrollRecordModel(
                pay_period_id=pay_period_id,
                employee_id=employee_id,
                created_by_id=actor_id,
            )
            self.session.add(record)
        else:
            record.updated_by_id = actor_id

        record.base_salary = values.base_salary
        record.hourly_rate = values.hourly_rate
        record.total_worked_hours = values.total_worked_hours
        record.total_regular_hours = values.total_regular_hours
        record.total_overtime_hours = values.total_overtime_hours
        record.total_late_hours = values.total_late_hours
        record.late_deductions = values.late_deductions
        record.paid_leave_hours = values.paid_leave_hours
        record.gross_pay = values.gross_pay
        record.total_deductions = values.total_deductions
        record.total_benefits = values.total_benefits
        record.net_pay = values.net_pay
        record.status = PayrollRecordStatus.DRAFT.value
        self.session.flush()

        logger.info(
            "payroll_record_upserted",
            extra={
                "record_id": str(record.id),
                "employee_id": str(employee_id),
                "record_created": created,
                "gross_pay": str(values.gross_pay),
                "net_pay": str(values.net_pay),
            },
        )
        return record

    def replace_deduction_lines(
        self,
        record: PayrollRecordModel,
        lines: Iterable[DeductionLineValues],
        actor_id: UUID,
    ) -> list[PayrollDeductionLineModel]:
        """Delete the record's deduction lines and insert ``lines``."""
        record.deduction_lines.clear()
        self.session.flush()

        new_lines = [
            PayrollDeductionLineModel(
                deduction_type_id=line.deduction_type_id,
                deduction_balance_id=line.deduction_balance_id,
                name=line.name,
                amount=line.amount,
                created_by_id=actor_id,
            )
            for line in lines
        ]
        record.deduction_lines.extend(new_lines)
        self.session.flush()
        return new_lines

    def delete_records(
        self,
        pay_period_id: UUID,
        actor_id: UUID,
        department_id: UUID | None = None,
    ) -> int:
        """
        Delete the period's records, crediting their deductions back first.

        Returns:
            Number of records deleted.
        """
        stmt = select(PayrollRecordModel).where(
            PayrollRecordModel.pay_period_id == pay_period_id,
        )
        if department_id is not None:
            stmt = stmt.join(
                EmployeeModel, EmployeeModel.id == PayrollRecordModel.employee_id,
            ).where(EmployeeModel.department_id == department_id)

        records = self.session.execute(stmt).scalars().all()
        for record in records:
            self.restore_deduction_balances(record, actor_id)
            self.session.delete(record)
        self.session.flush()

        logger.info(
            "payroll_records_deleted",
            extra={
                "pay_period_id": str(pay_period_id),
                "department_id": str(department_id) if department_id else None,
                "count": len(records),
            },
        )
        return len(records)

    # -----------------------------------------------------------------
    # Deduction balances
    # -----------------------------------------------------------------

    def _lock_balance(self, balance_id: UUID) -> EmployeeDeductionBalanceModel | None:
        return self.session.execute(
            select(EmployeeDeductionBalanceModel)
            .where(EmployeeDeductionBalanceModel.id == balance_id)
            .with_for_update()
        ).scalar_one_or_none()

    def apply_amortization(
        self,
        lines: Iterable[DeductionLineValues],
        actor_id: UUID,
    ) -> None:
        """Take each line's amount off its balance."""
        for line in lines:
            if line.deduction_balance_id is None:
                continue
            balance = self._lock_balance(line.deduction_balance_id)
            if balance is None:
                continue

            previous = balance.remaining_balance
            balance.remaining_balance = max(ZERO, previous - line.amount)
            if balance.remaining_balance == 0:
                balance.is_active = False
            balance.updated_by_id = actor_id

            logger.info(
                "deduction_balance_amortized",
                extra={
                    "deduction_balance_id": str(balance.id),
                    "amount": str(line.amount),
                    "previous_balance": str(previous),
                    "new_balance": str(balance.remaining_balance),
                    "is_active": balance.is_active,
                },
            )
        self.session.flush()

    def restore_deduction_balances(
        self,
        record: PayrollRecordModel,
        actor_id: UUID,
    ) -> Decimal:
        """
        Credit the record's deduction lines back to their balances.

        Returns:
            Total amount credited back.
        """
        restored = ZERO
        for line in record.deduction_lines:
            if line.deduction_balance_id is None:
                continue
            balance = self._lock_balance(line.deduction_balance_id)
            if balance is None:
                continue

            paid_off = balance.remaining_balance == 0
            balance.remaining_balance = min(
                balance.original_amount, balance.remaining_balance + line.amount,
            )
            # Only a balance closed by amortization reopens; a cancelled one stays off.
            if paid_off and balance.remaining_balance > 0:
                balance.is_active = True
            balance.updated_by_id = actor_id
            restored += line.amount

        if restored:
            self.session.flush()
            logger.info(
                "deduction_balances_restored",
                extra={"record_id": str(record.id), "amount": str(restored)},
            )
        return restored

    # -----------------------------------------------------------------
    # Record status
    # -----------------------------------------------------------------

    def approve_record(self, record_id: UUID, actor_id: UUID) -> PayrollRecordInfo:
        """DRAFT -> PROCESSED."""
        return self._advance(record_id, PayrollRecordStatus.PROCESSED, actor_id)

    def mark_paid(self, record_id: UUID, actor_id: UUID) -> PayrollRecordInfo:
        """PROCESSED -> PAID."""
        return self._advance(record_id, PayrollRecordStatus.PAID, actor_id)

    def _advance(
        self,
        record_id: UUID,
        target: PayrollRecordStatus,
        actor_id: UUID,
    ) -> PayrollRecordInfo:
        record = self.session.get(PayrollRecordModel, record_id)
        if record is None:
            raise PayrollRecordNotFoundError(str(record_id))

        current = PayrollRecordStatus(record.status)
        if RECORD_TRANSITIONS.get(current) != target:
            raise InvalidRecordStatusError(str(record_id), current.value, target.value)

        record.status = target.value
        record.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "payroll_record_status_changed",
            extra={
                "record_id": str(record_id),
                "from_status": current.value,
                "to_status": target.value,
            },
        )
        return record.to_dto()

    def bulk_update_status(
        self,
        pay_period_id: UUID,
        target: PayrollRecordStatus,
        actor_id: UUID,
        department_id: UUID | None = None,
    ) -> int:
        """
        Advance every record of the period that is one step before ``target``.

        Records in any other status are left alone.

        Returns:
            Number of records updated.

        Raises:
            InvalidRecordStatusError: If nothing can transition to ``target``.
        """
        sources = [s for s, t in RECORD_TRANSITIONS.items() if t == target]
        if not sources:
            raise InvalidRecordStatusError(None, None, target.value)

        stmt = select(PayrollRecordModel).where(
            PayrollRecordModel.pay_period_id == pay_period_id,
            PayrollRecordModel.status.in_([s.value for s in sources]),
        )
        if department_id is not None:
            stmt = stmt.join(
                EmployeeModel, EmployeeModel.id == PayrollRecordModel.employee_id,
            ).where(EmployeeModel.department_id == department_id)

        records = self.session.execute(stmt).scalars().all()
        for record in records:
            record.status = target.value
            record.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "payroll_records_bulk_updated",
            extra={
                "pay_period_id": str(pay_period_id),
                "to_status": target.value,
                "count": len(records),
            },
        )
        return len(records)
