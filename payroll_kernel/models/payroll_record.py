"""
Payroll records and their itemized deduction lines.

One ``PayrollRecordModel`` per (pay_period_id, employee_id): generation
updates the row in place when it exists.  ``PayrollDeductionLineModel`` rows
are never merged: every regeneration deletes the record's lines and inserts
the new set.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase, UUIDString
from payroll_kernel.domain.dtos import (
    PayrollDeductionLineInfo,
    PayrollRecordInfo,
    PayrollRecordStatus,
)


class PayrollRecordModel(TrackedBase):
    """
    One employee's settlement for one pay period.

    Guarantees:
        - UNIQUE (pay_period_id, employee_id).
        - Deleting a record deletes its deduction lines.
    """

    __tablename__ = "payroll_records"

    __table_args__ = (
        UniqueConstraint("pay_period_id", "employee_id", name="uq_payroll_record_period_employee"),
        Index("idx_payroll_record_status", "pay_period_id", "status"),
    )

    pay_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("pay_periods.id"), nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employees.id"), nullable=False,
    )
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(nullable=False)
    total_worked_hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_regular_hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_overtime_hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_late_hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    late_deductions: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    paid_leave_hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    gross_pay: Mapped[Decimal] = mapped_column(nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_benefits: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    net_pay: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PayrollRecordStatus.DRAFT.value,
    )

    deduction_lines: Mapped[list["PayrollDeductionLineModel"]] = relationship(
        "PayrollDeductionLineModel",
        back_populates="payroll_record",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def to_dto(self) -> PayrollRecordInfo:
        return PayrollRecordInfo(
            id=self.id,
            pay_period_id=self.pay_period_id,
            employee_id=self.employee_id,
            base_salary=self.base_salary,
            hourly_rate=self.hourly_rate,
            total_worked_hours=self.total_worked_hours,
            total_regular_hours=self.total_regular_hours,
            total_overtime_hours=self.total_overtime_hours,
            total_late_hours=self.total_late_hours,
            late_deductions=self.late_deductions,
            paid_leave_hours=self.paid_leave_hours,
            gross_pay=self.gross_pay,
            total_deductions=self.total_deductions,
            total_benefits=self.total_benefits,
            net_pay=self.net_pay,
            status=PayrollRecordStatus(self.status),
        )

    def __repr__(self) -> str:
        return (
            f"<PayrollRecordModel period={self.pay_period_id} "
            f"employee={self.employee_id} net={self.net_pay} status={self.status}>"
        )


class PayrollDeductionLineModel(TrackedBase):
    """Itemized deduction applied to a payroll record."""

    __tablename__ = "payroll_deduction_lines"

    __table_args__ = (
        Index("idx_deduction_line_record", "payroll_record_id"),
    )

    payroll_record_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_records.id", ondelete="CASCADE"), nullable=False,
    )
    deduction_type_id: Mapped[UUID] = mapped_column(
        ForeignKey("deduction_types.id"), nullable=False,
    )
    # Balance the installment was taken from; credited back on regeneration
    deduction_balance_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), nullable=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)

    payroll_record: Mapped[PayrollRecordModel] = relationship(
        PayrollRecordModel, back_populates="deduction_lines",
    )

    def to_dto(self) -> PayrollDeductionLineInfo:
        return PayrollDeductionLineInfo(
            id=self.id,
            payroll_record_id=self.payroll_record_id,
            deduction_type_id=self.deduction_type_id,
            deduction_balance_id=self.deduction_balance_id,
            name=self.name,
            amount=self.amount,
        )
