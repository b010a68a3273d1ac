"""
Deduction types and recurring deduction balances.

``EmployeeDeductionBalanceModel`` is the only row the payroll engine
mutates outside its own output tables: generation decrements
``remaining_balance`` by the installment applied and flips ``is_active``
off when the balance reaches zero.  Reprocessing credits installments back
before recalculating (see PayrollRecordService.restore_deduction_balances).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.dtos import DeductionBalanceInfo, DeductionTypeInfo


class DeductionTypeModel(TrackedBase):
    """
    Named deduction category (e.g. "Salary Loan", "SSS Contribution").

    Guarantees:
        - At most one of percentage / fixed_amount is set (CHECK).
        - percentage in [0, 100], fixed_amount >= 0 (CHECK).
        - A type with neither is balance-only: it is charged through
          ``EmployeeDeductionBalanceModel`` rows, never as a standing
          deduction.
    """

    __tablename__ = "deduction_types"

    __table_args__ = (
        CheckConstraint(
            "percentage IS NULL OR fixed_amount IS NULL",
            name="ck_deduction_type_single_rate",
        ),
        CheckConstraint(
            "percentage IS NULL OR (percentage >= 0 AND percentage <= 100)",
            name="ck_deduction_type_percentage_range",
        ),
        CheckConstraint(
            "fixed_amount IS NULL OR fixed_amount >= 0",
            name="ck_deduction_type_fixed_non_negative",
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    percentage: Mapped[Decimal | None] = mapped_column(nullable=True)
    fixed_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dto(self) -> DeductionTypeInfo:
        return DeductionTypeInfo(
            id=self.id,
            name=self.name,
            percentage=self.percentage,
            fixed_amount=self.fixed_amount,
            is_active=self.is_active,
        )

    def __repr__(self) -> str:
        return f"<DeductionTypeModel {self.name}>"


class EmployeeDeductionBalanceModel(TrackedBase):
    """
    Amortized deduction balance for one employee.

    Guarantees:
        - 0 <= remaining_balance <= original_amount (CHECK constraints).
        - Only the batch generator writes remaining_balance / is_active.
    """

    __tablename__ = "employee_deduction_balances"

    __table_args__ = (
        CheckConstraint("remaining_balance >= 0", name="ck_balance_non_negative"),
        CheckConstraint(
            "remaining_balance <= original_amount", name="ck_balance_within_original",
        ),
        Index("idx_deduction_balance_employee", "employee_id", "is_active"),
    )

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("employees.id"), nullable=False)
    deduction_type_id: Mapped[UUID] = mapped_column(
        ForeignKey("deduction_types.id"), nullable=False,
    )
    original_amount: Mapped[Decimal] = mapped_column(nullable=False)
    remaining_balance: Mapped[Decimal] = mapped_column(nullable=False)
    monthly_installment: Mapped[Decimal] = mapped_column(nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    deduction_type: Mapped[DeductionTypeModel] = relationship(
        DeductionTypeModel, lazy="joined",
    )

    def to_dto(self) -> DeductionBalanceInfo:
        return DeductionBalanceInfo(
            id=self.id,
            employee_id=self.employee_id,
            deduction_type_id=self.deduction_type_id,
            deduction_name=self.deduction_type.name,
            original_amount=self.original_amount,
            remaining_balance=self.remaining_balance,
            monthly_installment=self.monthly_installment,
            start_date=self.start_date,
            end_date=self.end_date,
            is_active=self.is_active,
        )

    def __repr__(self) -> str:
        return (
            f"<EmployeeDeductionBalanceModel employee={self.employee_id} "
            f"remaining={self.remaining_balance} active={self.is_active}>"
        )
