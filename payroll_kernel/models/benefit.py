"""Benefit types and fixed-amount benefit assignments (read-only to payroll)."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.dtos import BenefitAssignmentInfo


class BenefitTypeModel(TrackedBase):
    """Named benefit category (e.g. "Rice Allowance")."""

    __tablename__ = "benefit_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class EmployeeBenefitModel(TrackedBase):
    """Benefit assigned to an employee; open-ended when end_date is NULL."""

    __tablename__ = "employee_benefits"

    __table_args__ = (
        Index("idx_employee_benefit_employee", "employee_id", "is_active"),
    )

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("employees.id"), nullable=False)
    benefit_type_id: Mapped[UUID] = mapped_column(
        ForeignKey("benefit_types.id"), nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    benefit_type: Mapped[BenefitTypeModel] = relationship(
        BenefitTypeModel, lazy="joined",
    )

    def to_dto(self) -> BenefitAssignmentInfo:
        return BenefitAssignmentInfo(
            id=self.id,
            employee_id=self.employee_id,
            benefit_type_id=self.benefit_type_id,
            benefit_name=self.benefit_type.name,
            amount=self.amount,
            start_date=self.start_date,
            end_date=self.end_date,
            is_active=self.is_active,
        )
