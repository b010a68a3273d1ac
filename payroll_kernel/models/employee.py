"""
Employee master data (read-only to the payroll engine).

Owned by the HR administration side of the system; payroll only reads
``base_salary``, ``department_id`` and ``status``.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase, UUIDString
from payroll_kernel.domain.dtos import EmployeeInfo, EmployeeStatus


class EmployeeModel(TrackedBase):
    """Employee with a fixed monthly base salary."""

    __tablename__ = "employees"

    __table_args__ = (
        UniqueConstraint("employee_code", name="uq_employee_code"),
        Index("idx_employee_department", "department_id"),
        Index("idx_employee_status", "status"),
    )

    employee_code: Mapped[str] = mapped_column(String(50), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    department_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EmployeeStatus.ACTIVE.value,
    )

    def to_dto(self) -> EmployeeInfo:
        return EmployeeInfo(
            id=self.id,
            employee_code=self.employee_code,
            full_name=self.full_name,
            department_id=self.department_id,
            base_salary=self.base_salary,
            status=EmployeeStatus(self.status),
        )

    def __repr__(self) -> str:
        return f"<EmployeeModel {self.employee_code} status={self.status}>"
