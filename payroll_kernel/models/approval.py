"""Payroll approvals: one row per (pay period, approver)."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase, UUIDString
from payroll_kernel.domain.dtos import ApprovalStatus, PayrollApprovalInfo


class PayrollApprovalModel(TrackedBase):
    """
    Approval of a generated pay period by one approver.

    Any regeneration of the period puts its approvals back to PENDING.
    """

    __tablename__ = "payroll_approvals"

    __table_args__ = (
        UniqueConstraint("pay_period_id", "approver_id", name="uq_approval_period_approver"),
        Index("idx_approval_period_status", "pay_period_id", "status"),
    )

    pay_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("pay_periods.id"), nullable=False,
    )
    approver_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    department_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApprovalStatus.PENDING.value,
    )
    comments: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_dto(self) -> PayrollApprovalInfo:
        return PayrollApprovalInfo(
            id=self.id,
            pay_period_id=self.pay_period_id,
            approver_id=self.approver_id,
            department_id=self.department_id,
            status=ApprovalStatus(self.status),
            comments=self.comments,
            decided_at=self.decided_at,
        )
