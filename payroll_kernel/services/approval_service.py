"""
PayrollApprovalService -- sign-off of generated pay periods.

Responsibility:
    Creates one approval per (pay period, approver), records approve and
    reject decisions, rolls the decisions up into the period status and
    resets approvals when a period is regenerated.

Architecture position:
    Kernel > Services -- imperative shell.  Called by the batch generator
    (reset and create after every run) and by the approval UI layer.

Invariants enforced:
    - Only PENDING approvals can be decided, and only by their approver.
    - Roll-up: while the period is SENT_FOR_REVIEW, any rejection sends it
      back to DRAFT and unanimous approval moves it to COMPLETED.
    - Regeneration resets every affected approval to PENDING and clears
      its decision.
    - Flush-only.

Failure modes:
    - ApprovalNotFoundError: unknown approval_id.
    - ApprovalNotPendingError: approval already decided.
    - ApproverMismatchError: actor is not the assigned approver.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import (
    ApprovalStatus,
    ApprovalWorkflowStatus,
    ApproverAssignment,
    PayPeriodStatus,
    PayrollApprovalInfo,
)
from payroll_kernel.exceptions import (
    ApprovalNotFoundError,
    ApprovalNotPendingError,
    ApproverMismatchError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.approval import PayrollApprovalModel
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.pay_period_service import PayPeriodService

logger = get_logger("services.approval")


class PayrollApprovalService(BaseService[PayrollApprovalModel]):
    """
    Service for the payroll approval workflow.

    Contract:
        Returns frozen ``PayrollApprovalInfo`` / ``ApprovalWorkflowStatus``
        DTOs.  Decision timestamps come from the injected clock.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        period_service: PayPeriodService | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._periods = period_service or PayPeriodService(session)

    def create_approvals(
        self,
        pay_period_id: UUID,
        approvers: Iterable[ApproverAssignment],
        actor_id: UUID,
    ) -> list[PayrollApprovalInfo]:
        """
        Create a PENDING approval for every approver not yet assigned.

        Approvers that already have an approval for the period are left
        untouched.  Returns only the approvals created by this call.
        """
        existing = set(
            self.session.execute(
                select(PayrollApprovalModel.approver_id).where(
                    PayrollApprovalModel.pay_period_id == pay_period_id,
                )
            ).scalars()
        )

        created: list[PayrollApprovalModel] = []
        for assignment in approvers:
            if assignment.approver_id in existing:
                continue
            approval = PayrollApprovalModel(
                pay_period_id=pay_period_id,
                approver_id=assignment.approver_id,
                department_id=assignment.department_id,
                status=ApprovalStatus.PENDING.value,
                created_by_id=actor_id,
            )
            self.session.add(approval)
            created.append(approval)
            existing.add(assignment.approver_id)

        if created:
            self.session.flush()
            logger.info(
                "approvals_created",
                extra={"pay_period_id": str(pay_period_id), "count": len(created)},
            )
        return [a.to_dto() for a in created]

    def approve(
        self,
        approval_id: UUID,
        actor_id: UUID,
        comments: str | None = None,
    ) -> PayrollApprovalInfo:
        return self._decide(approval_id, actor_id, ApprovalStatus.APPROVED, comments)

    def reject(
        self,
        approval_id: UUID,
        actor_id: UUID,
        comments: str | None = None,
    ) -> PayrollApprovalInfo:
        return self._decide(approval_id, actor_id, ApprovalStatus.REJECTED, comments)

    def _decide(
        self,
        approval_id: UUID,
        actor_id: UUID,
        decision: ApprovalStatus,
        comments: str | None,
    ) -> PayrollApprovalInfo:
        approval = self.session.execute(
            select(PayrollApprovalModel)
            .where(PayrollApprovalModel.id == approval_id)
            .with_for_update()
        ).scalar_one_or_none()
        if approval is None:
            raise ApprovalNotFoundError(str(approval_id))
        if approval.status != ApprovalStatus.PENDING.value:
            raise ApprovalNotPendingError(str(approval_id), approval.status)
        if approval.approver_id != actor_id:
            raise ApproverMismatchError(
                str(approval_id), str(approval.approver_id), str(actor_id),
            )

        approval.status = decision.value
        approval.comments = comments
        approval.decided_at = self._clock.now()
        approval.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "approval_decided",
            extra={
                "approval_id": str(approval_id),
                "pay_period_id": str(approval.pay_period_id),
                "decision": decision.value,
            },
        )

        self._roll_up(approval.pay_period_id, actor_id)
        return approval.to_dto()

    def _roll_up(self, pay_period_id: UUID, actor_id: UUID) -> None:
        period = self._periods.get_period_for_update(pay_period_id)
        if period.status != PayPeriodStatus.SENT_FOR_REVIEW.value:
            return

        status = self.get_workflow_status(pay_period_id)
        if status.rejected:
            self._periods.transition(period, PayPeriodStatus.DRAFT, actor_id)
        elif status.is_fully_approved:
            self._periods.transition(period, PayPeriodStatus.COMPLETED, actor_id)
        else:
            return
        self.session.flush()

    def reset_approvals(
        self,
        pay_period_id: UUID,
        actor_id: UUID,
        department_id: UUID | None = None,
    ) -> int:
        """
        Put approvals of the period back to PENDING.

        With ``department_id`` only that department's approvals and the
        organisation-wide ones (no department) are reset.

        Returns:
            Number of approvals reset.
        """
        stmt = select(PayrollApprovalModel).where(
            PayrollApprovalModel.pay_period_id == pay_period_id,
        )
        if department_id is not None:
            stmt = stmt.where(
                or_(
                    PayrollApprovalModel.department_id == department_id,
                    PayrollApprovalModel.department_id.is_(None),
                )
            )

        approvals = self.session.execute(stmt).scalars().all()
        for approval in approvals:
            approval.status = ApprovalStatus.PENDING.value
            approval.comments = None
            approval.decided_at = None
            approval.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "approvals_reset",
            extra={
                "pay_period_id": str(pay_period_id),
                "department_id": str(department_id) if department_id else None,
                "count": len(approvals),
            },
        )
        return len(approvals)

    def list_approvals(self, pay_period_id: UUID) -> list[PayrollApprovalInfo]:
        rows = self.session.execute(
            select(PayrollApprovalModel)
            .where(PayrollApprovalModel.pay_period_id == pay_period_id)
            .order_by(PayrollApprovalModel.created_at, PayrollApprovalModel.id)
        ).scalars()
        return [row.to_dto() for row in rows]

    def get_workflow_status(self, pay_period_id: UUID) -> ApprovalWorkflowStatus:
        statuses = list(
            self.session.execute(
                select(PayrollApprovalModel.status).where(
                    PayrollApprovalModel.pay_period_id == pay_period_id,
                )
            ).scalars()
        )
        return ApprovalWorkflowStatus(
            pay_period_id=pay_period_id,
            total=len(statuses),
            pending=statuses.count(ApprovalStatus.PENDING.value),
            approved=statuses.count(ApprovalStatus.APPROVED.value),
            rejected=statuses.count(ApprovalStatus.REJECTED.value),
        )
