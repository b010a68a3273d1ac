"""
PayPeriodService -- pay period lifecycle.

Responsibility:
    Creates pay periods (single, monthly, a whole year), reads them, moves
    them through their status lifecycle and deletes unused ones.

    DRAFT -> PROCESSING -> SENT_FOR_REVIEW -> COMPLETED

    PROCESSING is held by a running batch generation; SENT_FOR_REVIEW waits
    for approvals; a rejection sends the period back to DRAFT.

Architecture position:
    Kernel > Services -- imperative shell.  Called by the batch generator
    and the approval service.

Invariants enforced:
    - start_date < end_date.
    - Pay period date ranges never overlap.
    - Status changes follow ``ALLOWED_TRANSITIONS``; COMPLETED is terminal.
    - A period with payroll records cannot be deleted.
    - Flush-only: never commits or rolls back.

Failure modes:
    - InvalidPayPeriodError: start_date >= end_date.
    - PeriodOverlapError: new range overlaps an existing period.
    - PayPeriodNotFoundError: unknown pay_period_id.
    - InvalidPeriodStatusError: transition not in ``ALLOWED_TRANSITIONS``.
    - PeriodHasRecordsError: delete attempted while records exist.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from payroll_kernel.domain.calendar import (
    count_working_days,
    expected_hours,
    month_bounds,
    period_name,
)
from payroll_kernel.domain.dtos import PayPeriodInfo, PayPeriodStatus
from payroll_kernel.exceptions import (
    InvalidPayPeriodError,
    InvalidPeriodStatusError,
    PayPeriodNotFoundError,
    PeriodHasRecordsError,
    PeriodOverlapError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.approval import PayrollApprovalModel
from payroll_kernel.models.pay_period import PayPeriodModel
from payroll_kernel.models.payroll_record import PayrollRecordModel
from payroll_kernel.services.base import BaseService

logger = get_logger("services.pay_period")


ALLOWED_TRANSITIONS: dict[PayPeriodStatus, frozenset[PayPeriodStatus]] = {
    PayPeriodStatus.DRAFT: frozenset({PayPeriodStatus.PROCESSING}),
    PayPeriodStatus.PROCESSING: frozenset(
        {PayPeriodStatus.DRAFT, PayPeriodStatus.SENT_FOR_REVIEW}
    ),
    PayPeriodStatus.SENT_FOR_REVIEW: frozenset(
        {
            PayPeriodStatus.PROCESSING,
            PayPeriodStatus.DRAFT,
            PayPeriodStatus.COMPLETED,
        }
    ),
    PayPeriodStatus.COMPLETED: frozenset(),
}


class PayPeriodService(BaseService[PayPeriodModel]):
    """
    Service for pay period lifecycle.

    Contract:
        Returns frozen ``PayPeriodInfo`` DTOs.  Mutating methods flush
        within the caller's transaction.
    """

    def __init__(self, session: Session, hours_per_day: Decimal = Decimal("8")):
        super().__init__(session)
        self._hours_per_day = hours_per_day

    # -----------------------------------------------------------------
    # Creation
    # -----------------------------------------------------------------

    def create_period(
        self,
        name: str,
        start_date: date,
        end_date: date,
        actor_id: UUID,
        working_days: int | None = None,
    ) -> PayPeriodInfo:
        """
        Create a DRAFT pay period.

        Args:
            name: Display name, e.g. "January 2025".
            start_date: First day (inclusive).
            end_date: Last day (inclusive).
            actor_id: Who is creating the period.
            working_days: Override for the Monday-Friday count.

        Returns:
            The created PayPeriodInfo.

        Raises:
            InvalidPayPeriodError: If start_date >= end_date.
            PeriodOverlapError: If the range overlaps an existing period.
        """
        if start_date >= end_date:
            raise InvalidPayPeriodError(
                None, f"start_date ({start_date}) must be before end_date ({end_date})",
            )

        self._validate_no_overlap(name, start_date, end_date)

        if working_days is None:
            working_days = count_working_days(start_date, end_date)

        period = PayPeriodModel(
            name=name,
            start_date=start_date,
            end_date=end_date,
            working_days=working_days,
            expected_hours=expected_hours(working_days, self._hours_per_day),
            status=PayPeriodStatus.DRAFT.value,
            created_by_id=actor_id,
        )
        self.session.add(period)
        self.session.flush()

        logger.info(
            "pay_period_created",
            extra={
                "pay_period_id": str(period.id),
                "period_name": name,
                "start_date": str(start_date),
                "end_date": str(end_date),
                "working_days": working_days,
            },
        )
        return period.to_dto()

    def create_monthly_period(self, year: int, month: int, actor_id: UUID) -> PayPeriodInfo:
        """
        Create the pay period covering one calendar month.

        If a period with exactly these dates already exists it is returned
        unchanged.
        """
        start_date, end_date = month_bounds(year, month)
        existing = self.session.execute(
            select(PayPeriodModel).where(
                PayPeriodModel.start_date == start_date,
                PayPeriodModel.end_date == end_date,
            )
        ).scalar_one_or_none()
        if existing is not None:
            logger.info(
                "pay_period_exists",
                extra={"pay_period_id": str(existing.id), "period_name": existing.name},
            )
            return existing.to_dto()

        return self.create_period(period_name(year, month), start_date, end_date, actor_id)

    def generate_yearly_periods(self, year: int, actor_id: UUID) -> list[PayPeriodInfo]:
        """
        Create the twelve monthly periods of ``year``.

        Returns an empty list, creating nothing, when any period already
        starts in that year.
        """
        existing = self.session.execute(
            select(func.count(PayPeriodModel.id)).where(
                PayPeriodModel.start_date >= date(year, 1, 1),
                PayPeriodModel.start_date <= date(year, 12, 31),
            )
        ).scalar_one()
        if existing:
            logger.info(
                "yearly_periods_skipped",
                extra={"year": year, "existing_count": existing},
            )
            return []

        periods = [self.create_monthly_period(year, month, actor_id) for month in range(1, 13)]
        logger.info("yearly_periods_generated", extra={"year": year, "count": len(periods)})
        return periods

    def _validate_no_overlap(self, new_name: str, start_date: date, end_date: date) -> None:
        # Two ranges overlap if start1 <= end2 AND start2 <= end1
        overlapping = self.session.execute(
            select(PayPeriodModel)
            .where(
                PayPeriodModel.start_date <= end_date,
                PayPeriodModel.end_date >= start_date,
            )
            .order_by(PayPeriodModel.start_date)
        ).scalars().first()

        if overlapping is not None:
            raise PeriodOverlapError(
                new_period_name=new_name,
                existing_period_name=overlapping.name,
                overlap_start=str(max(start_date, overlapping.start_date)),
                overlap_end=str(min(end_date, overlapping.end_date)),
            )

    # -----------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------

    def get_period(self, pay_period_id: UUID) -> PayPeriodInfo:
        """Raises PayPeriodNotFoundError when the period does not exist."""
        return self._get_period_orm(pay_period_id).to_dto()

    def list_periods(self, year: int | None = None) -> list[PayPeriodInfo]:
        stmt = select(PayPeriodModel)
        if year is not None:
            stmt = stmt.where(
                PayPeriodModel.start_date >= date(year, 1, 1),
                PayPeriodModel.start_date <= date(year, 12, 31),
            )
        rows = self.session.execute(stmt.order_by(PayPeriodModel.start_date)).scalars()
        return [row.to_dto() for row in rows]

    def _get_period_orm(self, pay_period_id: UUID) -> PayPeriodModel:
        period = self.session.get(PayPeriodModel, pay_period_id)
        if period is None:
            raise PayPeriodNotFoundError(str(pay_period_id))
        return period

    def get_period_for_update(self, pay_period_id: UUID) -> PayPeriodModel:
        """Load the period row with a row lock (SELECT ... FOR UPDATE)."""
        period = self.session.execute(
            select(PayPeriodModel)
            .where(PayPeriodModel.id == pay_period_id)
            .with_for_update()
        ).scalar_one_or_none()
        if period is None:
            raise PayPeriodNotFoundError(str(pay_period_id))
        return period

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    def update_status(
        self,
        pay_period_id: UUID,
        target_status: PayPeriodStatus,
        actor_id: UUID,
    ) -> PayPeriodInfo:
        """
        Move a period to ``target_status``.

        Raises:
            PayPeriodNotFoundError: If the period does not exist.
            InvalidPeriodStatusError: If the transition is not allowed.
        """
        period = self.get_period_for_update(pay_period_id)
        self.transition(period, target_status, actor_id)
        self.session.flush()
        return period.to_dto()

    def transition(
        self,
        period: PayPeriodModel,
        target_status: PayPeriodStatus,
        actor_id: UUID,
    ) -> None:
        """Apply a status change to an already loaded (and locked) row."""
        current = PayPeriodStatus(period.status)
        if current == target_status:
            return
        if target_status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidPeriodStatusError(
                str(period.id), current.value, target_status.value,
            )
        period.status = target_status.value
        period.updated_by_id = actor_id

        logger.info(
            "pay_period_status_changed",
            extra={
                "pay_period_id": str(period.id),
                "from_status": current.value,
                "to_status": target_status.value,
            },
        )

    def delete_period(self, pay_period_id: UUID) -> None:
        """
        Delete a period and its approvals.

        Raises:
            PayPeriodNotFoundError: If the period does not exist.
            PeriodHasRecordsError: If payroll records reference it.
        """
        period = self._get_period_orm(pay_period_id)
        record_count = self.session.execute(
            select(func.count(PayrollRecordModel.id)).where(
                PayrollRecordModel.pay_period_id == pay_period_id,
            )
        ).scalar_one()
        if record_count:
            raise PeriodHasRecordsError(str(pay_period_id), record_count)

        self.session.execute(
            delete(PayrollApprovalModel).where(
                PayrollApprovalModel.pay_period_id == pay_period_id,
            )
        )
        self.session.delete(period)
        self.session.flush()
        logger.info("pay_period_deleted", extra={"pay_period_id": str(pay_period_id)})
