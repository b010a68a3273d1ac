"""
Pay period model.

A pay period is a fixed inclusive date range (normally one calendar month)
for which payroll is generated once.  ``expected_hours`` is stored, not
derived on read: it is ``working_days x hours_per_day`` at creation time.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.dtos import PayPeriodInfo, PayPeriodStatus


class PayPeriodModel(TrackedBase):
    """
    Pay period row.

    Guarantees:
        - start_date < end_date (enforced by PayPeriodService).
        - Date ranges never overlap (enforced by PayPeriodService).
        - status follows PayPeriodStatus; the row is locked FOR UPDATE by
          the batch generator while it is PROCESSING.
    """

    __tablename__ = "pay_periods"

    __table_args__ = (
        Index("idx_pay_period_dates", "start_date", "end_date"),
        Index("idx_pay_period_status", "status"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    working_days: Mapped[int] = mapped_column(Integer, nullable=False)
    expected_hours: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PayPeriodStatus.DRAFT.value,
    )

    def to_dto(self) -> PayPeriodInfo:
        return PayPeriodInfo(
            id=self.id,
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            working_days=self.working_days,
            expected_hours=self.expected_hours,
            status=PayPeriodStatus(self.status),
        )

    def __repr__(self) -> str:
        return (
            f"<PayPeriodModel {self.name} "
            f"{self.start_date}..{self.end_date} status={self.status}>"
        )
