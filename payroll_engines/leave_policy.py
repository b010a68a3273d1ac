"""
Leave Payment Policy (``payroll_engines.leave_policy``).

Responsibility
--------------
Map a leave type to its payment rule and convert approved leave that
overlaps a pay period into paid leave hours:

    paid_hours = overlap_days x hours_per_day x payment_percentage / 100

Unknown leave types are unpaid.  Overlap is counted in inclusive calendar
days, matching ``LeaveGrant.total_days``.

Yearly caps
-----------
``max_paid_days_per_year`` is carried in the table but NOT enforced:
enforcing it needs per-employee consumption tracked across pay periods,
and no such ledger exists.  When a single grant already exceeds the cap
within one period, the engine logs ``leave_yearly_cap_not_enforced`` and
still pays the full overlap.

Architecture position
---------------------
**Engines layer** -- pure.  ZERO I/O apart from log records.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from payroll_config.schema import DEFAULT_LEAVE_POLICIES, LeavePolicyDef
from payroll_engines.tracer import traced_engine
from payroll_kernel.db.types import ZERO, round_hours
from payroll_kernel.domain.dtos import LeaveGrant
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.leave_policy")

_HUNDRED = Decimal("100")


class LeavePaymentPolicy:
    """Lookup table of leave payment rules keyed by (lower-cased) leave type."""

    def __init__(self, policies: Iterable[LeavePolicyDef] = DEFAULT_LEAVE_POLICIES):
        self._policies: dict[str, LeavePolicyDef] = {
            p.leave_type.lower(): p for p in policies
        }

    @staticmethod
    def _key(leave_type: str) -> str:
        return leave_type.strip().lower()

    def get(self, leave_type: str) -> LeavePolicyDef | None:
        return self._policies.get(self._key(leave_type))

    def is_paid(self, leave_type: str) -> bool:
        policy = self.get(leave_type)
        return policy.is_paid if policy else False

    def payment_percentage(self, leave_type: str) -> Decimal:
        policy = self.get(leave_type)
        if policy is None or not policy.is_paid:
            return ZERO
        return policy.payment_percentage

    def max_paid_days_per_year(self, leave_type: str) -> int | None:
        policy = self.get(leave_type)
        return policy.max_paid_days_per_year if policy else None

    @property
    def leave_types(self) -> tuple[str, ...]:
        return tuple(self._policies)


@dataclass(frozen=True)
class LeavePayLine:
    """Paid leave credited for one grant."""

    leave_id: UUID
    leave_type: str
    overlap_days: int
    payment_percentage: Decimal
    paid_hours: Decimal


@dataclass(frozen=True)
class PaidLeaveResult:
    lines: tuple[LeavePayLine, ...]
    paid_leave_hours: Decimal
    unpaid_leave_days: int


def overlap_days(
    start_date: date,
    end_date: date,
    period_start: date,
    period_end: date,
) -> int:
    """Inclusive calendar-day overlap of two date ranges (0 if disjoint)."""
    first = max(start_date, period_start)
    last = min(end_date, period_end)
    if last < first:
        return 0
    return (last - first).days + 1


@traced_engine("leave_policy", "1.0", fingerprint_fields=("grants", "period_start", "period_end"))
def compute_paid_leave(
    grants: Iterable[LeaveGrant],
    period_start: date,
    period_end: date,
    policy: LeavePaymentPolicy | None = None,
    hours_per_day: Decimal = Decimal("8"),
) -> PaidLeaveResult:
    """Convert approved leave grants into paid leave hours for a period."""
    policy = policy or LeavePaymentPolicy()

    lines: list[LeavePayLine] = []
    total = ZERO
    unpaid_days = 0

    for grant in grants:
        days = overlap_days(grant.start_date, grant.end_date, period_start, period_end)
        if days == 0:
            continue

        percentage = policy.payment_percentage(grant.leave_type)
        if percentage == 0:
            unpaid_days += days

        cap = policy.max_paid_days_per_year(grant.leave_type)
        if cap is not None and percentage > 0 and days > cap:
            logger.warning(
                "leave_yearly_cap_not_enforced",
                extra={
                    "leave_id": str(grant.id),
                    "employee_id": str(grant.employee_id),
                    "leave_type": grant.leave_type,
                    "overlap_days": days,
                    "max_paid_days_per_year": cap,
                },
            )

        paid_hours = round_hours(Decimal(days) * hours_per_day * percentage / _HUNDRED)
        total += paid_hours
        lines.append(
            LeavePayLine(
                leave_id=grant.id,
                leave_type=grant.leave_type,
                overlap_days=days,
                payment_percentage=percentage,
                paid_hours=paid_hours,
            )
        )

    return PaidLeaveResult(
        lines=tuple(lines),
        paid_leave_hours=round_hours(total),
        unpaid_leave_days=unpaid_days,
    )
