"""
Benefit Resolution (``payroll_engines.benefits``).

Selects the active benefit assignments whose [start_date, end_date] range
overlaps the pay period (an open end date runs forever) and sums their
fixed amounts.  Amounts are not prorated by days of overlap.

Pure: ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from payroll_engines.tracer import traced_engine
from payroll_kernel.db.types import ZERO, round_money
from payroll_kernel.domain.dtos import BenefitAssignmentInfo


@dataclass(frozen=True)
class BenefitLine:
    benefit_assignment_id: UUID
    benefit_type_id: UUID
    name: str
    amount: Decimal


@dataclass(frozen=True)
class BenefitResult:
    lines: tuple[BenefitLine, ...]
    total_benefits: Decimal


def is_benefit_active(
    assignment: BenefitAssignmentInfo,
    period_start: date,
    period_end: date,
) -> bool:
    if not assignment.is_active:
        return False
    if assignment.start_date > period_end:
        return False
    return assignment.end_date is None or assignment.end_date >= period_start


@traced_engine("benefits", "1.0", fingerprint_fields=("assignments", "period_start", "period_end"))
def resolve_benefits(
    assignments: Iterable[BenefitAssignmentInfo],
    period_start: date,
    period_end: date,
) -> BenefitResult:
    """Benefit lines and total for one employee and one period."""
    lines = tuple(
        BenefitLine(
            benefit_assignment_id=a.id,
            benefit_type_id=a.benefit_type_id,
            name=a.benefit_name,
            amount=round_money(a.amount),
        )
        for a in assignments
        if is_benefit_active(a, period_start, period_end)
    )
    total = sum((line.amount for line in lines), ZERO)
    return BenefitResult(lines=lines, total_benefits=round_money(total))
