"""
Standing Deductions (``payroll_engines.standing_deductions``).

Charges every active deduction type that carries a rate against one
employee's gross pay:

    percentage type  ->  gross_pay x percentage / 100
    fixed type       ->  fixed_amount

Balance-only types (no rate) are skipped; they are charged by the
amortizer.  A computed amount of zero produces no line.  Standing lines
have no deduction balance, so persisting them never touches a balance.

Pure: ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from payroll_engines.tracer import traced_engine
from payroll_kernel.db.types import ZERO, round_money
from payroll_kernel.domain.dtos import DeductionTypeInfo

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class StandingDeductionLine:
    deduction_type_id: UUID
    name: str
    amount: Decimal
    percentage: Decimal | None = None


@dataclass(frozen=True)
class StandingDeductionResult:
    lines: tuple[StandingDeductionLine, ...]
    total_deductions: Decimal


def compute_standing_amount(deduction_type: DeductionTypeInfo, gross_pay: Decimal) -> Decimal:
    """Amount charged for one type; zero for inactive or balance-only types."""
    if not deduction_type.is_active:
        return ZERO
    if deduction_type.percentage is not None:
        return round_money(gross_pay * deduction_type.percentage / _HUNDRED)
    if deduction_type.fixed_amount is not None:
        return round_money(deduction_type.fixed_amount)
    return ZERO


@traced_engine("standing_deductions", "1.0", fingerprint_fields=("deduction_types", "gross_pay"))
def apply_standing_deductions(
    deduction_types: Iterable[DeductionTypeInfo],
    gross_pay: Decimal,
) -> StandingDeductionResult:
    lines: list[StandingDeductionLine] = []
    for deduction_type in deduction_types:
        amount = compute_standing_amount(deduction_type, gross_pay)
        if amount <= 0:
            continue
        lines.append(
            StandingDeductionLine(
                deduction_type_id=deduction_type.id,
                name=deduction_type.name,
                amount=amount,
                percentage=deduction_type.percentage,
            )
        )

    total = sum((line.amount for line in lines), ZERO)
    return StandingDeductionResult(lines=tuple(lines), total_deductions=round_money(total))
