"""
Deduction Amortization (``payroll_engines.amortization``).

Responsibility
--------------
Compute this period's installment for each recurring deduction balance
and the balance left afterwards:

    installment = min(monthly_installment, remaining_balance)
    new_balance = remaining_balance - installment

A balance whose new balance is zero becomes inactive.

Invariants enforced
-------------------
* Inactive balances and balances already at zero are never decremented
  and produce no line.
* Balances whose [start_date, end_date] range does not touch the period
  are skipped.
* ``new_balance`` is never negative: an installment larger than the
  remaining balance is clamped to it.  Clamping is not an error.
* The monthly installment is rounded to 2 decimals; the final installment
  is exactly the remaining balance, so the lines that paid a balance down
  always sum to ``original_amount - remaining_balance``.

Architecture position
---------------------
**Engines layer** -- pure.  ZERO I/O.  The batch generator writes the
results back.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from payroll_engines.tracer import traced_engine
from payroll_kernel.db.types import ZERO, round_money
from payroll_kernel.domain.dtos import DeductionBalanceInfo
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.amortization")


@dataclass(frozen=True)
class DeductionInstallment:
    """One deduction line plus the balance update that pays for it."""

    deduction_balance_id: UUID
    deduction_type_id: UUID
    name: str
    amount: Decimal
    previous_balance: Decimal
    new_balance: Decimal
    becomes_inactive: bool


@dataclass(frozen=True)
class AmortizationResult:
    installments: tuple[DeductionInstallment, ...]
    total_deductions: Decimal


def is_balance_due(
    balance: DeductionBalanceInfo,
    period_start: date,
    period_end: date,
) -> bool:
    """True when the balance should be charged in this period."""
    if not balance.is_active or balance.remaining_balance <= 0:
        return False
    if balance.start_date > period_end:
        return False
    if balance.end_date is not None and balance.end_date < period_start:
        return False
    return True


def compute_installment(balance: DeductionBalanceInfo) -> DeductionInstallment | None:
    """Installment for one balance, or None when nothing is due."""
    if not balance.is_active or balance.remaining_balance <= 0:
        return None

    amount = min(round_money(balance.monthly_installment), balance.remaining_balance)
    if amount <= 0:
        return None

    new_balance = balance.remaining_balance - amount
    return DeductionInstallment(
        deduction_balance_id=balance.id,
        deduction_type_id=balance.deduction_type_id,
        name=balance.deduction_name,
        amount=amount,
        previous_balance=balance.remaining_balance,
        new_balance=new_balance,
        becomes_inactive=new_balance == 0,
    )


@traced_engine("amortization", "1.0", fingerprint_fields=("balances", "period_start", "period_end"))
def amortize_balances(
    balances: Iterable[DeductionBalanceInfo],
    period_start: date,
    period_end: date,
) -> AmortizationResult:
    """Amortize every balance due in the period.

    Installments are returned in input order; the caller controls ordering.
    """
    installments: list[DeductionInstallment] = []
    for balance in balances:
        if not is_balance_due(balance, period_start, period_end):
            continue
        installment = compute_installment(balance)
        if installment is None:
            continue
        installments.append(installment)
        logger.debug(
            "deduction_installment_computed",
            extra={
                "deduction_balance_id": str(balance.id),
                "amount": str(installment.amount),
                "new_balance": str(installment.new_balance),
                "becomes_inactive": installment.becomes_inactive,
            },
        )

    total = sum((i.amount for i in installments), ZERO)
    return AmortizationResult(
        installments=tuple(installments),
        total_deductions=round_money(total),
    )
