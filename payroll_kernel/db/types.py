"""
Module: payroll_kernel.db.types
Responsibility: Annotated column aliases and the rounding helpers shared by
    every money and hour computation in the payroll engine.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, selectors/ and the engines.  MUST NOT import from any of them.

Invariants enforced:
    - No floats anywhere.  All monetary amounts and hour totals are Decimal.
    - round_money() and round_hours() are the only sanctioned rounding
      functions; both use ROUND_HALF_UP.
    - Stored amounts keep 9 decimal places (Numeric(38, 9)); settlement
      amounts (gross, net, lines) are rounded to 2 before they are stored.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated

from sqlalchemy import Numeric, String


# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Hour quantities (worked, overtime, paid leave)
Hours = Annotated[Decimal, Numeric(18, 4)]

# Short identifier strings (status values, codes)
ShortCode = Annotated[str, String(50)]

# Long text for descriptions and comments
LongText = Annotated[str, String(4000)]


MONEY_DECIMAL_PLACES = 9
SETTLEMENT_DECIMAL_PLACES = 2
HOURS_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def round_money(
    value: Decimal,
    decimal_places: int = SETTLEMENT_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    This is the ONLY sanctioned rounding function for money.  Gross pay,
    net pay, installments and benefit lines all pass through it.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places (default 2).
        rounding: Rounding mode (default ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def round_hours(value: Decimal) -> Decimal:
    """Round an hour quantity to 2 decimal places (ROUND_HALF_UP)."""
    return round_money(value, HOURS_DECIMAL_PLACES)
