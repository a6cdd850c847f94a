"""
Money helpers.

All ledger amounts are Decimals with two fractional digits, rounded
half-up.
"""

from decimal import Decimal, ROUND_HALF_UP
from functools import reduce
from typing import Iterable, Optional, TypeVar, Union

T = TypeVar("T")

MoneyLike = Union[Decimal, int, float, str]

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: MoneyLike) -> Decimal:
    """Convert to Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: MoneyLike) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Optional[MoneyLike]]) -> Decimal:
    """Sum amounts, skipping NULLs the way SQL SUM does."""
    total = ZERO
    for value in values:
        if value is not None:
            total += to_decimal(value)
    return round_money(total)


def last_non_null(values: Iterable[Optional[T]]) -> Optional[T]:
    """
    Fold a sequence down to its last non-null value.

    A later value always replaces an earlier one; nulls never do.
    """
    return reduce(lambda current, value: value if value is not None else current, values, None)
