"""Money helpers.

Prices are stored as ``Numeric(12, 2)`` columns but every sum and product is
computed on integer minor units (centimes) so totals never pick up float
drift.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

MINOR_UNITS = 100

Amount = Union[Decimal, int, float, str]


def to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_minor(value: Optional[Amount]) -> int:
    """Convert a major-unit amount to integer minor units; ``None`` is 0."""
    if value is None:
        return 0
    minor = (to_decimal(value) * MINOR_UNITS).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


def from_minor(minor: int) -> Decimal:
    return (Decimal(minor) / MINOR_UNITS).quantize(Decimal("0.01"))


def format_amount(minor: int) -> str:
    """Human readable amount: ``1000`` for whole values, ``12.50`` otherwise."""
    if minor % MINOR_UNITS == 0:
        return str(minor // MINOR_UNITS)
    return str(from_minor(minor))
