"""Monetary arithmetic helpers"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number | None) -> Decimal:
    """Convert a monetary input to Decimal (None becomes zero)"""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.019 from expanding to their binary representation
    return Decimal(str(value))


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero"""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def clamp(value: int, lower: int, upper: int) -> int:
    """Bound value to the closed interval [lower, upper]"""
    return min(upper, max(lower, value))
