"""Rounding helpers and the "unbounded" sentinel shared by the calculators."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, Decimal]

# Returned when a target can never be reached at the given rate/payment.
UNBOUNDED = math.inf


def round_half_up(value: Number) -> int:
    """Round to the nearest whole unit, halves away from zero (2.5 -> 3)."""
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite value: {value}")
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_unbounded(value: Number) -> bool:
    return isinstance(value, float) and math.isinf(value)
