"""
Decimal Utilities
llnd_engine/scoring/utils.py

Provides precision-safe decimal math for scoring calculations. Reported
percentages and totals use one decimal place, ROUND_HALF_UP.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

Number = Union[int, float, Decimal]

ONE_PLACE = Decimal("0.1")
TWO_PLACES = Decimal("0.01")


def to_decimal(value: Number, places: int = 4) -> Decimal:
    """Convert a number to Decimal with explicit precision."""
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places, rounding=ROUND_HALF_UP
    )


def clamp(
    value: Decimal,
    min_val: Decimal = Decimal("0"),
    max_val: Decimal = Decimal("100"),
) -> Decimal:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, .5 away from zero (2.5 -> 3)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(raw: Number, maximum: Number) -> Decimal:
    """
    raw / maximum × 100, quantized to 0.1.

    Returns Decimal("0.0") when maximum is zero.
    """
    max_d = Decimal(str(maximum))
    if max_d == 0:
        return Decimal("0.0")
    pct = Decimal(str(raw)) / max_d * Decimal("100")
    return pct.quantize(ONE_PLACE, rounding=ROUND_HALF_UP)


def weighted_sum(values: Iterable[Decimal], weights: Iterable[Decimal]) -> Decimal:
    """
    Σ(value_i × weight_i), quantized to 0.1.

    Weights are expected to sum to 1.0 already (validated on the config).
    """
    values = list(values)
    weights = list(weights)
    if len(values) != len(weights):
        raise ValueError("values and weights must have same length")
    total = sum((v * w for v, w in zip(values, weights)), Decimal("0"))
    return total.quantize(ONE_PLACE, rounding=ROUND_HALF_UP)
