"""Currency rounding and numeric coercion helpers"""

import math
from typing import Any


def round_currency(value: float) -> float:
    """Round to the nearest cent with halves rounded up (same as the web client's Math.round)"""
    return math.floor(value * 100 + 0.5) / 100


def finite_or_zero(value: Any) -> float:
    """
    Coerce any input to a finite float.

    None, NaN, +/-inf, booleans and non-numeric values all become 0.0.
    Never raises.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return float(value)


def clamp_percent(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def non_negative_currency(value: float) -> float:
    """Clamp at zero, then round to cents"""
    return round_currency(max(value, 0.0))


def monthly_rate(apr: float) -> float:
    """Convert an APR in percent to a monthly rate; non-positive APRs accrue nothing"""
    return apr / 100 / 12 if apr > 0 else 0.0
