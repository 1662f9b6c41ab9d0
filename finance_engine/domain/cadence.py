"""Cadence normalization - converts recurring amounts to monthly equivalents"""

from typing import Any, Callable, Dict

from finance_engine.domain.models import Cadence, CadenceKind, CustomUnit

# Average Gregorian year
DAYS_PER_YEAR = 365.2425

_FIXED_CADENCES: Dict[CadenceKind, Callable[[float], float]] = {
    CadenceKind.WEEKLY: lambda amount: amount * 52 / 12,
    CadenceKind.BIWEEKLY: lambda amount: amount * 26 / 12,
    CadenceKind.MONTHLY: lambda amount: amount,
    CadenceKind.QUARTERLY: lambda amount: amount / 3,
    CadenceKind.YEARLY: lambda amount: amount / 12,
    CadenceKind.ONE_TIME: lambda amount: 0.0,
}

_CUSTOM_UNITS: Dict[CustomUnit, Callable[[float, int], float]] = {
    CustomUnit.DAYS: lambda amount, interval: amount * DAYS_PER_YEAR / (interval * 12),
    CustomUnit.WEEKS: lambda amount, interval: amount * DAYS_PER_YEAR / (interval * 7 * 12),
    CustomUnit.MONTHS: lambda amount, interval: amount / interval,
    CustomUnit.YEARS: lambda amount, interval: amount / (interval * 12),
}


def to_monthly_amount(
    amount: float,
    cadence: Any,
    custom_interval: Any = None,
    custom_unit: Any = None,
) -> float:
    """
    Convert an amount paid once per ``cadence`` into a monthly equivalent.

    Requirements:
    - Custom cadences need a positive interval and a unit, otherwise 0
    - One-time amounts never recur, so they contribute 0
    - Unknown cadences return the amount unchanged
    - No rounding; callers round downstream

    Example:
        to_monthly_amount(100, "custom", 4, "weeks") -> 108.70...
    """
    parsed = Cadence.parse(cadence, custom_interval, custom_unit)

    if parsed.kind is CadenceKind.CUSTOM:
        if not parsed.interval or parsed.interval <= 0 or parsed.unit is None:
            return 0.0
        return _CUSTOM_UNITS[parsed.unit](amount, parsed.interval)

    return _FIXED_CADENCES[parsed.kind](amount)


def to_monthly_occurrences(cadence: Any, custom_interval: Any = None, custom_unit: Any = None) -> float:
    """Average number of occurrences per month"""
    return to_monthly_amount(1.0, cadence, custom_interval, custom_unit)
