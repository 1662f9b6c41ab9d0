"""Monthly billing-cycle counting on calendar month boundaries"""

from datetime import date, datetime
from typing import Any, Union

from finance_engine.utils.date_utils import (
    add_calendar_months_keeping_day,
    local_datetime_from_ms,
    month_key,
    start_of_day,
)
from finance_engine.utils.money import finite_or_zero

# 50 years of monthly cycles; guarantees termination on corrupted timestamps
MAX_CYCLE_ITERATIONS = 600


def count_completed_monthly_cycles(from_timestamp_ms: Any, now: Union[date, datetime]) -> int:
    """
    Count whole calendar-month boundaries between ``from_timestamp_ms`` and ``now``.

    Both ends are truncated to local start of day. A boundary landing on
    ``now``'s day counts as completed (inclusive at day level), so a cycle
    started on Jan 15 is complete on Feb 15 at any hour but not on Feb 14.
    Month ends clamp: a marker on Jan 31 advances to Feb 28.

    Timestamps outside the platform's datetime range count zero cycles;
    counting stops at the last representable month.
    """
    today = start_of_day(now)
    cycles = 0
    try:
        marker = start_of_day(local_datetime_from_ms(finite_or_zero(from_timestamp_ms)))
        for _ in range(MAX_CYCLE_ITERATIONS):
            next_boundary = add_calendar_months_keeping_day(marker, 1)
            if next_boundary > today:
                break
            marker = next_boundary
            cycles += 1
    except (OverflowError, OSError, ValueError):
        # Past the platform's date range: no further boundary can complete
        return cycles

    return cycles


def to_cycle_key(value: Union[date, datetime]) -> str:
    """Canonical YYYY-MM key identifying the cycle month of ``value``"""
    return month_key(start_of_day(value))
