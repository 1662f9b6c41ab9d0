"""Date manipulation utilities"""

import calendar
from datetime import date, datetime
from typing import Union


def start_of_day(value: Union[date, datetime]) -> date:
    """Truncate to the local calendar day (aware datetimes are converted to local time first)"""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def local_datetime_from_ms(timestamp_ms: float) -> datetime:
    """Convert epoch milliseconds to a naive local datetime"""
    return datetime.fromtimestamp(timestamp_ms / 1000)


def add_calendar_months_keeping_day(from_date: date, months: int) -> date:
    """
    Add calendar months keeping the day of month.

    The day is clamped to the last day of the target month when it doesn't
    exist there (Jan 31 + 1 month = Feb 28, or Feb 29 in leap years).
    """
    return add_months_on_day(from_date, months, from_date.day)


def add_months_on_day(from_date: date, months: int, day_of_month: int) -> date:
    """Move ``months`` calendar months and land on ``day_of_month`` (clamped to the month length)"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(max(day_of_month, 1), calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_key(value: Union[date, datetime]) -> str:
    """Canonical YYYY-MM key for the month containing ``value``"""
    return f"{value.year:04d}-{value.month:02d}"


def month_key_offset(anchor: date, offset: int) -> str:
    """Month key ``offset`` months away from the month of ``anchor``"""
    return month_key(add_months_on_day(anchor, offset, 1))
