"""
Date and datetime utilities.

All persisted timestamps are UTC; "today" for lifecycle decisions is the
UTC calendar date unless the caller supplies one.
"""

import calendar
from datetime import date, datetime, timezone
from typing import Optional

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def today_utc() -> date:
    """Get today's date in UTC."""
    return now_utc().date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Naive values are taken to be UTC already.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def add_months(value: date, months: int) -> date:
    """
    Shift a date by whole calendar months, clamping the day to the target month.

    Example:
        >>> add_months(date(2025, 1, 31), 1)
        date(2025, 2, 28)
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def add_years(value: date, years: int) -> date:
    """
    Shift a date by whole years. Feb 29 lands on Feb 28 in non-leap years.
    """
    return add_months(value, years * 12)
