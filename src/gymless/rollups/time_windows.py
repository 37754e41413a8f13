"""Calendar window calculations for rollups.

Weeks are ISO-8601 weeks starting on Monday. Months are calendar months,
keyed ``(year, month)`` with a zero-based month (0 = January) to match the
JSON contract of the mobile client.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterator, Literal

__all__ = [
    "TimeWindow",
    "compute_month_window",
    "compute_window",
    "compute_week_window",
    "get_month_key",
    "get_week_start",
    "iter_days",
]

TimeWindow = Literal["week", "month"]


def get_week_start(day: date, start_on: int = 0) -> date:
    """Get start of week for a date.

    Parameters
    ----------
    day
        Date to get week start for
    start_on
        Day of week to start on (0=Monday, 6=Sunday)

    Returns
    -------
    date
        First day of the week containing ``day``

    Examples
    --------
    >>> get_week_start(date(2024, 3, 10))  # Sunday
    datetime.date(2024, 3, 4)
    """
    days_since_start = (day.weekday() - start_on) % 7
    return day - timedelta(days=days_since_start)


def get_month_key(day: date) -> tuple[int, int]:
    """Return ``(year, month)`` with month in 0-11."""
    return day.year, day.month - 1


def compute_week_window(day: date) -> tuple[date, date]:
    """Compute the Monday..Sunday window containing ``day`` (inclusive)."""
    start = get_week_start(day)
    return start, start + timedelta(days=6)


def compute_month_window(day: date) -> tuple[date, date]:
    """Compute the first..last day window of the month containing ``day``."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def compute_window(day: date, window: TimeWindow) -> tuple[date, date]:
    """Compute the inclusive window of the given type containing ``day``.

    Raises
    ------
    ValueError
        If the window type is unknown
    """
    if window == "week":
        return compute_week_window(day)
    elif window == "month":
        return compute_month_window(day)
    else:
        raise ValueError(f"Unknown window type: {window}")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Iterate over every date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
