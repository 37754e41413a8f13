"""Calendar date helpers.

Daily records are keyed by plain ``datetime.date`` values, serialized as
``YYYY-MM-DD``. The only place a timezone matters is resolving "today" for
the CLI and for sample seeding; that uses a process-wide IANA zone name
(``GYMLESS_DEFAULT_TZ``, UTC unless configured).
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    "format_iso_date",
    "get_current_time",
    "get_default_timezone",
    "get_today",
    "parse_iso_date",
    "resolve_timezone",
    "set_default_timezone",
]

_default_zone_name = "UTC"


def resolve_timezone(tz: ZoneInfo | str | None = None) -> ZoneInfo:
    """Turn a zone name (or None for the process default) into a ``ZoneInfo``.

    Raises
    ------
    ValueError
        If the name is not a known IANA zone
    """
    if isinstance(tz, ZoneInfo):
        return tz

    name = _default_zone_name if tz is None else tz
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone: {name}") from exc


def get_default_timezone() -> ZoneInfo:
    return resolve_timezone(None)


def set_default_timezone(timezone_name: str) -> None:
    """Set the zone used to resolve "today" (e.g., "Asia/Kolkata").

    Raises
    ------
    ValueError
        If the name is not a known IANA zone
    """
    global _default_zone_name
    resolve_timezone(timezone_name)
    _default_zone_name = timezone_name


def get_current_time(tz: ZoneInfo | str | None = None) -> datetime:
    """Aware current datetime in ``tz`` (process default when None)."""
    return datetime.now(resolve_timezone(tz))


def get_today(tz: ZoneInfo | str | None = None) -> date:
    """Local calendar date in ``tz`` (process default when None)."""
    return get_current_time(tz).date()


def parse_iso_date(value: str | date) -> date:
    """Parse an ISO-8601 calendar date.

    Accepts ``YYYY-MM-DD`` and full ISO datetimes such as
    ``2024-03-04T00:00:00.000Z``; for those the date part is kept as written,
    without timezone conversion. ``date`` and ``datetime`` values pass through.

    Raises
    ------
    ValueError
        If the value is not a valid ISO-8601 date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected ISO-8601 date string, got {type(value).__name__}")

    day_part = value.strip().partition("T")[0]
    return date.fromisoformat(day_part)


def format_iso_date(value: date) -> str:
    return value.isoformat()
