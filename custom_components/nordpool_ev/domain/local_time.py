"""Calendar helpers working in a named IANA timezone."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class ConfigurationError(Exception):
    """Raised when a timezone, zone or currency cannot be resolved."""


@dataclass(frozen=True, slots=True)
class CalendarComponents:
    """Wall clock fields of an instant; month is 0-based."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    def same_day(self, other: CalendarComponents) -> bool:
        return (self.year, self.month, self.day) == (other.year, other.month, other.day)


@lru_cache(maxsize=32)
def resolve_timezone(name: str) -> ZoneInfo:
    """Return the tz database zone or fail loudly."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as error:
        raise ConfigurationError(f"Unknown timezone: {name!r}") from error


def _localize(instant: datetime, timezone_name: str) -> datetime:
    if instant.tzinfo is None:
        raise ValueError(f"Naive datetime is not an instant: {instant!r}")
    return instant.astimezone(resolve_timezone(timezone_name))


def to_calendar(instant: datetime, timezone_name: str) -> CalendarComponents:
    local = _localize(instant, timezone_name)
    return CalendarComponents(
        year=local.year,
        month=local.month - 1,
        day=local.day,
        hour=local.hour,
        minute=local.minute,
        second=local.second,
    )


def same_local_day(first: datetime, second: datetime, timezone_name: str) -> bool:
    return to_calendar(first, timezone_name).same_day(
        to_calendar(second, timezone_name)
    )


def local_date_string(instant: datetime, timezone_name: str) -> str:
    return _localize(instant, timezone_name).date().isoformat()


def local_minutes(instant: datetime, timezone_name: str) -> int:
    """Minutes elapsed since local midnight on the wall clock."""
    local = _localize(instant, timezone_name)
    return local.hour * 60 + local.minute


def add_local_days(instant: datetime, days: int, timezone_name: str) -> datetime:
    """Move by whole days keeping the local wall clock time.

    Arithmetic on an aware datetime in its own zone is wall clock arithmetic,
    so a day across a DST change is 23 or 25 hours long.
    """
    local = _localize(instant, timezone_name)
    return (local + timedelta(days=days)).astimezone(instant.tzinfo)
