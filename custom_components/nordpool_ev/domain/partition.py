"""Split a series into local calendar days."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from .local_time import add_local_days, to_calendar
from .prices import PricePoint


def _on_local_day(
    series: Sequence[PricePoint], reference: datetime, timezone_name: str
) -> list[PricePoint]:
    day = to_calendar(reference, timezone_name)
    return [
        point
        for point in series
        if to_calendar(point.timestamp, timezone_name).same_day(day)
    ]


def today(
    series: Sequence[PricePoint], now: datetime, timezone_name: str
) -> list[PricePoint]:
    return _on_local_day(series, now, timezone_name)


def tomorrow(
    series: Sequence[PricePoint], now: datetime, timezone_name: str
) -> list[PricePoint]:
    return _on_local_day(series, add_local_days(now, 1, timezone_name), timezone_name)


def future(series: Sequence[PricePoint], now: datetime) -> list[PricePoint]:
    """Points starting at or after now."""
    return [point for point in series if point.timestamp >= now]


def active_index(series: Sequence[PricePoint], now: datetime) -> int:
    """Index of the tick containing now, -1 when now precedes the series."""
    index = -1
    for position, point in enumerate(series):
        if point.timestamp > now:
            break
        index = position
    return index
