"""Conversion between hourly and quarter-hour series."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta
from enum import StrEnum
from statistics import fmean
from typing import Final

from .prices import PricePoint

QUARTER: Final = timedelta(minutes=15)
CADENCE_TOLERANCE: Final = timedelta(seconds=1)
QUARTER_OFFSETS: Final[tuple[int, ...]] = (0, 15, 30, 45)


class Resolution(StrEnum):
    HOURLY = "hourly"
    FIFTEEN_MINUTE = "15min"

    @property
    def ticks_per_hour(self) -> int:
        return 1 if self is Resolution.HOURLY else 4

    @property
    def tick(self) -> timedelta:
        return timedelta(hours=1) / self.ticks_per_hour


def _truncate_to_hour(timestamp: datetime) -> datetime:
    # Series timestamps are UTC, so this is an absolute hour boundary.
    return timestamp.replace(minute=0, second=0, microsecond=0)


def to_hourly(series: Sequence[PricePoint]) -> list[PricePoint]:
    """Average all points falling into the same hour."""
    groups: dict[datetime, list[float]] = {}
    for point in series:
        groups.setdefault(_truncate_to_hour(point.timestamp), []).append(point.price)
    return [PricePoint(hour, fmean(prices)) for hour, prices in sorted(groups.items())]


def detect_native_cadence(series: Sequence[PricePoint]) -> Resolution:
    if len(series) < 2:
        return Resolution.HOURLY
    gap = abs(series[1].timestamp - series[0].timestamp)
    if gap <= QUARTER + CADENCE_TOLERANCE:
        return Resolution.FIFTEEN_MINUTE
    return Resolution.HOURLY


def expand_to_fifteen_minute(series: Sequence[PricePoint]) -> list[PricePoint]:
    """Repeat each hourly price over the four quarters of its hour."""
    expanded = [
        PricePoint(
            _truncate_to_hour(point.timestamp) + timedelta(minutes=offset),
            point.price,
        )
        for point in series
        for offset in QUARTER_OFFSETS
    ]
    return sorted(expanded, key=lambda point: point.timestamp)


def to_resolution(
    series: Sequence[PricePoint], resolution: Resolution
) -> list[PricePoint]:
    if resolution is Resolution.HOURLY:
        return to_hourly(series)
    if detect_native_cadence(series) is Resolution.FIFTEEN_MINUTE:
        return list(series)
    return expand_to_fifteen_minute(to_hourly(series))
