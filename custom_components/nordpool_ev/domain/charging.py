"""Charging window logic."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from statistics import fmean
from typing import Final, Literal

from .local_time import add_local_days, same_local_day
from .partition import active_index, future
from .prices import PricePoint
from .resample import Resolution

DEFAULT_WINDOW_HOURS: Final[int] = 4
DEFAULT_CHARGER_POWER_KW: Final[float] = 11.0
DEFAULT_BATTERY_SIZE_KWH: Final[float] = 75.0

type WindowDay = Literal["today", "tomorrow"]


class InsufficientData(ValueError):
    """Raised when the series is shorter than the requested window."""


@dataclass(frozen=True, slots=True)
class ChargingWindow:
    """Inclusive index range into one specific series."""

    start_index: int
    end_index: int
    average_price: float

    @property
    def length(self) -> int:
        return self.end_index - self.start_index + 1


@dataclass(frozen=True, slots=True)
class ChargingRecommendation:
    window: ChargingWindow
    start: datetime
    end: datetime
    is_active: bool
    average_price: float
    savings_percent: float
    charge_cost: float
    charging_hours: float
    day: WindowDay | None


@dataclass(frozen=True, slots=True)
class PriceStats:
    min_price: float
    max_price: float
    average_price: float
    min_at: datetime
    max_at: datetime


@dataclass(frozen=True, slots=True)
class CurrentPrice:
    point: PricePoint
    previous: PricePoint | None
    change_percent: float


def window_ticks(hours: int, resolution: Resolution) -> int:
    return hours * resolution.ticks_per_hour


def best_window(series: Sequence[PricePoint], length: int) -> ChargingWindow:
    """Find the contiguous window with the lowest average price.

    Only a strictly lower average replaces the current best, so the earliest
    window wins ties.
    """
    if length < 1:
        raise ValueError(f"Window length must be positive, got {length}")
    if len(series) < length:
        raise InsufficientData(
            f"Need {length} prices for a window, only {len(series)} available"
        )

    prices = [point.price for point in series]
    min_avg = float("inf")
    best_start = 0
    for start in range(len(prices) - length + 1):
        avg = fmean(prices[start : start + length])
        if avg < min_avg:
            min_avg = avg
            best_start = start
    return ChargingWindow(best_start, best_start + length - 1, min_avg)


def best_future_window(
    series: Sequence[PricePoint], now: datetime, length: int
) -> ChargingWindow:
    """Search only upcoming ticks and report indices into the full series."""
    upcoming = future(series, now)
    window = best_window(upcoming, length)
    offset = len(series) - len(upcoming)
    return ChargingWindow(
        window.start_index + offset, window.end_index + offset, window.average_price
    )


def ongoing_window(
    series: Sequence[PricePoint],
    held: ChargingRecommendation | None,
    now: datetime,
    resolution: Resolution,
) -> ChargingWindow | None:
    """Locate a previously recommended window in series while it still runs.

    The ticks of a started window are no longer part of `future`.
    """
    if held is None or not held.start <= now < held.end:
        return None
    for index, point in enumerate(series):
        if point.timestamp != held.start:
            continue
        end_index = index + held.window.length - 1
        if end_index >= len(series):
            return None
        if series[end_index].timestamp + resolution.tick != held.end:
            return None
        prices = [point.price for point in series[index : end_index + 1]]
        return ChargingWindow(index, end_index, fmean(prices))
    return None


def recommend(
    series: Sequence[PricePoint],
    window: ChargingWindow,
    now: datetime,
    timezone_name: str,
    resolution: Resolution,
    charger_power_kw: float = DEFAULT_CHARGER_POWER_KW,
    battery_size_kwh: float = DEFAULT_BATTERY_SIZE_KWH,
) -> ChargingRecommendation:
    start = series[window.start_index].timestamp
    end = series[window.end_index].timestamp + resolution.tick

    upcoming = future(series, now)
    # Empty while the last tick of an ongoing window runs
    average_price = (
        fmean(point.price for point in upcoming) if upcoming else window.average_price
    )
    savings_percent = 0.0
    if average_price:
        savings_percent = (average_price - window.average_price) / average_price * 100

    day: WindowDay | None = None
    if same_local_day(start, now, timezone_name):
        day = "today"
    elif same_local_day(start, add_local_days(now, 1, timezone_name), timezone_name):
        day = "tomorrow"

    return ChargingRecommendation(
        window=window,
        start=start,
        end=end,
        is_active=start <= now < end,
        average_price=average_price,
        savings_percent=savings_percent,
        charge_cost=window.average_price * battery_size_kwh / 100,
        charging_hours=battery_size_kwh / charger_power_kw,
        day=day,
    )


def price_stats(subset: Sequence[PricePoint]) -> PriceStats | None:
    if not subset:
        return None
    cheapest = min(subset, key=lambda point: point.price)
    priciest = max(subset, key=lambda point: point.price)
    return PriceStats(
        min_price=cheapest.price,
        max_price=priciest.price,
        average_price=fmean(point.price for point in subset),
        min_at=cheapest.timestamp,
        max_at=priciest.timestamp,
    )


def current_price(series: Sequence[PricePoint], now: datetime) -> CurrentPrice | None:
    index = active_index(series, now)
    if index < 0:
        return None
    point = series[index]
    previous = series[index - 1] if index > 0 else None
    change_percent = 0.0
    if previous is not None and previous.price != 0:
        change_percent = (point.price - previous.price) / previous.price * 100
    return CurrentPrice(point, previous, change_percent)
