"""Everything the presentation layer shows, derived from one series."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
import logging

from . import partition
from .charging import (
    DEFAULT_BATTERY_SIZE_KWH,
    DEFAULT_CHARGER_POWER_KW,
    DEFAULT_WINDOW_HOURS,
    ChargingRecommendation,
    ChargingWindow,
    CurrentPrice,
    InsufficientData,
    PriceStats,
    best_future_window,
    current_price,
    ongoing_window,
    price_stats,
    recommend,
    window_ticks,
)
from .prices import PricePoint
from .resample import Resolution, to_resolution
from .zones import BiddingZoneInfo

type CALLBACK_TYPE = Callable[[], None]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class DashboardSettings:
    resolution: Resolution = Resolution.HOURLY
    window_hours: int = DEFAULT_WINDOW_HOURS
    charger_power_kw: float = DEFAULT_CHARGER_POWER_KW
    battery_size_kwh: float = DEFAULT_BATTERY_SIZE_KWH


@dataclass(frozen=True, kw_only=True)
class DashboardData:
    zone: BiddingZoneInfo
    resolution: Resolution
    now: datetime
    series: list[PricePoint]
    today: list[PricePoint]
    tomorrow: list[PricePoint]
    future: list[PricePoint]
    window: ChargingWindow | None = None
    recommendation: ChargingRecommendation | None = None
    current: CurrentPrice | None = None
    today_stats: PriceStats | None = None
    tomorrow_stats: PriceStats | None = None
    active_index: int = -1


def build_dashboard(
    canonical: list[PricePoint],
    zone: BiddingZoneInfo,
    now: datetime,
    settings: DashboardSettings,
    held: ChargingRecommendation | None = None,
) -> DashboardData:
    """Run resampling, partitioning and optimization for one instant.

    A held recommendation is kept until its end passes.
    """
    tz = zone.timezone
    series = to_resolution(canonical, settings.resolution)
    today = partition.today(series, now, tz)
    tomorrow = partition.tomorrow(series, now, tz)

    recommendation = None
    window = ongoing_window(series, held, now, settings.resolution)
    if window is None:
        try:
            window = best_future_window(
                series, now, window_ticks(settings.window_hours, settings.resolution)
            )
        except InsufficientData as error:
            _LOGGER.debug("No charging recommendation for %s: %s", zone.code, error)
    if window is not None:
        recommendation = recommend(
            series,
            window,
            now,
            tz,
            settings.resolution,
            settings.charger_power_kw,
            settings.battery_size_kwh,
        )

    return DashboardData(
        zone=zone,
        resolution=settings.resolution,
        now=now,
        series=series,
        today=today,
        tomorrow=tomorrow,
        future=partition.future(series, now),
        window=window,
        recommendation=recommendation,
        current=current_price(series, now),
        today_stats=price_stats(today),
        tomorrow_stats=price_stats(tomorrow),
        active_index=partition.active_index(series, now),
    )


class ChargingPlanner:
    """Keeps the latest dashboard and notifies entities when it changes."""

    def __init__(
        self, zone: BiddingZoneInfo, settings: DashboardSettings | None = None
    ) -> None:
        self.zone: BiddingZoneInfo = zone
        self.settings: DashboardSettings = settings or DashboardSettings()
        self.data: DashboardData | None = None
        self._canonical: list[PricePoint] = []
        self._listeners: dict[CALLBACK_TYPE, CALLBACK_TYPE] = {}

    def update_prices(self, now: datetime, canonical: list[PricePoint]) -> None:
        self._canonical = canonical
        self.update_time(now)

    def update_time(self, now: datetime) -> None:
        held = self.data.recommendation if self.data else None
        self.data = build_dashboard(
            self._canonical, self.zone, now, self.settings, held
        )
        self._async_update_listeners()

    def async_add_listener(self, update_callback: CALLBACK_TYPE) -> Callable[[], None]:
        def remove_listener() -> None:
            self._listeners.pop(remove_listener)

        self._listeners[remove_listener] = update_callback
        return remove_listener

    def _async_update_listeners(self) -> None:
        for update_callback in list(self._listeners.values()):
            update_callback()
