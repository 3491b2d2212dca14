"""The Nordpool EV coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from .const import DOMAIN, STALENESS_CHECK_MINUTES_PATTERN
from .domain.dashboard import ChargingPlanner
from .domain.prices import MalformedFeed, PricePoint
from .domain.zones import BiddingZoneInfo
from .infrastructure.nordpool_api import NetworkFailure
from .infrastructure.price_repository import PriceRepository

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class PriceData:
    """Canonical prices of a zone."""

    fetched_at: datetime
    series: list[PricePoint]


class NordpoolEvDataUpdateCoordinator(DataUpdateCoordinator[PriceData]):
    """Class to manage fetching spot prices."""

    def __init__(
        self,
        hass: HomeAssistant,
        repository: PriceRepository,
        planner: ChargingPlanner,
        entry: ConfigEntry,
    ) -> None:
        """Initialize."""
        self._repository = repository
        self.planner: ChargingPlanner = planner
        self._cancel_track_time_change_cb: CALLBACK_TYPE | None = None

        self.device_info = DeviceInfo(
            name=entry.title,
            identifiers={(DOMAIN, entry.entry_id)},
            entry_type=DeviceEntryType.SERVICE,
        )

        super().__init__(hass, _LOGGER, name=entry.title, always_update=False)

    @property
    def zone(self) -> BiddingZoneInfo:
        return self.planner.zone

    async def _async_update_data(self) -> PriceData:
        """Return cached prices while fresh, fetch them otherwise."""
        now = dt_util.utcnow()
        try:
            series = await self._repository.async_get_series(self.zone, now)
        except (NetworkFailure, MalformedFeed) as error:
            _LOGGER.exception("Update failed")
            raise UpdateFailed(error) from error

        self.planner.update_prices(now, series)
        return self._price_data(now, series)

    async def async_manual_refresh(self) -> None:
        """Drop the cache and fetch again, surfacing errors to the caller."""
        now = dt_util.utcnow()
        try:
            series = await self._repository.async_refresh(self.zone, now)
        except (NetworkFailure, MalformedFeed) as error:
            raise HomeAssistantError(
                f"Failed to fetch electricity prices: {error}"
            ) from error

        self.planner.update_prices(now, series)
        self.async_set_updated_data(self._price_data(now, series))

    def _price_data(self, now: datetime, series: list[PricePoint]) -> PriceData:
        if self.data is not None and self.data.series == series:
            return self.data
        return PriceData(fetched_at=now, series=series)

    @callback
    def _schedule_refresh(self) -> None:
        """Subscribe to time changes when first listener is added."""
        super()._schedule_refresh()
        if not self._shutdown_requested and not self._cancel_track_time_change_cb:
            self._cancel_track_time_change_cb = async_track_time_change(
                self.hass,
                self._async_refresh_with_datetime,
                second=0,
                minute=STALENESS_CHECK_MINUTES_PATTERN,
            )

    @callback
    def _unschedule_refresh(self) -> None:
        """Unsubscribe from time changes when last listener is removed."""
        super()._unschedule_refresh()
        if not self._listeners:
            self._cancel_track_time_change()

    async def async_shutdown(self) -> None:
        """Add track time change cancelation."""
        await super().async_shutdown()
        self._cancel_track_time_change()

    def _cancel_track_time_change(self) -> None:
        if self._cancel_track_time_change_cb:
            self._cancel_track_time_change_cb()
        self._cancel_track_time_change_cb = None

    async def _async_refresh_with_datetime(self, now: datetime) -> None:
        await self.async_refresh()
