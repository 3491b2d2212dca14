"""Adapter from Hass to Domain."""

from datetime import datetime
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.event import async_track_time_change
from homeassistant.util import dt as dt_util

from .const import (
    CONF_AREA,
    CONF_BATTERY_SIZE,
    CONF_CHARGER_POWER,
    CONF_RESOLUTION,
    CONF_WINDOW_HOURS,
)
from .domain.charging import (
    DEFAULT_BATTERY_SIZE_KWH,
    DEFAULT_CHARGER_POWER_KW,
    DEFAULT_WINDOW_HOURS,
)
from .domain.dashboard import ChargingPlanner, DashboardSettings
from .domain.local_time import resolve_timezone
from .domain.resample import Resolution
from .domain.zones import get_zone

_LOGGER = logging.getLogger(__name__)


def map_resolution(value: str | None) -> Resolution:
    try:
        return Resolution(value)
    except ValueError:
        _LOGGER.error("Resolution %s is not supported, using hourly", value)
        return Resolution.HOURLY


def settings_from_entry(entry: ConfigEntry) -> DashboardSettings:
    data = {**entry.data, **entry.options}
    return DashboardSettings(
        resolution=map_resolution(data.get(CONF_RESOLUTION)),
        window_hours=int(data.get(CONF_WINDOW_HOURS, DEFAULT_WINDOW_HOURS)),
        charger_power_kw=float(data.get(CONF_CHARGER_POWER, DEFAULT_CHARGER_POWER_KW)),
        battery_size_kwh=float(data.get(CONF_BATTERY_SIZE, DEFAULT_BATTERY_SIZE_KWH)),
    )


def create_planner(hass: HomeAssistant, entry: ConfigEntry) -> ChargingPlanner:
    zone = get_zone(entry.data.get(CONF_AREA))
    # Raises ConfigurationError for a timezone missing from the tz database.
    resolve_timezone(zone.timezone)
    planner = ChargingPlanner(zone, settings_from_entry(entry))

    @callback
    def update_every_minute(now: datetime) -> None:
        if planner.data is not None:
            planner.update_time(dt_util.as_utc(now))

    entry.async_on_unload(
        async_track_time_change(hass, update_every_minute, second=0)
    )

    return planner
