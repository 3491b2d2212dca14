"""The Nordpool EV component."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.typing import ConfigType

from .adapter import create_planner
from .const import CONF_FALLBACK_FX_RATE, DOMAIN
from .coordinator import NordpoolEvDataUpdateCoordinator
from .domain.dashboard import ChargingPlanner
from .domain.prices import DEFAULT_FX_RATE
from .infrastructure.nordpool_api import NordpoolApi
from .infrastructure.price_repository import PriceRepository
from .infrastructure.storage import HassCacheStore
from .views import NordpoolPricesView

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.BINARY_SENSOR, Platform.BUTTON, Platform.SENSOR]


@dataclass
class NordpoolEvData:
    """Nordpool EV Data."""

    planner: ChargingPlanner
    coordinator: NordpoolEvDataUpdateCoordinator


type NordpoolEvConfigEntry = ConfigEntry[NordpoolEvData]


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Load the shared cache and register the prices HTTP API."""
    _LOGGER.debug("async_setup")
    store = HassCacheStore(hass)
    await store.async_load()
    hass.data[DOMAIN] = store

    api = NordpoolApi(async_get_clientsession(hass))
    hass.http.register_view(NordpoolPricesView(api))
    return True


async def async_setup_entry(hass: HomeAssistant, entry: NordpoolEvConfigEntry) -> bool:
    """Set up Nordpool EV as config entry."""
    _LOGGER.debug("async_setup_entry")

    websession = async_get_clientsession(hass)
    api = NordpoolApi(
        websession, entry.data.get(CONF_FALLBACK_FX_RATE, DEFAULT_FX_RATE)
    )
    store: HassCacheStore = hass.data[DOMAIN]

    planner = create_planner(hass, entry)
    coordinator = NordpoolEvDataUpdateCoordinator(
        hass, PriceRepository(api, store), planner, entry
    )

    await coordinator.async_config_entry_first_refresh()

    entry.runtime_data = NordpoolEvData(planner, coordinator)

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    return True


async def async_unload_entry(hass: HomeAssistant, entry: NordpoolEvConfigEntry) -> bool:
    """Unload a config entry."""
    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
