"""Nordpool EV refresh button."""

from __future__ import annotations

import logging

from homeassistant.components.button import ButtonEntity
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import NordpoolEvConfigEntry
from .const import DOMAIN
from .coordinator import NordpoolEvDataUpdateCoordinator

PARALLEL_UPDATES = 1

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: NordpoolEvConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Add the refresh button."""
    async_add_entities([RefreshPricesButton(entry.runtime_data.coordinator)])


class RefreshPricesButton(
    CoordinatorEntity[NordpoolEvDataUpdateCoordinator], ButtonEntity
):
    _attr_has_entity_name = True
    _attr_name = "Refresh Prices"
    _attr_icon = "mdi:refresh"

    def __init__(self, coordinator: NordpoolEvDataUpdateCoordinator) -> None:
        super().__init__(coordinator)
        self._attr_unique_id = f"{DOMAIN}_{coordinator.zone.code.lower()}_refresh_prices"
        self._attr_device_info = coordinator.device_info

    @property
    def available(self) -> bool:
        # Refreshing is the way out of a failed update.
        return True

    async def async_press(self) -> None:
        _LOGGER.debug("Manual refresh of %s", self.coordinator.zone.code)
        await self.coordinator.async_manual_refresh()
