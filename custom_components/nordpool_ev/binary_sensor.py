"""Nordpool EV binary sensors."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
import logging

from homeassistant.components.binary_sensor import (
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import NordpoolEvConfigEntry
from .const import DOMAIN
from .domain.dashboard import ChargingPlanner, DashboardData

UNIQUE_ID_PREFIX = DOMAIN

PARALLEL_UPDATES = 1


_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=False, kw_only=True)
class NordpoolEvBinarySensorDescription(BinarySensorEntityDescription):
    key: str = field(init=False)
    value_fn: Callable[[DashboardData], bool | None]

    def __post_init__(self):
        self.key = self.name.lower().replace(" ", "_")


SENSOR_DESCRIPTIONS: tuple[NordpoolEvBinarySensorDescription, ...] = (
    NordpoolEvBinarySensorDescription(
        name="Charging Window Active",
        value_fn=lambda data: (
            data.recommendation.is_active if data.recommendation else None
        ),
        icon="mdi:ev-station",
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: NordpoolEvConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    device_info = entry.runtime_data.coordinator.device_info
    planner = entry.runtime_data.planner

    sensors: list[NordpoolEvBinarySensor] = [
        NordpoolEvBinarySensor(device_info, planner, description)
        for description in SENSOR_DESCRIPTIONS
    ]

    async_add_entities(sensors)


class NordpoolEvBinarySensor(BinarySensorEntity):
    _attr_has_entity_name = True
    entity_description: NordpoolEvBinarySensorDescription

    def __init__(
        self,
        device_info: DeviceInfo,
        planner: ChargingPlanner,
        description: NordpoolEvBinarySensorDescription,
    ) -> None:
        self._attr_device_info = device_info
        self.planner: ChargingPlanner = planner
        self.entity_description = description
        self._attr_unique_id = (
            f"{UNIQUE_ID_PREFIX}_{planner.zone.code.lower()}_{description.key}"
        )

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()

        @callback
        def listener() -> None:
            self.async_write_ha_state()

        remove_listener = self.planner.async_add_listener(listener)
        setattr(remove_listener, "_hass_callback", True)
        self.async_on_remove(remove_listener)

        self.async_write_ha_state()
        _LOGGER.debug(
            "Setup of Nordpool EV binary sensor %s (%s, unique_id: %s)",
            self.name,
            self.entity_id,
            self._attr_unique_id,
        )

    @cached_property
    def should_poll(self) -> bool:
        return False

    @property
    def is_on(self) -> bool | None:
        if self.planner.data is None:
            return None
        return self.entity_description.value_fn(self.planner.data)
