"""Nordpool EV Sensors."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import PERCENTAGE, UnitOfTime
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import NordpoolEvConfigEntry
from .const import DOMAIN
from .coordinator import NordpoolEvDataUpdateCoordinator
from .domain.charging import PriceStats
from .domain.dashboard import ChargingPlanner, DashboardData
from .domain.prices import series_as_json
from .domain.zones import BiddingZoneInfo

UNIQUE_ID_PREFIX = DOMAIN

PARALLEL_UPDATES = 1


_LOGGER = logging.getLogger(__name__)


def _price_unit(zone: BiddingZoneInfo) -> str:
    return zone.unit_label


def _stat(
    stats_fn: Callable[[DashboardData], PriceStats | None],
    value_fn: Callable[[PriceStats], float | datetime],
) -> Callable[[DashboardData], float | datetime | None]:
    def read(data: DashboardData) -> float | datetime | None:
        stats = stats_fn(data)
        return value_fn(stats) if stats else None

    return read


def _dashboard_attributes(data: DashboardData) -> dict[str, Any]:
    window = data.window
    current = data.current
    return {
        "resolution": data.resolution.value,
        "area": data.zone.code,
        "currency": data.zone.currency,
        "previous_price": current.previous.price if current and current.previous else None,
        "change_percent": current.change_percent if current else None,
        "active_index": data.active_index,
        "charging_window": (
            {"start_index": window.start_index, "end_index": window.end_index}
            if window
            else None
        ),
        "prices": series_as_json(data.series),
        "today": series_as_json(data.today),
        "tomorrow": series_as_json(data.tomorrow),
    }


@dataclass(frozen=False, kw_only=True)
class NordpoolEvSensorDescription(SensorEntityDescription):
    key: str = field(init=False)
    value_fn: Callable[[DashboardData], str | int | float | datetime | None]
    unit_fn: Callable[[BiddingZoneInfo], str | None] = lambda _: None
    attr_fn: Callable[[DashboardData], dict[str, Any]] = lambda _: {}

    def __post_init__(self):
        self.key = self.name.lower().replace(" ", "_")


SENSOR_DESCRIPTIONS: tuple[NordpoolEvSensorDescription, ...] = (
    NordpoolEvSensorDescription(
        name="Current Price",
        state_class=SensorStateClass.MEASUREMENT,
        unit_fn=_price_unit,
        value_fn=lambda data: data.current.point.price if data.current else None,
        attr_fn=_dashboard_attributes,
    ),
    ####
    #### TODAY
    ####
    NordpoolEvSensorDescription(
        name="Lowest Price Today",
        unit_fn=_price_unit,
        value_fn=_stat(lambda data: data.today_stats, lambda stats: stats.min_price),
        attr_fn=lambda data: {
            "at": data.today_stats.min_at.isoformat() if data.today_stats else None
        },
    ),
    NordpoolEvSensorDescription(
        name="Highest Price Today",
        unit_fn=_price_unit,
        value_fn=_stat(lambda data: data.today_stats, lambda stats: stats.max_price),
        attr_fn=lambda data: {
            "at": data.today_stats.max_at.isoformat() if data.today_stats else None
        },
    ),
    NordpoolEvSensorDescription(
        name="Average Price Today",
        unit_fn=_price_unit,
        value_fn=_stat(lambda data: data.today_stats, lambda stats: stats.average_price),
    ),
    ####
    #### TOMORROW
    ####
    NordpoolEvSensorDescription(
        name="Lowest Price Tomorrow",
        unit_fn=_price_unit,
        value_fn=_stat(lambda data: data.tomorrow_stats, lambda stats: stats.min_price),
        attr_fn=lambda data: {
            "at": data.tomorrow_stats.min_at.isoformat() if data.tomorrow_stats else None
        },
    ),
    NordpoolEvSensorDescription(
        name="Highest Price Tomorrow",
        unit_fn=_price_unit,
        value_fn=_stat(lambda data: data.tomorrow_stats, lambda stats: stats.max_price),
        attr_fn=lambda data: {
            "at": data.tomorrow_stats.max_at.isoformat() if data.tomorrow_stats else None
        },
    ),
    NordpoolEvSensorDescription(
        name="Average Price Tomorrow",
        unit_fn=_price_unit,
        value_fn=_stat(
            lambda data: data.tomorrow_stats, lambda stats: stats.average_price
        ),
    ),
    ####
    #### CHARGING WINDOW
    ####
    NordpoolEvSensorDescription(
        name="Charging Window Start",
        device_class=SensorDeviceClass.TIMESTAMP,
        value_fn=lambda data: data.recommendation.start if data.recommendation else None,
        attr_fn=lambda data: {
            "day": data.recommendation.day if data.recommendation else None
        },
    ),
    NordpoolEvSensorDescription(
        name="Charging Window End",
        device_class=SensorDeviceClass.TIMESTAMP,
        value_fn=lambda data: data.recommendation.end if data.recommendation else None,
    ),
    NordpoolEvSensorDescription(
        name="Charging Window Price",
        unit_fn=_price_unit,
        value_fn=lambda data: data.window.average_price if data.window else None,
        attr_fn=lambda data: {
            "future_average_price": (
                data.recommendation.average_price if data.recommendation else None
            )
        },
    ),
    NordpoolEvSensorDescription(
        name="Charging Savings",
        native_unit_of_measurement=PERCENTAGE,
        suggested_display_precision=1,
        value_fn=lambda data: (
            data.recommendation.savings_percent if data.recommendation else None
        ),
    ),
    NordpoolEvSensorDescription(
        name="Charging Cost",
        device_class=SensorDeviceClass.MONETARY,
        suggested_display_precision=2,
        unit_fn=lambda zone: zone.currency,
        value_fn=lambda data: (
            data.recommendation.charge_cost if data.recommendation else None
        ),
    ),
    NordpoolEvSensorDescription(
        name="Charging Duration",
        native_unit_of_measurement=UnitOfTime.HOURS,
        suggested_display_precision=1,
        value_fn=lambda data: (
            data.recommendation.charging_hours if data.recommendation else None
        ),
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: NordpoolEvConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Add Nordpool EV sensors."""
    coordinator = entry.runtime_data.coordinator
    planner = entry.runtime_data.planner

    sensors: list[NordpoolEvSensor] = [
        NordpoolEvSensor(coordinator, planner, description)
        for description in SENSOR_DESCRIPTIONS
    ]

    async_add_entities(sensors)


class NordpoolEvSensor(
    CoordinatorEntity[NordpoolEvDataUpdateCoordinator], SensorEntity
):
    _attr_has_entity_name = True
    _unrecorded_attributes = frozenset({"prices", "today", "tomorrow"})
    entity_description: NordpoolEvSensorDescription

    def __init__(
        self,
        coordinator: NordpoolEvDataUpdateCoordinator,
        planner: ChargingPlanner,
        description: NordpoolEvSensorDescription,
    ) -> None:
        super().__init__(coordinator)
        self.planner: ChargingPlanner = planner
        self.entity_description = description
        self._attr_unique_id = (
            f"{UNIQUE_ID_PREFIX}_{planner.zone.code.lower()}_{description.key}"
        )
        self._attr_device_info = coordinator.device_info
        unit = description.unit_fn(planner.zone)
        if unit is not None:
            self._attr_native_unit_of_measurement = unit

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()

        @callback
        def listener() -> None:
            self.async_write_ha_state()

        remove_listener = self.planner.async_add_listener(listener)
        setattr(remove_listener, "_hass_callback", True)
        self.async_on_remove(remove_listener)

        self._handle_coordinator_update()
        _LOGGER.debug(
            "Setup of Nordpool EV sensor %s (%s, unique_id: %s)",
            self.name,
            self.entity_id,
            self._attr_unique_id,
        )

    @property
    def available(self) -> bool:
        return super().available and self.planner.data is not None

    @property
    def native_value(self) -> str | int | float | datetime | None:
        if self.planner.data is None:
            return None
        return self.entity_description.value_fn(self.planner.data)

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        if self.planner.data is None:
            return None
        return self.entity_description.attr_fn(self.planner.data) or None
