"""Config flow of the Nordpool EV integration."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant.config_entries import ConfigFlow, ConfigFlowResult

from .const import (
    CONF_AREA,
    CONF_BATTERY_SIZE,
    CONF_CHARGER_POWER,
    CONF_FALLBACK_FX_RATE,
    CONF_RESOLUTION,
    CONF_WINDOW_HOURS,
    DOMAIN,
    MAX_WINDOW_HOURS,
    MIN_WINDOW_HOURS,
)
from .domain.charging import (
    DEFAULT_BATTERY_SIZE_KWH,
    DEFAULT_CHARGER_POWER_KW,
    DEFAULT_WINDOW_HOURS,
)
from .domain.prices import DEFAULT_FX_RATE
from .domain.resample import Resolution
from .domain.zones import DEFAULT_ZONE, zone_options

DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_AREA, default=DEFAULT_ZONE): vol.In(zone_options()),
        vol.Required(CONF_RESOLUTION, default=Resolution.HOURLY.value): vol.In(
            [resolution.value for resolution in Resolution]
        ),
        vol.Required(CONF_WINDOW_HOURS, default=DEFAULT_WINDOW_HOURS): vol.All(
            vol.Coerce(int), vol.Range(min=MIN_WINDOW_HOURS, max=MAX_WINDOW_HOURS)
        ),
        vol.Required(CONF_CHARGER_POWER, default=DEFAULT_CHARGER_POWER_KW): vol.All(
            vol.Coerce(float), vol.Range(min=0.1)
        ),
        vol.Required(CONF_BATTERY_SIZE, default=DEFAULT_BATTERY_SIZE_KWH): vol.All(
            vol.Coerce(float), vol.Range(min=0.1)
        ),
        vol.Required(CONF_FALLBACK_FX_RATE, default=DEFAULT_FX_RATE): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
    }
)


class NordpoolEvConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for one bidding zone."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        if user_input is not None:
            area = user_input[CONF_AREA]
            await self.async_set_unique_id(area)
            self._abort_if_unique_id_configured()
            return self.async_create_entry(title=f"Nordpool {area}", data=user_input)

        return self.async_show_form(step_id="user", data_schema=DATA_SCHEMA)
