"""Constants of the Nordpool EV integration."""

from typing import Final

DOMAIN: Final[str] = "nordpool_ev"

CONF_AREA: Final[str] = "area"
CONF_RESOLUTION: Final[str] = "resolution"
CONF_WINDOW_HOURS: Final[str] = "window_hours"
CONF_CHARGER_POWER: Final[str] = "charger_power"
CONF_BATTERY_SIZE: Final[str] = "battery_size"
CONF_FALLBACK_FX_RATE: Final[str] = "fallback_fx_rate"

MIN_WINDOW_HOURS: Final[int] = 1
MAX_WINDOW_HOURS: Final[int] = 12

STALENESS_CHECK_MINUTES_PATTERN: Final[str] = "/5"
