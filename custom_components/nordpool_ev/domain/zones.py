"""Nordic bidding zone reference data."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final


@dataclass(frozen=True, slots=True)
class BiddingZoneInfo:
    """Static facts about one bidding zone."""

    code: str
    country: str
    name: str
    timezone: str
    currency: str
    unit_label: str
    currency_symbol: str
    vat_percent: float

    @property
    def vat_multiplier(self) -> float:
        return 1 + self.vat_percent / 100


def _fi(code: str, name: str) -> BiddingZoneInfo:
    return BiddingZoneInfo(
        code, "FI", name, "Europe/Helsinki", "EUR", "c/kWh", "€", 25.5
    )


def _se(code: str, name: str) -> BiddingZoneInfo:
    return BiddingZoneInfo(
        code, "SE", name, "Europe/Stockholm", "SEK", "öre/kWh", "kr", 25.0
    )


def _no(code: str, name: str) -> BiddingZoneInfo:
    return BiddingZoneInfo(code, "NO", name, "Europe/Oslo", "NOK", "øre/kWh", "kr", 25.0)


ZONES: Final = MappingProxyType(
    {
        zone.code: zone
        for zone in (
            _fi("FI", "Finland"),
            _se("SE1", "Norra Norrland"),
            _se("SE2", "Södra Norrland"),
            _se("SE3", "Stockholm"),
            _se("SE4", "Syd"),
            _no("NO1", "Østlandet"),
            _no("NO2", "Sørlandet"),
            _no("NO3", "Midt"),
            _no("NO4", "Nord"),
            _no("NO5", "Vest"),
        )
    }
)

DEFAULT_ZONE: Final[str] = "FI"


def get_zone(code: str | None) -> BiddingZoneInfo:
    """Look up a zone, falling back to the default one."""
    if code:
        zone = ZONES.get(code.strip().upper())
        if zone is not None:
            return zone
    return ZONES[DEFAULT_ZONE]


def zone_options() -> dict[str, str]:
    return {code: f"{code} ({zone.name})" for code, zone in ZONES.items()}
