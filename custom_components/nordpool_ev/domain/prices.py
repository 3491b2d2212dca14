"""Domain logic of spot prices."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
import logging
import math
from typing import Any, Final

from .local_time import ConfigurationError
from .zones import BiddingZoneInfo

_LOGGER = logging.getLogger(__name__)

PRICES_FIELD: Final[str] = "prices"
TIMESTAMP_FIELDS: Final[tuple[str, ...]] = ("datetime", "timestamp", "startDate")
DEFAULT_FX_RATE: Final[float] = 11.0
PRICE_DECIMALS: Final[int] = 4


class MalformedFeed(ValueError):
    """Raised when the provider payload does not have the expected shape."""


@dataclass(frozen=True, slots=True)
class PricePoint:
    """Price of one tick in minor currency unit per kWh."""

    timestamp: datetime
    price: float

    def as_json(self) -> dict[str, str | float]:
        return {"timestamp": self.timestamp.isoformat(), "price": self.price}

    @classmethod
    def from_json(cls, item: Mapping[str, Any]) -> PricePoint:
        return cls(parse_timestamp(item["timestamp"]), float(item["price"]))


@dataclass(frozen=True, slots=True)
class FxRates:
    """EUR exchange rates used for one conversion."""

    sek: float = DEFAULT_FX_RATE
    nok: float = DEFAULT_FX_RATE
    fallback: bool = True

    @classmethod
    def create_from_json(cls, data: Any, fallback_rate: float) -> FxRates:
        """Read `{rates: {SEK, NOK}}`, keeping the fallback for anything unusable."""
        rates = data.get("rates") if isinstance(data, Mapping) else None
        if not isinstance(rates, Mapping):
            rates = {}
        sek = _finite_number(rates.get("SEK"))
        nok = _finite_number(rates.get("NOK"))
        return cls(
            sek=fallback_rate if sek is None else sek,
            nok=fallback_rate if nok is None else nok,
            fallback=sek is None or nok is None,
        )


def _finite_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def parse_timestamp(value: str) -> datetime:
    """Parse ISO-8601, reading offset-less values as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def minor_units_per_eur(currency: str, fx_rates: FxRates) -> float:
    match currency:
        case "EUR":
            return 100.0
        case "SEK":
            return fx_rates.sek * 100
        case "NOK":
            return fx_rates.nok * 100
        case _:
            raise ConfigurationError(f"Unsupported currency: {currency!r}")


def eur_mwh_to_minor_kwh(price: float, currency: str, fx_rates: FxRates) -> float:
    return price * minor_units_per_eur(currency, fx_rates) / 1000


def _parse_item(item: Any) -> tuple[datetime, float] | None:
    if not isinstance(item, Mapping):
        return None
    raw_timestamp = next(
        (item[field] for field in TIMESTAMP_FIELDS if field in item), None
    )
    if not isinstance(raw_timestamp, str) or not raw_timestamp:
        return None
    price = _finite_number(item.get("price"))
    if price is None:
        return None
    try:
        timestamp = parse_timestamp(raw_timestamp)
    except ValueError:
        return None
    return timestamp, price


def _items(payload: Any) -> Iterable[Any]:
    if not isinstance(payload, Mapping):
        raise MalformedFeed(f"Expected a JSON object, got {type(payload).__name__}")
    items = payload.get(PRICES_FIELD, [])
    if not isinstance(items, list):
        raise MalformedFeed(f"Field '{PRICES_FIELD}' is not an array")
    return items


def normalize(
    payload: Any,
    zone: BiddingZoneInfo,
    fx_rates: FxRates,
    vat_exclusive: bool = True,
) -> list[PricePoint]:
    """Turn a raw EUR/MWh feed into the canonical series of a zone.

    Unusable items are dropped. The result is sorted by timestamp and, when
    the feed repeats a timestamp, keeps the first occurrence.
    """
    multiplier = zone.vat_multiplier if vat_exclusive else 1.0
    by_timestamp: dict[datetime, float] = {}
    dropped = 0
    for item in _items(payload):
        parsed = _parse_item(item)
        if parsed is None:
            dropped += 1
            continue
        timestamp, eur_mwh = parsed
        if timestamp in by_timestamp:
            dropped += 1
            continue
        local = eur_mwh_to_minor_kwh(eur_mwh, zone.currency, fx_rates)
        by_timestamp[timestamp] = round(local * multiplier, PRICE_DECIMALS)

    if dropped:
        _LOGGER.debug("Dropped %d unusable price items for %s", dropped, zone.code)

    return [
        PricePoint(timestamp, price) for timestamp, price in sorted(by_timestamp.items())
    ]


def series_as_json(series: Iterable[PricePoint]) -> list[dict[str, str | float]]:
    return [point.as_json() for point in series]


def series_from_json(items: Iterable[Mapping[str, Any]]) -> list[PricePoint]:
    return [PricePoint.from_json(item) for item in items]
