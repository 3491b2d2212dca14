"""Staleness rules for locally cached price series."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, time
from enum import StrEnum
import logging
from typing import Any, Final, Protocol

from .local_time import local_date_string, local_minutes
from .prices import PricePoint, parse_timestamp, series_as_json, series_from_json

_LOGGER = logging.getLogger(__name__)

CACHE_PREFIX: Final[str] = "nordpool_price_data"
CACHE_VERSION: Final[int] = 4
PUBLICATION_TIMEZONE: Final[str] = "Europe/Helsinki"
PUBLICATION_CUTOFF: Final[time] = time(14, 20)


class CacheStatus(StrEnum):
    FRESH = "fresh"
    STALE = "stale"


class CacheStore(Protocol):
    """Key-value storage holding JSON-compatible cache entries."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> Iterable[str]: ...


@dataclass(frozen=True, kw_only=True)
class CachedSeries:
    data: list[PricePoint]
    date: str
    fetched_at: datetime | None
    version: int = CACHE_VERSION

    @classmethod
    def create(
        cls, data: list[PricePoint], now: datetime, timezone_name: str
    ) -> CachedSeries:
        return cls(
            data=data,
            date=local_date_string(now, timezone_name),
            fetched_at=now,
        )

    def as_json(self) -> dict[str, Any]:
        return {
            "data": series_as_json(self.data),
            "date": self.date,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
            "version": self.version,
        }

    @classmethod
    def from_json(cls, raw: Mapping[str, Any]) -> CachedSeries:
        fetched_at = raw.get("fetched_at")
        return cls(
            data=series_from_json(raw["data"]),
            date=raw["date"],
            fetched_at=parse_timestamp(fetched_at) if fetched_at else None,
            version=raw["version"],
        )


def cache_key(zone_code: str) -> str:
    return f"{CACHE_PREFIX}:{zone_code}"


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def cache_status(
    cached: CachedSeries,
    now: datetime,
    timezone_name: str = PUBLICATION_TIMEZONE,
    cutoff: time = PUBLICATION_CUTOFF,
) -> CacheStatus:
    """Decide whether cached prices can still be shown.

    Day-ahead prices are published once a day at the cutoff. Before it a
    series fetched today is current; after it the series must have been
    fetched after the cutoff to contain tomorrow.
    """
    if cached.fetched_at is None:
        _LOGGER.debug("Cache stale: fetch time unknown")
        return CacheStatus.STALE

    today = local_date_string(now, timezone_name)
    if cached.date != today:
        _LOGGER.debug("Cache stale: cached %s, today %s", cached.date, today)
        return CacheStatus.STALE

    cutoff_minutes = _minutes(cutoff)
    if local_minutes(now, timezone_name) < cutoff_minutes:
        return CacheStatus.FRESH

    if local_date_string(cached.fetched_at, timezone_name) != today:
        _LOGGER.debug("Cache stale: fetched on another day")
        return CacheStatus.STALE
    if local_minutes(cached.fetched_at, timezone_name) < cutoff_minutes:
        _LOGGER.debug("Cache stale: fetched before publication at %s", cutoff)
        return CacheStatus.STALE
    return CacheStatus.FRESH


def read_cached(store: CacheStore, key: str) -> CachedSeries | None:
    """Return the entry under key unless it is missing, broken or outdated."""
    raw = store.get(key)
    if raw is None:
        return None
    version = raw.get("version") if isinstance(raw, Mapping) else None
    if not isinstance(version, int) or version < CACHE_VERSION:
        _LOGGER.debug("Dropping outdated cache entry %s", key)
        store.remove(key)
        return None
    try:
        return CachedSeries.from_json(raw)
    except (KeyError, TypeError, ValueError):
        _LOGGER.warning("Dropping unreadable cache entry %s", key)
        store.remove(key)
        return None


def write_cached(store: CacheStore, key: str, cached: CachedSeries) -> None:
    store.set(key, cached.as_json())


def clear_cached(store: CacheStore) -> list[str]:
    """Remove every price cache entry, returning the removed keys."""
    removed = [
        key
        for key in list(store.keys())
        if key == CACHE_PREFIX or key.startswith(f"{CACHE_PREFIX}:")
    ]
    for key in removed:
        store.remove(key)
    return removed
