"""Cached access to zone price series."""

from __future__ import annotations

import asyncio
from datetime import datetime, time
import logging

from ..domain.cache import (
    PUBLICATION_CUTOFF,
    PUBLICATION_TIMEZONE,
    CachedSeries,
    CacheStatus,
    CacheStore,
    cache_key,
    cache_status,
    clear_cached,
    read_cached,
    write_cached,
)
from ..domain.prices import PricePoint
from ..domain.zones import BiddingZoneInfo
from .nordpool_api import NordpoolApi

_LOGGER = logging.getLogger(__name__)


class PriceRepository:
    """Serve series from the cache while fresh, fetch them otherwise.

    Only one fetch per zone runs at a time; overlapping callers share it.
    """

    def __init__(
        self,
        api: NordpoolApi,
        store: CacheStore,
        timezone_name: str = PUBLICATION_TIMEZONE,
        cutoff: time = PUBLICATION_CUTOFF,
    ) -> None:
        """Initialize."""
        self._api = api
        self._store = store
        self._timezone_name = timezone_name
        self._cutoff = cutoff
        self._in_flight: dict[str, asyncio.Task[list[PricePoint]]] = {}

    def is_fetching(self, zone: BiddingZoneInfo) -> bool:
        return zone.code in self._in_flight

    async def async_get_series(
        self, zone: BiddingZoneInfo, now: datetime, force: bool = False
    ) -> list[PricePoint]:
        if not force:
            cached = read_cached(self._store, cache_key(zone.code))
            if cached is not None:
                status = cache_status(cached, now, self._timezone_name, self._cutoff)
                if status is CacheStatus.FRESH:
                    _LOGGER.debug(
                        "Using cached prices of %s from %s",
                        zone.code,
                        cached.fetched_at,
                    )
                    return cached.data

        task = self._in_flight.get(zone.code)
        if task is None:
            _LOGGER.debug("Fetching prices of %s", zone.code)
            task = asyncio.create_task(self._async_fetch(zone, now))
            self._in_flight[zone.code] = task
            task.add_done_callback(lambda _: self._in_flight.pop(zone.code, None))
        else:
            _LOGGER.debug("Joining fetch of %s already in flight", zone.code)
        return await asyncio.shield(task)

    async def async_refresh(
        self, zone: BiddingZoneInfo, now: datetime
    ) -> list[PricePoint]:
        """Drop every cached series and fetch the zone again."""
        removed = clear_cached(self._store)
        _LOGGER.debug("Manual refresh cleared %s", removed)
        return await self.async_get_series(zone, now, force=True)

    async def _async_fetch(
        self, zone: BiddingZoneInfo, now: datetime
    ) -> list[PricePoint]:
        series = await self._api.async_get_prices(zone)
        write_cached(
            self._store,
            cache_key(zone.code),
            CachedSeries.create(series, now, self._timezone_name),
        )
        return series
