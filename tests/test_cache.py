from datetime import time

import pytest

from custom_components.nordpool_ev.domain.cache import (
    CACHE_PREFIX,
    CACHE_VERSION,
    CachedSeries,
    CacheStatus,
    cache_key,
    cache_status,
    clear_cached,
    read_cached,
    write_cached,
)
from helpers import MemoryCacheStore, make_series, utc

SERIES = make_series(utc(2024, 6, 1), [1.0, 2.0, 3.0])


def _cached(fetched_at) -> CachedSeries:
    return CachedSeries.create(SERIES, fetched_at, "Europe/Helsinki")


def test_fetch_after_publication_stays_fresh_until_midnight() -> None:
    # 14:25 local time, just after publication
    cached = _cached(utc(2024, 6, 1, 11, 25))

    assert cached.date == "2024-06-01"
    assert cache_status(cached, utc(2024, 6, 1, 11, 30)) is CacheStatus.FRESH
    assert cache_status(cached, utc(2024, 6, 1, 20, 59)) is CacheStatus.FRESH
    # 00:01 local time on the next day
    assert cache_status(cached, utc(2024, 6, 1, 21, 1)) is CacheStatus.STALE


def test_fetch_before_publication_expires_at_cutoff() -> None:
    # 09:00 local time
    cached = _cached(utc(2024, 6, 1, 6))

    assert cache_status(cached, utc(2024, 6, 1, 11, 19)) is CacheStatus.FRESH
    assert cache_status(cached, utc(2024, 6, 1, 11, 20)) is CacheStatus.STALE


def test_unknown_fetch_time_is_stale() -> None:
    cached = CachedSeries(data=SERIES, date="2024-06-01", fetched_at=None)

    assert cache_status(cached, utc(2024, 6, 1, 6)) is CacheStatus.STALE


def test_date_mismatch_is_stale() -> None:
    cached = CachedSeries(
        data=SERIES, date="2024-05-31", fetched_at=utc(2024, 6, 1, 11, 25)
    )

    assert cache_status(cached, utc(2024, 6, 1, 11, 30)) is CacheStatus.STALE


def test_custom_cutoff_and_timezone() -> None:
    cached = _cached(utc(2024, 6, 1, 12, 30))

    assert (
        cache_status(cached, utc(2024, 6, 1, 14), "UTC", time(13))
        is CacheStatus.STALE
    )
    assert (
        cache_status(cached, utc(2024, 6, 1, 14), "UTC", time(12))
        is CacheStatus.FRESH
    )


def test_write_then_read() -> None:
    store = MemoryCacheStore()
    cached = _cached(utc(2024, 6, 1, 11, 25))

    write_cached(store, cache_key("FI"), cached)

    assert store.data["nordpool_price_data:FI"]["version"] == CACHE_VERSION
    assert read_cached(store, cache_key("FI")) == cached


def test_missing_entry() -> None:
    assert read_cached(MemoryCacheStore(), cache_key("FI")) is None


@pytest.mark.parametrize(
    "raw",
    [
        {"data": [], "date": "2024-06-01", "fetched_at": None, "version": 3},
        {"data": [], "date": "2024-06-01", "fetched_at": None, "version": "4"},
        {"data": [], "date": "2024-06-01", "fetched_at": None},
        ["not", "an", "entry"],
    ],
)
def test_outdated_entry_is_removed(raw) -> None:
    store = MemoryCacheStore({cache_key("FI"): raw})

    assert read_cached(store, cache_key("FI")) is None
    assert cache_key("FI") not in store.data


@pytest.mark.parametrize(
    "raw",
    [
        {"date": "2024-06-01", "version": CACHE_VERSION},
        {"data": [{"price": 1.0}], "date": "2024-06-01", "version": CACHE_VERSION},
        {
            "data": [{"timestamp": "soon", "price": 1.0}],
            "date": "2024-06-01",
            "version": CACHE_VERSION,
        },
    ],
)
def test_unreadable_entry_is_removed(raw) -> None:
    store = MemoryCacheStore({cache_key("FI"): raw})

    assert read_cached(store, cache_key("FI")) is None
    assert store.data == {}


def test_clear_cached_removes_only_price_entries() -> None:
    store = MemoryCacheStore(
        {
            CACHE_PREFIX: {},
            cache_key("FI"): {},
            cache_key("SE3"): {},
            "nordpool_price_data_backup": {},
            "settings": {},
        }
    )

    removed = clear_cached(store)

    assert sorted(removed) == sorted(
        [CACHE_PREFIX, cache_key("FI"), cache_key("SE3")]
    )
    assert set(store.data) == {"nordpool_price_data_backup", "settings"}
