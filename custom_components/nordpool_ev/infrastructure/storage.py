"""Persistent cache store backed by Home Assistant storage."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Final

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from ..const import DOMAIN

STORAGE_VERSION: Final[int] = 1
STORAGE_KEY: Final[str] = f"{DOMAIN}.cache"
SAVE_DELAY_SECONDS: Final[int] = 5


class HassCacheStore:
    """Key-value cache kept in memory and flushed to .storage."""

    def __init__(self, hass: HomeAssistant, key: str = STORAGE_KEY) -> None:  # noqa: D107
        self._store: Store[dict[str, Any]] = Store(hass, STORAGE_VERSION, key)
        self._data: dict[str, Any] = {}

    async def async_load(self) -> None:
        self._data = await self._store.async_load() or {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._schedule_save()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._schedule_save()

    def keys(self) -> Iterable[str]:
        return list(self._data)

    def _schedule_save(self) -> None:
        self._store.async_delay_save(lambda: dict(self._data), SAVE_DELAY_SECONDS)
