"""Shared test doubles."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import aiofiles
import orjson

from custom_components.nordpool_ev.domain.prices import PricePoint

FIXTURES = Path(__file__).parent / "fixtures"


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


def make_series(
    start: datetime, prices: Sequence[float], step: timedelta = timedelta(hours=1)
) -> list[PricePoint]:
    return [PricePoint(start + step * index, price) for index, price in enumerate(prices)]


async def load_fixture(name: str) -> Any:
    async with aiofiles.open(FIXTURES / "raw" / name, encoding="utf-8") as file:
        return orjson.loads(await file.read())


class MemoryCacheStore:
    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})

    def get(self, key: str) -> Any | None:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self.data)


class FakeResponse:
    def __init__(
        self, status: int = 200, payload: Any = None, text: str | bytes = ""
    ) -> None:
        self.status = status
        self._payload = payload
        self._text = text

    async def json(self, content_type: str | None = "application/json") -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self, encoding: str | None = None, errors: str = "strict") -> str:
        if isinstance(self._text, bytes):
            return self._text.decode(encoding or "utf-8", errors)
        return self._text


class FakeSession:
    """Answers GET requests from a url -> response (or exception) mapping."""

    def __init__(self, responses: dict[str, FakeResponse | Exception]) -> None:
        self.responses = responses
        self.requests: list[tuple[str, dict[str, str] | None]] = []

    @asynccontextmanager
    async def get(self, url: str, headers: dict[str, str] | None = None, **kwargs):
        self.requests.append((url, headers))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        yield response

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.requests]
