"""API for fetching Nordic spot prices."""

from __future__ import annotations

from asyncio import timeout
from http import HTTPStatus
import logging
from typing import Any, Final
from urllib.parse import quote

from aiohttp import ClientError, ClientSession

from ..domain.prices import (
    DEFAULT_FX_RATE,
    FxRates,
    MalformedFeed,
    PricePoint,
    normalize,
)
from ..domain.zones import BiddingZoneInfo

_LOGGER = logging.getLogger(__name__)

HTTP_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Accept-Encoding": "gzip",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}
PRICES_ENDPOINT: Final[str] = "https://mainnet.srcful.dev/price/electricity/{}"
FX_ENDPOINT: Final[str] = "https://api.exchangerate.host/latest?base=EUR&symbols=SEK,NOK"
REQUEST_TIMEOUT_SECONDS: Final[int] = 10


class NetworkFailure(Exception):
    """Raised when a price API request ended in error."""

    def __init__(self, status: str) -> None:
        """Initialize."""
        super().__init__(status)
        self.status = status


class NordpoolApi:
    """Main class to fetch spot prices."""

    def __init__(  # noqa: D107
        self, session: ClientSession, fallback_fx_rate: float = DEFAULT_FX_RATE
    ) -> None:
        self._session = session
        self._fallback_fx_rate = fallback_fx_rate

    async def async_get_prices(self, zone: BiddingZoneInfo) -> list[PricePoint]:
        """Fetch and normalize the price series of a zone."""
        data = await self._async_get_prices_raw(zone)
        if zone.currency == "EUR":
            fx_rates = FxRates(fallback=False)
        else:
            fx_rates = await self.async_get_fx_rates()
        return normalize(data, zone, fx_rates)

    async def async_get_fx_rates(self) -> FxRates:
        """Fetch EUR rates, never failing."""
        try:
            data = await self._async_get_json(FX_ENDPOINT)
        except (NetworkFailure, ValueError) as error:
            _LOGGER.warning(
                "FX rates unavailable, using %s: %s", self._fallback_fx_rate, error
            )
            return FxRates(self._fallback_fx_rate, self._fallback_fx_rate)

        rates = FxRates.create_from_json(data, self._fallback_fx_rate)
        if rates.fallback:
            _LOGGER.warning("FX response incomplete, using fallback for missing rates")
        return rates

    async def _async_get_prices_raw(self, zone: BiddingZoneInfo) -> Any:
        return await self._async_get_json(PRICES_ENDPOINT.format(quote(zone.code)))

    async def _async_get_json(self, url: str) -> Any:
        try:
            async with (
                timeout(REQUEST_TIMEOUT_SECONDS),
                self._session.get(
                    url, headers=HTTP_HEADERS, allow_redirects=False
                ) as resp,
            ):
                if resp.status != HTTPStatus.OK.value:
                    text = await resp.text(errors="replace")
                    raise NetworkFailure(
                        f"Invalid response from {url}: {resp.status} {text}"
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as error:
                    raise MalformedFeed(f"Response from {url} is not JSON") from error
        except (ClientError, TimeoutError) as error:
            raise NetworkFailure(f"Request to {url} failed: {error!r}") from error
