"""HTTP API serving canonical price series."""

from __future__ import annotations

from collections.abc import Sequence
from http import HTTPStatus
import logging
from typing import Any, Final

from aiohttp import web
import orjson

from homeassistant.components.http import HomeAssistantView

from .const import DOMAIN
from .domain.prices import MalformedFeed, PricePoint, series_as_json
from .domain.zones import get_zone
from .infrastructure.nordpool_api import NetworkFailure, NordpoolApi

_LOGGER = logging.getLogger(__name__)

NO_STORE_HEADERS: Final[dict[str, str]] = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0",
    "CDN-Cache-Control": "no-store",
}
ERROR_MESSAGE: Final[str] = "Failed to fetch electricity prices"


def _dumps(data: Any) -> str:
    return orjson.dumps(data).decode("utf-8")


def prices_response(series: Sequence[PricePoint]) -> web.Response:
    return web.json_response(
        series_as_json(series), headers=NO_STORE_HEADERS, dumps=_dumps
    )


def error_response() -> web.Response:
    return web.json_response(
        {"error": ERROR_MESSAGE},
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        headers={"Cache-Control": NO_STORE_HEADERS["Cache-Control"]},
        dumps=_dumps,
    )


class NordpoolPricesView(HomeAssistantView):
    """Serve `GET /api/nordpool_ev/prices?area=<zone>`."""

    url = f"/api/{DOMAIN}/prices"
    name = f"api:{DOMAIN}:prices"

    def __init__(self, api: NordpoolApi) -> None:
        """Initialize."""
        self._api = api

    async def get(self, request: web.Request) -> web.Response:
        zone = get_zone(request.query.get("area"))
        try:
            series = await self._api.async_get_prices(zone)
        except (NetworkFailure, MalformedFeed):
            _LOGGER.exception("Error fetching prices of %s", zone.code)
            return error_response()
        return prices_response(series)
