from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from core.domain.coin import Coin, Quote
from core.ports.coin_catalog import CoinCatalogError, CoinCatalogPort
from core.settings import DEFAULT_API_BASE_URL, Settings

logger = logging.getLogger(__name__)


class CoinPaprikaClient(CoinCatalogPort):
    """Async client for the public CoinPaprika REST API.

    Without an injected ``client`` every call opens its own short-lived
    ``httpx.AsyncClient``, so one instance can be driven from several event
    loops (Streamlit runs each action under a fresh ``asyncio.run``).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        *,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> CoinPaprikaClient:
        return cls(settings.api_base_url, timeout_seconds=settings.request_timeout_seconds)

    async def _send(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        response = await client.get(url)
        response.raise_for_status()
        return response

    async def _get_json(self, path: str) -> Any:
        url = f"{self._base_url}{path}"
        try:
            if self._client is not None:
                response = await self._send(self._client, url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                    response = await self._send(client, url)
            return response.json()
        except httpx.HTTPError as exc:
            logger.exception("CoinPaprika request failed: GET %s", url)
            raise CoinCatalogError(f"Failed to call CoinPaprika: {exc}") from exc
        except ValueError as exc:
            logger.exception("CoinPaprika returned invalid JSON: GET %s", url)
            raise CoinCatalogError(f"Invalid response from CoinPaprika: {exc}") from exc

    async def list_coins(self) -> list[Coin]:
        payload = await self._get_json("/coins")
        if not isinstance(payload, list):
            raise CoinCatalogError("Expected a list of coins from CoinPaprika")
        try:
            coins = [Coin.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise CoinCatalogError(f"Invalid coin record: {exc}") from exc
        logger.info("Fetched %d coins", len(coins))
        return coins

    async def get_quote(self, coin_id: str) -> Quote:
        payload = await self._get_json(f"/tickers/{coin_id}")
        try:
            return Quote.from_ticker(payload)
        except ValueError as exc:
            raise CoinCatalogError(f"Invalid ticker for {coin_id}: {exc}") from exc


__all__ = ["CoinCatalogError", "CoinPaprikaClient"]
