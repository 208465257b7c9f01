from __future__ import annotations

import asyncio
from decimal import Decimal

import httpx
import pytest

from adapters.pricing.coinpaprika import CoinCatalogError, CoinPaprikaClient
from core.settings import Settings

BASE_URL = "https://api.test/v1"


def _client(handler) -> CoinPaprikaClient:  # noqa: ANN001
    transport = httpx.MockTransport(handler)
    return CoinPaprikaClient(BASE_URL, client=httpx.AsyncClient(transport=transport))


def test_list_coins_parses_records() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(
            200,
            json=[
                {"id": "btc-bitcoin", "name": "Bitcoin", "symbol": "BTC", "rank": 1, "is_new": False,
                 "is_active": True, "type": "coin"},
                {"id": "eth-ethereum", "name": "Ethereum", "symbol": "ETH", "rank": 2, "is_new": False,
                 "is_active": True, "type": "coin"},
            ],
        )

    coins = asyncio.run(_client(handler).list_coins())

    assert requested == [f"{BASE_URL}/coins"]
    assert [coin.id for coin in coins] == ["btc-bitcoin", "eth-ethereum"]


def test_get_quote_reads_usd_price() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/tickers/btc-bitcoin"
        return httpx.Response(
            200,
            json={"id": "btc-bitcoin", "name": "Bitcoin", "symbol": "BTC", "quotes": {"USD": {"price": 64000.25}}},
        )

    quote = asyncio.run(_client(handler).get_quote("btc-bitcoin"))

    assert quote.price == Decimal("64000.25")


@pytest.mark.parametrize("status_code", [404, 429, 500])
def test_http_errors_raise_catalog_error(status_code: int) -> None:
    client = _client(lambda request: httpx.Response(status_code, json={"error": "nope"}))

    with pytest.raises(CoinCatalogError):
        asyncio.run(client.get_quote("missing-coin"))


def test_transport_errors_raise_catalog_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CoinCatalogError):
        asyncio.run(_client(handler).list_coins())


def test_invalid_payloads_raise_catalog_error() -> None:
    not_json = _client(lambda request: httpx.Response(200, text="<html>"))
    not_list = _client(lambda request: httpx.Response(200, json={"coins": []}))
    no_usd = _client(lambda request: httpx.Response(200, json={"id": "x", "quotes": {}}))

    with pytest.raises(CoinCatalogError):
        asyncio.run(not_json.list_coins())
    with pytest.raises(CoinCatalogError):
        asyncio.run(not_list.list_coins())
    with pytest.raises(CoinCatalogError):
        asyncio.run(no_usd.get_quote("x"))


def test_from_settings_uses_configured_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COINPAPRIKA_BASE_URL", "https://mirror.test/v1/")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "3")

    client = CoinPaprikaClient.from_settings(Settings(_env_file=None))

    assert client._base_url == "https://mirror.test/v1"
    assert client._timeout_seconds == 3.0
