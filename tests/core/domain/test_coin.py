from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from core.domain.coin import Coin, PortfolioItem, Quote


def _ticker_payload(price: float | None = 50000.5) -> dict:
    return {
        "id": "btc-bitcoin",
        "name": "Bitcoin",
        "symbol": "BTC",
        "rank": 1,
        "circulating_supply": 19000000,
        "last_updated": "2024-05-01T12:00:00Z",
        "quotes": {
            "USD": {
                "price": price,
                "volume_24h": 1234.5,
                "market_cap": 950000000000,
                "percent_change_24h": -1.25,
            }
        },
    }


def test_coin_ignores_unknown_fields() -> None:
    coin = Coin.model_validate(
        {
            "id": "eth-ethereum",
            "name": "Ethereum",
            "symbol": "ETH",
            "rank": 2,
            "is_new": False,
            "is_active": True,
            "type": "coin",
            "contract": "ignored",
        }
    )

    assert coin.id == "eth-ethereum"
    assert coin.type == "coin"
    assert coin.matches("ETH")
    assert coin.matches("ther")
    assert not coin.matches("btc")


def test_quote_from_ticker_reads_usd_block() -> None:
    quote = Quote.from_ticker(_ticker_payload())

    assert quote.id == "btc-bitcoin"
    assert quote.price == Decimal("50000.5")
    assert quote.percent_change_24h == Decimal("-1.25")
    assert quote.last_updated is not None


def test_quote_from_ticker_requires_usd_quote() -> None:
    payload = _ticker_payload()
    payload["quotes"] = {"EUR": {"price": 1}}

    with pytest.raises(ValueError):
        Quote.from_ticker(payload)


def test_quote_from_ticker_requires_price() -> None:
    with pytest.raises(ValidationError):
        Quote.from_ticker(_ticker_payload(price=None))


def test_portfolio_item_create_rejects_non_positive_amount() -> None:
    coin = Coin(id="btc-bitcoin", name="Bitcoin", symbol="BTC")

    with pytest.raises(ValueError):
        PortfolioItem.create(coin, Decimal("0"), Decimal("1"))

    item = PortfolioItem.create(coin, Decimal("1.5"), None)
    assert item.coin_name == "Bitcoin"
    assert item.value == Decimal("0")


def test_portfolio_item_accepts_browser_and_python_keys() -> None:
    camel = PortfolioItem.model_validate(
        {"id": "abc123xyz", "coinId": "btc-bitcoin", "coinName": "Bitcoin", "amount": 2, "price": 10}
    )
    snake = PortfolioItem.model_validate(
        {"id": "abc123xyz", "coin_id": "btc-bitcoin", "coin_name": "Bitcoin", "amount": "2"}
    )

    assert camel.coin_id == snake.coin_id == "btc-bitcoin"
    assert camel.value == Decimal("20")
    assert snake.price is None
    assert camel.to_storage() == {
        "id": "abc123xyz",
        "coinId": "btc-bitcoin",
        "coinName": "Bitcoin",
        "amount": "2",
        "price": "10",
    }


def test_with_price_keeps_identity_fields() -> None:
    item = PortfolioItem(coin_id="btc-bitcoin", coin_name="Bitcoin", amount=Decimal("3"))

    repriced = item.with_price(Decimal("4"))

    assert (repriced.id, repriced.amount, repriced.price) == (item.id, Decimal("3"), Decimal("4"))
    assert item.price is None
