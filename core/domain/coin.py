from __future__ import annotations

from datetime import datetime
from decimal import Decimal, Overflow, localcontext
from typing import Any
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _to_mapping(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if hasattr(value, "model_dump"):
        return value.model_dump()
    if isinstance(value, dict):
        return value
    if hasattr(value, "__dict__"):
        return dict(value.__dict__)
    return {}


class Coin(BaseModel):
    """Catalog entry as returned by the pricing service."""

    id: str
    name: str
    symbol: str
    rank: int = 0
    is_new: bool = False
    is_active: bool = True
    type: str | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    def matches(self, text: str) -> bool:
        needle = text.lower()
        return needle in self.name.lower() or needle in self.symbol.lower()


class Quote(BaseModel):
    """Point-in-time USD quote for one coin."""

    id: str
    name: str | None = None
    symbol: str | None = None
    rank: int | None = None
    price: Decimal
    percent_change_24h: Decimal | None = None
    market_cap: Decimal | None = None
    last_updated: datetime | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_ticker(cls, payload: Any) -> Quote:
        """Flatten a ticker payload, reading the price from ``quotes.USD``."""
        raw = _to_mapping(payload)
        quotes = raw.get("quotes")
        usd = quotes.get("USD") if isinstance(quotes, dict) else None
        if not isinstance(usd, dict):
            raise ValueError("ticker payload has no quotes.USD block")
        return cls.model_validate(
            {
                "id": raw.get("id"),
                "name": raw.get("name"),
                "symbol": raw.get("symbol"),
                "rank": raw.get("rank"),
                "price": usd.get("price"),
                "percent_change_24h": usd.get("percent_change_24h"),
                "market_cap": usd.get("market_cap"),
                "last_updated": raw.get("last_updated"),
            }
        )


def new_item_id() -> str:
    return uuid4().hex


class PortfolioItem(BaseModel):
    """One holding recorded by the user."""

    id: str = Field(default_factory=new_item_id)
    coin_id: str = Field(validation_alias=AliasChoices("coinId", "coin_id"), serialization_alias="coinId")
    coin_name: str = Field(validation_alias=AliasChoices("coinName", "coin_name"), serialization_alias="coinName")
    amount: Decimal
    price: Decimal | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def _ensure_id_str(cls, value: Any) -> str:
        if value is None or value == "":
            raise ValueError("id is required")
        return str(value)

    @property
    def value(self) -> Decimal:
        # Unpriced holdings count as zero; overflow saturates to Infinity.
        with localcontext() as ctx:
            ctx.traps[Overflow] = False
            return self.amount * (self.price or Decimal("0"))

    @classmethod
    def create(cls, coin: Coin, amount: Decimal, price: Decimal | None) -> PortfolioItem:
        if amount <= 0:
            raise ValueError("amount must be positive")
        return cls(coin_id=coin.id, coin_name=coin.name, amount=amount, price=price)

    def with_price(self, price: Decimal) -> PortfolioItem:
        return self.model_copy(update={"price": price})

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = ["Coin", "PortfolioItem", "Quote", "new_item_id"]
