from __future__ import annotations

from typing import Protocol

from core.domain.coin import Coin, Quote


class CoinCatalogError(RuntimeError):
    """Raised when the pricing service cannot be reached or returns garbage."""


class CoinCatalogPort(Protocol):
    """Read-only access to the coin catalog and quotes."""

    async def list_coins(self) -> list[Coin]:
        """Return every coin the pricing service knows about."""

    async def get_quote(self, coin_id: str) -> Quote:
        """Return the current USD quote for one coin."""
