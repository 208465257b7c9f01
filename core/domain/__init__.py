"""Domain models."""

from core.domain.coin import Coin, PortfolioItem, Quote

__all__ = ["Coin", "PortfolioItem", "Quote"]
