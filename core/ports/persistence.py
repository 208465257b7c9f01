from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from core.domain.coin import PortfolioItem


@dataclass(frozen=True)
class LoadedList:
    items: list[PortfolioItem] = field(default_factory=list)
    error: str | None = None


class PortfolioPersistence(Protocol):
    """Typed access to the persisted portfolio and preference flags."""

    def load_list(self, key: str) -> LoadedList:
        """Load a portfolio list; malformed data yields an empty list plus ``error``."""

    def save_list(self, key: str, items: Sequence[PortfolioItem]) -> None:
        """Overwrite the list stored under ``key``."""

    def load_flag(self, key: str) -> bool:
        """Load a boolean flag, ``False`` when missing or malformed."""

    def save_flag(self, key: str, value: bool) -> None:
        """Overwrite the flag stored under ``key``."""
