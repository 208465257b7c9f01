"""Session state for the portfolio tracker.

``PortfolioStore`` owns everything the UI shows: the coin catalog, the add
form inputs, the holdings list, loading flags and the current error message.
Views read its properties and call its methods; they hold no state of their
own. Every change is announced to listeners registered with ``subscribe``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable, Sequence
from decimal import Decimal, InvalidOperation, Overflow, localcontext

from core.domain.coin import Coin, PortfolioItem
from core.ports.coin_catalog import CoinCatalogError, CoinCatalogPort
from core.ports.persistence import PortfolioPersistence
from core.settings import DEFAULT_DARK_MODE_KEY, DEFAULT_PORTFOLIO_KEY

logger = logging.getLogger(__name__)

CATALOG_LIMIT = 100
SUGGESTION_LIMIT = 10

FETCH_COINS_ERROR = "Failed to fetch coins"
UPDATE_PRICES_ERROR = "Failed to update prices"
LOAD_PORTFOLIO_ERROR = "Failed to load saved portfolio"

_ZERO = Decimal("0")
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

Listener = Callable[["PortfolioStore"], None]


def parse_amount(text: str | None) -> Decimal:
    """Read the leading number of ``text`` the way a browser number field does.

    Anything that does not yield a finite, non-negative number becomes zero.
    """
    if not text:
        return _ZERO
    match = _LEADING_NUMBER.match(text)
    if not match:
        return _ZERO
    try:
        value = Decimal(match.group(0).strip())
    except InvalidOperation:
        return _ZERO
    if not value.is_finite() or value < 0:
        return _ZERO
    return value


def filter_coins(coins: Sequence[Coin], text: str, *, limit: int = SUGGESTION_LIMIT) -> list[Coin]:
    if not text:
        return list(coins[:limit])
    return [coin for coin in coins if coin.matches(text)][:limit]


class PortfolioStore:
    def __init__(
        self,
        catalog: CoinCatalogPort,
        persistence: PortfolioPersistence,
        *,
        portfolio_key: str = DEFAULT_PORTFOLIO_KEY,
        dark_mode_key: str = DEFAULT_DARK_MODE_KEY,
        catalog_limit: int = CATALOG_LIMIT,
        suggestion_limit: int = SUGGESTION_LIMIT,
    ) -> None:
        self._catalog = catalog
        self._persistence = persistence
        self._portfolio_key = portfolio_key
        self._dark_mode_key = dark_mode_key
        self._catalog_limit = catalog_limit
        self._suggestion_limit = suggestion_limit
        self._listeners: list[Listener] = []

        self._coin_name = ""
        self._coin_amount = _ZERO
        self._search_query = ""
        self._coins: list[Coin] = []
        self._portfolio: list[PortfolioItem] = []
        self._selected_coin: Coin | None = None
        self.loading = False
        self.adding_to_portfolio = False
        self.error: str | None = None
        self.dark_mode = False

        self._rehydrate()

    @classmethod
    async def create(cls, catalog: CoinCatalogPort, persistence: PortfolioPersistence, **kwargs) -> PortfolioStore:
        store = cls(catalog, persistence, **kwargs)
        await store.initialize()
        return store

    def _rehydrate(self) -> None:
        loaded = self._persistence.load_list(self._portfolio_key)
        self._portfolio = list(loaded.items)
        if loaded.error is not None:
            logger.warning("Starting with an empty portfolio: %s", loaded.error)
            self.error = LOAD_PORTFOLIO_ERROR
        self.dark_mode = self._persistence.load_flag(self._dark_mode_key)
        logger.info("Rehydrated %d portfolio items (dark_mode=%s)", len(self._portfolio), self.dark_mode)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Store listener failed")

    def _save_portfolio(self) -> None:
        self._persistence.save_list(self._portfolio_key, self._portfolio)

    @property
    def coin_name(self) -> str:
        return self._coin_name

    @property
    def coin_amount(self) -> Decimal:
        return self._coin_amount

    @property
    def search_query(self) -> str:
        return self._search_query

    @property
    def coins(self) -> list[Coin]:
        return list(self._coins)

    @property
    def portfolio(self) -> list[PortfolioItem]:
        return list(self._portfolio)

    @property
    def selected_coin(self) -> Coin | None:
        return self._selected_coin

    @property
    def filtered_coins(self) -> list[Coin]:
        """Suggestions for the coin name input."""
        return filter_coins(self._coins, self._coin_name, limit=self._suggestion_limit)

    @property
    def searched_coins(self) -> list[Coin]:
        """Rows for the catalog browser table."""
        return filter_coins(self._coins, self._search_query, limit=self._suggestion_limit)

    @property
    def total_portfolio_value(self) -> Decimal:
        with localcontext() as ctx:
            ctx.traps[Overflow] = False
            return sum((item.value for item in self._portfolio), _ZERO)

    @property
    def can_add(self) -> bool:
        return self._selected_coin is not None and self._coin_amount > 0

    def set_coin_name(self, text: str) -> None:
        # Editing the text leaves the current selection alone.
        self._coin_name = text or ""
        self._notify()

    def set_coin_amount(self, text: str) -> None:
        self._coin_amount = parse_amount(text)
        self._notify()

    def set_search_query(self, text: str) -> None:
        self._search_query = text or ""
        self._notify()

    def set_selected_coin(self, coin: Coin | None) -> None:
        self._selected_coin = coin
        if coin is not None:
            self._coin_name = coin.name
        self._notify()

    def get_coin_by_name(self, name: str) -> Coin | None:
        return next((coin for coin in self._coins if coin.name == name), None)

    def get_coin_by_id(self, coin_id: str) -> Coin | None:
        return next((coin for coin in self._coins if coin.id == coin_id), None)

    async def initialize(self) -> None:
        await self.fetch_coins()

    async def fetch_coins(self) -> None:
        self.loading = True
        if self.error == FETCH_COINS_ERROR:
            self.error = None
        self._notify()
        try:
            coins = await self._catalog.list_coins()
        except CoinCatalogError:
            logger.exception("Failed to fetch coin catalog")
            self.error = FETCH_COINS_ERROR
        else:
            self._coins = list(coins[: self._catalog_limit])
            logger.info("Catalog holds %d coins", len(self._coins))
        finally:
            self.loading = False
            self._notify()

    async def fetch_coin_price(self, coin_id: str) -> Decimal:
        """Current USD price of ``coin_id``; zero when the quote cannot be fetched."""
        try:
            quote = await self._catalog.get_quote(coin_id)
        # Only pricing failures degrade to zero; other errors propagate.
        except CoinCatalogError:
            logger.exception("Failed to fetch price for %s", coin_id)
            return _ZERO
        return quote.price

    async def add_to_portfolio(self) -> PortfolioItem | None:
        coin = self._selected_coin
        amount = self._coin_amount
        if coin is None or amount <= 0:
            return None

        self.adding_to_portfolio = True
        self._notify()
        try:
            price = await self.fetch_coin_price(coin.id)
            item = PortfolioItem.create(coin, amount, price)
            self._portfolio = [*self._portfolio, item]
            self._coin_name = ""
            self._coin_amount = _ZERO
            self._selected_coin = None
            self._save_portfolio()
            logger.info("Added %s %s at %s", item.amount, item.coin_id, item.price)
            return item
        finally:
            self.adding_to_portfolio = False
            self._notify()

    def remove_from_portfolio(self, item_id: str) -> None:
        remaining = [item for item in self._portfolio if item.id != item_id]
        if len(remaining) == len(self._portfolio):
            logger.debug("No portfolio item %s to remove", item_id)
        self._portfolio = remaining
        self._save_portfolio()
        self._notify()

    async def update_item_price(self, item_id: str) -> None:
        item = self._find_item(item_id)
        if item is None:
            return
        price = await self.fetch_coin_price(item.coin_id)
        self._apply_prices({item_id: price})
        self._save_portfolio()
        self._notify()

    async def update_all_prices(self) -> None:
        self.loading = True
        self._notify()
        items = list(self._portfolio)

        async def _price_for(entry: PortfolioItem) -> tuple[str, Decimal]:
            return entry.id, await self.fetch_coin_price(entry.coin_id)

        try:
            results = await asyncio.gather(*(_price_for(item) for item in items))
        except Exception:
            logger.exception("Bulk price refresh failed")
            self.error = UPDATE_PRICES_ERROR
        else:
            self._apply_prices(dict(results))
            self._save_portfolio()
            logger.info("Refreshed prices for %d items", len(results))
        finally:
            self.loading = False
            self._notify()

    def _find_item(self, item_id: str) -> PortfolioItem | None:
        return next((item for item in self._portfolio if item.id == item_id), None)

    def _apply_prices(self, prices: dict[str, Decimal]) -> None:
        # One list swap so readers never see a half-updated portfolio.
        self._portfolio = [
            item.with_price(prices[item.id]) if item.id in prices else item for item in self._portfolio
        ]

    def clear_portfolio(self) -> None:
        self._portfolio = []
        self._save_portfolio()
        self._notify()

    def toggle_dark_mode(self) -> None:
        self.dark_mode = not self.dark_mode
        self._persistence.save_flag(self._dark_mode_key, self.dark_mode)
        self._notify()

    def clear_error(self) -> None:
        self.error = None
        self._notify()


__all__ = [
    "CATALOG_LIMIT",
    "FETCH_COINS_ERROR",
    "LOAD_PORTFOLIO_ERROR",
    "PortfolioStore",
    "SUGGESTION_LIMIT",
    "UPDATE_PRICES_ERROR",
    "filter_coins",
    "parse_amount",
]
