"""Port interfaces for adapters."""

from core.ports.coin_catalog import CoinCatalogError, CoinCatalogPort
from core.ports.local_storage import LocalStorage, StorageReadError
from core.ports.persistence import LoadedList, PortfolioPersistence

__all__ = [
    "CoinCatalogError",
    "CoinCatalogPort",
    "LoadedList",
    "LocalStorage",
    "PortfolioPersistence",
    "StorageReadError",
]
