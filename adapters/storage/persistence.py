from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from pydantic import ValidationError

from core.domain.coin import PortfolioItem
from core.ports.local_storage import LocalStorage, StorageReadError
from core.ports.persistence import LoadedList, PortfolioPersistence

logger = logging.getLogger(__name__)


class LocalStoragePersistence(PortfolioPersistence):
    """JSON codec for portfolio lists and flags on top of a ``LocalStorage``."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def load_list(self, key: str) -> LoadedList:
        try:
            raw = self._storage.get_item(key)
            if raw is None:
                return LoadedList()
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
            items = [PortfolioItem.model_validate(entry) for entry in payload]
        except (StorageReadError, ValidationError, ValueError) as exc:
            logger.warning("Discarding malformed portfolio under %s: %s", key, exc)
            return LoadedList(error=str(exc))
        logger.debug("Loaded %d portfolio items from %s", len(items), key)
        return LoadedList(items=items)

    def save_list(self, key: str, items: Sequence[PortfolioItem]) -> None:
        payload = [item.to_storage() for item in items]
        self._storage.set_item(key, json.dumps(payload))
        logger.debug("Saved %d portfolio items to %s", len(payload), key)

    def load_flag(self, key: str) -> bool:
        try:
            raw = self._storage.get_item(key)
            if raw is None:
                return False
            value = json.loads(raw)
        except (StorageReadError, ValueError):
            return False
        return value if isinstance(value, bool) else False

    def save_flag(self, key: str, value: bool) -> None:
        self._storage.set_item(key, json.dumps(bool(value)))
