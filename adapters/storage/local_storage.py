"""File-backed key-value storage, the desktop stand-in for browser localStorage."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from core.ports.local_storage import LocalStorage, StorageReadError

logger = logging.getLogger(__name__)


class JsonFileLocalStorage(LocalStorage):
    """Keeps every key in a single JSON object on disk.

    The whole file is read on each access and rewritten on each change. A
    missing file behaves like an empty store. An unreadable file makes
    ``get_item`` raise ``StorageReadError``; the next write replaces it.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (ValueError, OSError) as exc:
            raise StorageReadError(f"unreadable storage file {self._path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise StorageReadError(f"storage file {self._path} does not hold a JSON object")
        return payload

    def _read_for_update(self) -> dict[str, Any]:
        try:
            return self._read()
        except StorageReadError as exc:
            logger.warning("Replacing storage file: %s", exc)
            return {}

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=2)

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageReadError(f"value under {key!r} is {type(value).__name__}, not a string")
        return value

    def set_item(self, key: str, value: str) -> None:
        data = self._read_for_update()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read_for_update()
        if data.pop(key, None) is not None:
            self._write(data)
