from __future__ import annotations

from typing import Protocol


class StorageReadError(RuntimeError):
    """Raised when stored data exists but cannot be read back."""


class LocalStorage(Protocol):
    """String key-value store that survives between sessions."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value or ``None`` when the key is missing.

        Raises ``StorageReadError`` when the backing data is unreadable.
        """

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing anything already there."""

    def remove_item(self, key: str) -> None:
        """Drop ``key`` if present."""
