"""
In-memory storage.
"""

from __future__ import annotations

import asyncio

from kungfu import Result, Ok

from orderkit.storage._types import StorageError


class MemoryStorage:
    """
    In-memory key-value storage.

    Note: Single process only, nothing survives a restart.
    Use it in tests, or seed it to simulate a previous session.

    Example:
        storage = MemoryStorage({"customerToken": token})
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get_item(self, key: str) -> Result[str | None, StorageError]:
        async with self._lock:
            return Ok(self._items.get(key))

    async def set_item(self, key: str, value: str) -> Result[None, StorageError]:
        async with self._lock:
            self._items[key] = value
            return Ok(None)

    async def remove_item(self, key: str) -> Result[bool, StorageError]:
        async with self._lock:
            if key in self._items:
                del self._items[key]
                return Ok(True)
            return Ok(False)

    async def clear(self) -> Result[None, StorageError]:
        async with self._lock:
            self._items.clear()
            return Ok(None)

    def keys(self) -> list[str]:
        """Stored keys, for inspection in tests."""
        return list(self._items)


__all__ = ("MemoryStorage",)
