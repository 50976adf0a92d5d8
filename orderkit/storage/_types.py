"""
Storage — key-value persistence protocol.

All methods are async and return Result for explicit error handling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from kungfu import Result

# ═══════════════════════════════════════════════════════════════════════════════
# Keys
# ═══════════════════════════════════════════════════════════════════════════════

CURRENT_ORDER_KEY = "currentOrder"
CUSTOMER_TOKEN_KEY = "customerToken"


# ═══════════════════════════════════════════════════════════════════════════════
# Storage Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StorageError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Storage Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Storage(Protocol):
    """
    Asynchronous key-value storage.

    Implement this for custom backends (browser-like local storage, files,
    Redis, etc.). No transactional guarantees are assumed.

    Example:
        class RedisStorage:
            def __init__(self, client: Redis) -> None:
                self.client = client

            async def get_item(self, key: str) -> Result[str | None, StorageError]:
                try:
                    value = await self.client.get(key)
                    return Ok(value.decode() if value else None)
                except Exception as e:
                    return Error(StorageError("Failed to get", e))

            # ... other methods
    """

    async def get_item(self, key: str) -> Result[str | None, StorageError]:
        """Get value. Returns Ok(None) if absent."""
        ...

    async def set_item(self, key: str, value: str) -> Result[None, StorageError]:
        """Set value, replacing any previous one."""
        ...

    async def remove_item(self, key: str) -> Result[bool, StorageError]:
        """Remove key. Returns Ok(True) if it existed."""
        ...

    async def clear(self) -> Result[None, StorageError]:
        """Remove every key."""
        ...


__all__ = (
    "CURRENT_ORDER_KEY",
    "CUSTOMER_TOKEN_KEY",
    "StorageError",
    "Storage",
)
