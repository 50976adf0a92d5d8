"""
Storage — where the current order and customer token survive restarts.

    from orderkit import storage

    mem = storage.MemoryStorage()
    durable, engine = await storage.create_storage("sqlite+aiosqlite:///orders.db")

Any object with async get_item / set_item / remove_item / clear returning
Result[..., StorageError] satisfies the Storage protocol.
"""

from orderkit.storage._types import (
    CURRENT_ORDER_KEY,
    CUSTOMER_TOKEN_KEY,
    Storage,
    StorageError,
)
from orderkit.storage._memory import MemoryStorage
from orderkit.storage._sqlalchemy import (
    SQLAlchemyStorage,
    StorageItem,
    create_storage,
)

__all__ = (
    "CURRENT_ORDER_KEY",
    "CUSTOMER_TOKEN_KEY",
    "Storage",
    "StorageError",
    "MemoryStorage",
    "SQLAlchemyStorage",
    "StorageItem",
    "create_storage",
)
