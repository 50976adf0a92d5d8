"""
SQLAlchemy integration — durable key-value storage.

Usage:
    storage, engine = await create_storage("sqlite+aiosqlite:///orderkit.db")
    adapter = Adapter(config, storage=storage)
    ...
    await engine.dispose()

Or bring your own session factory (the table must exist):

    storage = SQLAlchemyStorage(async_sessionmaker(engine, expire_on_commit=False))
"""

from __future__ import annotations

from sqlalchemy import String, Text, delete
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kungfu import Result, Ok, Error

from orderkit.storage._types import StorageError


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════

class Base(DeclarativeBase):
    pass


class StorageItem(Base):
    """One stored key/value pair."""

    __tablename__ = "orderkit_storage"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Storage
# ═══════════════════════════════════════════════════════════════════════════════

class SQLAlchemyStorage:
    """
    Key-value storage backed by a single SQLAlchemy table.

    Every backend exception is returned as StorageError, never raised.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_item(self, key: str) -> Result[str | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(StorageItem, key)
                return Ok(row.value if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to get {key}: {e}", e))

    async def set_item(self, key: str, value: str) -> Result[None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(StorageItem, key)
                if row is None:
                    session.add(StorageItem(key=key, value=value))
                else:
                    row.value = value
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StorageError(f"Failed to set {key}: {e}", e))

    async def remove_item(self, key: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(StorageItem, key)
                if row is None:
                    return Ok(False)
                await session.delete(row)
                await session.commit()
                return Ok(True)
        except Exception as e:
            return Error(StorageError(f"Failed to remove {key}: {e}", e))

    async def clear(self) -> Result[None, StorageError]:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(StorageItem))
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StorageError(f"Failed to clear: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Setup
# ═══════════════════════════════════════════════════════════════════════════════

async def create_storage(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[SQLAlchemyStorage, AsyncEngine]:
    """Create the table and return (storage, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return SQLAlchemyStorage(async_sessionmaker(engine, expire_on_commit=False)), engine


__all__ = (
    "StorageItem",
    "SQLAlchemyStorage",
    "create_storage",
)
