"""
SQLAlchemy integration — durable key-value store.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///pianopay.db")
    store = SQLAlchemyKeyValueStore(session_factory)
    bridge = K.PendingOrderStore(store)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kungfu import Result, Ok, Error

from pianopay.persistence._store import StoreError


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════

class Base(DeclarativeBase):
    pass


class KeyValueTable(Base):
    __tablename__ = "pianopay_kv"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════

class SQLAlchemyKeyValueStore:
    """
    Key-value store over any async SQLAlchemy engine.

    Note: Writes are last-writer-wins per key.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> Result[str | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(KeyValueTable, key)
                return Ok(row.value if row is not None else None)

        except Exception as e:
            return Error(StoreError(f"Failed to get: {e}", e))

    async def set(self, key: str, value: str) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                now = datetime.now(timezone.utc).replace(tzinfo=None)
                row = await session.get(KeyValueTable, key)
                if row is None:
                    session.add(KeyValueTable(key=key, value=value, updated_at=now))
                else:
                    row.value = value
                    row.updated_at = now
                await session.commit()
                return Ok(None)

        except Exception as e:
            return Error(StoreError(f"Failed to set: {e}", e))

    async def delete(self, key: str) -> Result[bool, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(KeyValueTable, key)
                if row is None:
                    return Ok(False)

                await session.delete(row)
                await session.commit()
                return Ok(True)

        except Exception as e:
            return Error(StoreError(f"Failed to delete: {e}", e))

    async def keys(self) -> Result[list[str], StoreError]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(KeyValueTable.key))
                return Ok(list(result.scalars()))

        except Exception as e:
            return Error(StoreError(f"Failed to list keys: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════

async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create tables and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = (
    "KeyValueTable",
    "SQLAlchemyKeyValueStore",
    "create_database",
)
