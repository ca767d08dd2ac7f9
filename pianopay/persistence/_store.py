"""
Key-value store — durable client-side storage port.

KeyValueStore — string keys, string (JSON) values.
All methods return Result for explicit error handling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from kungfu import Result, Ok


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class KeyValueStore(Protocol):
    """
    Key-value store protocol, the browser's local storage equivalent.

    Example — Redis implementation:

        class RedisStore:
            def __init__(self, client: Redis):
                self.client = client

            async def get(self, key: str) -> Result[str | None, StoreError]:
                try:
                    return Ok(await self.client.get(key))
                except Exception as e:
                    return Error(StoreError("Failed to get", e))

            # ... other methods
    """

    async def get(self, key: str) -> Result[str | None, StoreError]:
        """Get value. Returns Ok(None) if not found."""
        ...

    async def set(self, key: str, value: str) -> Result[None, StoreError]:
        """Set value, replacing any previous one."""
        ...

    async def delete(self, key: str) -> Result[bool, StoreError]:
        """Delete key. Returns Ok(True) if existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryKeyValueStore:
    """
    In-memory key-value store.

    Note: Does not survive a restart; use SQLAlchemyKeyValueStore for that.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Result[str | None, StoreError]:
        return Ok(self._data.get(key))

    async def set(self, key: str, value: str) -> Result[None, StoreError]:
        self._data[key] = value
        return Ok(None)

    async def delete(self, key: str) -> Result[bool, StoreError]:
        return Ok(self._data.pop(key, None) is not None)

    def keys(self) -> list[str]:
        return list(self._data)


__all__ = (
    "StoreError",
    "KeyValueStore",
    "MemoryKeyValueStore",
)
