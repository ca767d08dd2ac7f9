"""
Pending order store — resumable QR payment sessions.

A page reload must resume the QR session it already created instead of
creating a duplicate order, so the in-flight order snapshot is kept in a
KeyValueStore under its subject key until the session ends.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error
from pydantic import ValidationError

from pianopay._clock import Clock, SystemClock
from pianopay.orders import Order, OrderKind
from pianopay.orders._wire import OrderOut
from pianopay.persistence._store import KeyValueStore, StoreError

logger = logging.getLogger(__name__)

KEY_PREFIX = "pending-order"


def subject_key(kind: OrderKind, subject_id: str) -> str:
    """Storage key for a subject, e.g. `pending-order:rent:42`."""
    return f"{KEY_PREFIX}:{kind.value}:{subject_id}"


class PendingOrderStore:
    """
    Persisted in-flight QR orders, one per subject key.

    Invariant: at most one entry per subject key; saving again overwrites.

    Example:
        bridge = PendingOrderStore(MemoryKeyValueStore())
        await bridge.save(key, order)
        match await bridge.load(key):
            case Ok(order) if order is not None:
                ...  # resume
    """

    def __init__(self, store: KeyValueStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    async def save(self, key: str, order: Order) -> Result[None, StoreError]:
        """Store the order snapshot under key, replacing any prior entry."""
        payload = OrderOut.from_domain(order).model_dump_json()
        result = await self._store.set(key, payload)
        match result:
            case Ok(_):
                logger.debug("saved pending order %s under %s", order.id, key)
            case Error(e):
                logger.warning("could not save pending order %s: %s", order.id, e.message)
        return result

    async def load(self, key: str) -> Result[Order | None, StoreError]:
        """
        Load the order stored under key.

        Returns Ok(None) when nothing is stored or the payment window has
        closed; stale and unreadable entries are cleared.
        """
        raw = await self._store.get(key)
        match raw:
            case Error(e):
                return Error(e)
            case Ok(None):
                return Ok(None)
            case Ok(payload):
                pass

        try:
            order = OrderOut.model_validate_json(payload).to_domain()
        except ValidationError:
            logger.warning("dropping unreadable pending order under %s", key)
            await self._store.delete(key)
            return Ok(None)

        expires_at = order.payment_expired_at
        if expires_at is None or self._clock.now() >= expires_at:
            logger.debug("dropping expired pending order %s", order.id)
            await self._store.delete(key)
            return Ok(None)

        return Ok(order)

    async def clear(self, key: str) -> Result[bool, StoreError]:
        """Remove the entry. Ok(True) if one existed."""
        result = await self._store.delete(key)
        match result:
            case Ok(existed):
                logger.debug("cleared %s (existed: %s)", key, existed)
            case Error(e):
                logger.warning("could not clear pending order under %s: %s", key, e.message)
        return result


__all__ = ("KEY_PREFIX", "subject_key", "PendingOrderStore")
