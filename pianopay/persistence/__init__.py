"""
Persistence — resumable QR payment sessions.

    from pianopay import persistence as K

    bridge = K.PendingOrderStore(K.MemoryKeyValueStore())
    await bridge.save(K.subject_key(OrderKind.RENT, "42"), order)
"""

from __future__ import annotations

from pianopay.persistence._store import (
    StoreError,
    KeyValueStore,
    MemoryKeyValueStore,
)
from pianopay.persistence._bridge import (
    KEY_PREFIX,
    subject_key,
    PendingOrderStore,
)
from pianopay.persistence._sqlalchemy import (
    KeyValueTable,
    SQLAlchemyKeyValueStore,
    create_database,
)

__all__ = (
    "StoreError",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "KEY_PREFIX",
    "subject_key",
    "PendingOrderStore",
    "KeyValueTable",
    "SQLAlchemyKeyValueStore",
    "create_database",
)
