from __future__ import annotations

import logging
from pathlib import Path

import pytest
from kungfu import Result, Ok, Error

from pianopay._clock import ManualClock
from pianopay.orders import Order, OrderKind, PaymentMethod, CreateOrderInput, MemoryOrderApi
from pianopay.persistence import (
    KEY_PREFIX,
    MemoryKeyValueStore,
    PendingOrderStore,
    SQLAlchemyKeyValueStore,
    StoreError,
    create_database,
    subject_key,
)

from _helpers import ok, RENT_START, RENT_END

KEY = subject_key(OrderKind.RENT, "42")


@pytest.fixture
async def order(api: MemoryOrderApi) -> Order:
    return ok(await api.create_order(
        CreateOrderInput("42", OrderKind.RENT, PaymentMethod.QR, RENT_START, RENT_END)
    ))


def test_subject_key() -> None:
    assert subject_key(OrderKind.RENT, "42") == f"{KEY_PREFIX}:rent:42"
    assert subject_key(OrderKind.COURSE, "42") != subject_key(OrderKind.RENT, "42")


# ═══════════════════════════════════════════════════════════════════════════════
# PendingOrderStore
# ═══════════════════════════════════════════════════════════════════════════════


async def test_saved_order_loads_back(store: PendingOrderStore, order: Order) -> None:
    ok(await store.save(KEY, order))

    assert ok(await store.load(KEY)) == order


async def test_load_missing(store: PendingOrderStore) -> None:
    assert ok(await store.load(KEY)) is None


async def test_expired_entry_is_dropped(
    store: PendingOrderStore,
    kv: MemoryKeyValueStore,
    clock: ManualClock,
    order: Order,
) -> None:
    ok(await store.save(KEY, order))
    clock.advance(3600)

    assert ok(await store.load(KEY)) is None
    assert kv.keys() == []


async def test_unreadable_entry_is_dropped(store: PendingOrderStore, kv: MemoryKeyValueStore) -> None:
    ok(await kv.set(KEY, "{not json"))

    assert ok(await store.load(KEY)) is None
    assert kv.keys() == []


async def test_save_overwrites(store: PendingOrderStore, kv: MemoryKeyValueStore, api: MemoryOrderApi) -> None:
    data = CreateOrderInput("42", OrderKind.RENT, PaymentMethod.QR, RENT_START, RENT_END)
    first = ok(await api.create_order(data))
    second = ok(await api.create_order(data))

    ok(await store.save(KEY, first))
    ok(await store.save(KEY, second))

    assert ok(await store.load(KEY)).id == second.id
    assert kv.keys() == [KEY]


async def test_clear(store: PendingOrderStore, order: Order) -> None:
    ok(await store.save(KEY, order))

    assert ok(await store.clear(KEY)) is True
    assert ok(await store.clear(KEY)) is False


async def test_failed_clear_is_logged(clock: ManualClock, caplog: pytest.LogCaptureFixture) -> None:
    class ReadOnly(MemoryKeyValueStore):
        async def delete(self, key: str) -> Result[bool, StoreError]:
            return Error(StoreError("read-only storage"))

    store = PendingOrderStore(ReadOnly(), clock)

    with caplog.at_level(logging.WARNING, logger="pianopay.persistence"):
        result = await store.clear(KEY)

    assert isinstance(result, Error)
    assert "read-only storage" in caplog.text


# ═══════════════════════════════════════════════════════════════════════════════
# SQLAlchemy
# ═══════════════════════════════════════════════════════════════════════════════


async def test_sqlalchemy_store(tmp_path: Path) -> None:
    session_factory, engine = await create_database(f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}")
    kv = SQLAlchemyKeyValueStore(session_factory)

    try:
        assert ok(await kv.get("a")) is None
        ok(await kv.set("a", "1"))
        ok(await kv.set("a", "2"))
        ok(await kv.set("b", "3"))

        assert ok(await kv.get("a")) == "2"
        assert sorted(ok(await kv.keys())) == ["a", "b"]
        assert ok(await kv.delete("a")) is True
        assert ok(await kv.delete("a")) is False
    finally:
        await engine.dispose()


async def test_pending_order_survives_reload(tmp_path: Path, clock: ManualClock, order: Order) -> None:
    url = f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}"

    session_factory, engine = await create_database(url)
    ok(await PendingOrderStore(SQLAlchemyKeyValueStore(session_factory), clock).save(KEY, order))
    await engine.dispose()

    session_factory, engine = await create_database(url)
    try:
        reloaded = PendingOrderStore(SQLAlchemyKeyValueStore(session_factory), clock)
        assert ok(await reloaded.load(KEY)) == order
    finally:
        await engine.dispose()


async def test_sqlalchemy_errors_are_values(tmp_path: Path) -> None:
    session_factory, engine = await create_database(f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}")
    kv = SQLAlchemyKeyValueStore(session_factory)
    async with engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE pianopay_kv")

    try:
        match await kv.get("a"):
            case Error(e):
                assert e.message.startswith("Failed to get")
                assert e.cause is not None
            case Ok(value):
                pytest.fail(f"expected Error, got Ok({value!r})")
    finally:
        await engine.dispose()
