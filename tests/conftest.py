from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest

from pianopay._clock import ManualClock
from pianopay.orders import MemoryOrderApi, OrderApi, OrderKind
from pianopay.persistence import MemoryKeyValueStore, PendingOrderStore
from pianopay.session import PaymentSession, SessionPolicy, Subject

from _helpers import catalog_price, never, settle


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def api(clock: ManualClock) -> MemoryOrderApi:
    return MemoryOrderApi(clock=clock, pricer=catalog_price)


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv: MemoryKeyValueStore, clock: ManualClock) -> PendingOrderStore:
    return PendingOrderStore(kv, clock)


type SessionFactory = Callable[..., PaymentSession]


@pytest.fixture
async def make_session(
    api: MemoryOrderApi,
    store: PendingOrderStore,
    clock: ManualClock,
) -> AsyncIterator[SessionFactory]:
    """
    Build sessions whose tickers fire once and then wait; tests drive
    tick() / poll() by hand. Every session is closed on teardown.
    """
    created: list[PaymentSession] = []

    def factory(
        kind: OrderKind = OrderKind.RENT,
        subject_id: str = "42",
        *,
        policy: SessionPolicy | None = None,
        order_api: OrderApi | None = None,
    ) -> PaymentSession:
        session = PaymentSession(
            order_api or api,
            Subject(kind, subject_id, "Yamaha U1"),
            store=store,
            clock=clock,
            policy=policy,
            sleep=never,
        )
        created.append(session)
        return session

    yield factory

    for session in created:
        await session.close()
    await settle()
