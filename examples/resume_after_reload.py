"""
Resume Example — a pending QR order survives a restart through SQLite.

Run: uv run python examples/resume_after_reload.py
"""

import tempfile
from pathlib import Path

from pianopay import session as S
from pianopay._clock import ManualClock
from pianopay.orders import MemoryOrderApi, OrderKind, PaymentMethod
from pianopay.persistence import PendingOrderStore, SQLAlchemyKeyValueStore, create_database
from examples._infra import banner, catalog_price, run

clock = ManualClock()
api = MemoryOrderApi(clock=clock, pricer=catalog_price)
subject = S.Subject(OrderKind.COURSE, "c1", "Piano cơ bản")
policy = S.SessionPolicy().with_methods(PaymentMethod.QR)


async def open_session(url: str) -> tuple[S.PaymentSession, object]:
    session_factory, engine = await create_database(url)
    store = PendingOrderStore(SQLAlchemyKeyValueStore(session_factory), clock)
    session = S.PaymentSession(api, subject, store=store, clock=clock, policy=policy)
    await session.open()
    return session, engine


async def main() -> None:
    banner("Resume After Reload")
    url = f"sqlite+aiosqlite:///{Path(tempfile.mkdtemp()) / 'pianopay.db'}"

    print("\n1. First visit:")
    session, engine = await open_session(url)
    await session.confirm()
    print(f"   step={session.step.value}, order #{session.order.id}")
    await session.close()
    await engine.dispose()

    print("\n2. After restart (20 minutes later):")
    clock.advance(20 * 60)
    session, engine = await open_session(url)
    print(f"   step={session.step.value}, order #{session.order.id}, {session.snapshot.remaining_seconds}s left")
    await session.cancel()
    print(f"   cancelled: step={session.step.value}")
    await session.close()
    await engine.dispose()

    print("\n3. Next visit:")
    session, engine = await open_session(url)
    print(f"   step={session.step.value}, creates so far: {api.calls['create_order']}")
    await session.close()
    await engine.dispose()


if __name__ == "__main__":
    run(main)
