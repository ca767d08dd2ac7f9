from __future__ import annotations

import asyncio

from pianopay import pricing as P
from pianopay import present as V
from pianopay._clock import ManualClock
from pianopay.orders import MemoryOrderApi, OrderKind, PaymentMethod
from pianopay.persistence import MemoryKeyValueStore, PendingOrderStore
from pianopay.session import PaymentSession, SessionPolicy, Step, Subject

from conftest import SessionFactory
from _helpers import ok, settle, RATES, RENT_START, RENT_END


async def test_rent_by_qr_expires_after_window(
    make_session: SessionFactory,
    api: MemoryOrderApi,
    clock: ManualClock,
    kv: MemoryKeyValueStore,
) -> None:
    preview = P.quote(OrderKind.RENT, RATES["42"], RENT_START, RENT_END)
    assert preview.total == 36_000_000

    session = make_session(OrderKind.RENT, "42")
    await session.open()
    order = ok(await session.confirm(
        PaymentMethod.QR,
        rental_start=RENT_START,
        rental_end=RENT_END,
        expected_total=preview.total,
    ))
    await settle()

    assert order.total_price == preview.total
    view = V.render(session.snapshot)
    assert view.step is Step.QR
    assert view.countdown == "Thời gian còn lại: 60:00"
    assert view.progress == 1.0
    assert session.snapshot.window_seconds == 3600

    clock.advance(3601)
    await session.tick()

    assert session.step is Step.EXPIRED
    assert not session.timers_running
    assert kv.keys() == []
    assert V.render(session.snapshot).title == "Hết thời gian thanh toán"


async def test_buy_by_cod_succeeds_without_timers(
    make_session: SessionFactory,
    api: MemoryOrderApi,
) -> None:
    session = make_session(OrderKind.BUY, "7")
    await session.open()

    order = ok(await session.confirm(PaymentMethod.COD, expected_total=P.buy_price(RATES["7"])))
    await settle()

    assert order.total_price == 15_000_000
    assert session.step is Step.SUCCESS
    assert not session.timers_running
    assert api.calls["check_status"] == 0
    assert "chờ xét duyệt" in V.render(session.snapshot).message


async def test_real_tickers_drive_expiry(api: MemoryOrderApi, clock: ManualClock) -> None:
    seen: list[Step] = []
    session = PaymentSession(
        api,
        Subject(OrderKind.RENT, "42"),
        store=PendingOrderStore(MemoryKeyValueStore(), clock),
        clock=clock,
        policy=SessionPolicy().with_intervals(countdown=0.01, poll=0.01),
    )
    session.subscribe(lambda snap: seen.append(snap.step))
    await session.open()
    ok(await session.confirm(PaymentMethod.QR, rental_start=RENT_START, rental_end=RENT_END))

    await asyncio.sleep(0.05)
    assert session.step is Step.QR
    polls = api.calls["check_status"]
    assert polls >= 2

    clock.advance(3601)
    for _ in range(100):
        if session.step is Step.EXPIRED:
            break
        await asyncio.sleep(0.01)

    assert session.step is Step.EXPIRED
    polls_at_expiry = api.calls["check_status"]
    await asyncio.sleep(0.05)
    assert api.calls["check_status"] == polls_at_expiry
    assert not session.timers_running
    assert seen[-1] is Step.EXPIRED
    await session.close()


async def test_real_tickers_pick_up_approval(api: MemoryOrderApi, clock: ManualClock) -> None:
    session = PaymentSession(
        api,
        Subject(OrderKind.BUY, "7"),
        clock=clock,
        policy=SessionPolicy().with_intervals(countdown=0.01, poll=0.01),
    )
    await session.open()
    order = ok(await session.confirm(PaymentMethod.QR))

    api.approve(order.id)
    for _ in range(100):
        if session.step is Step.SUCCESS:
            break
        await asyncio.sleep(0.01)

    assert session.step is Step.SUCCESS
    assert not session.timers_running
    await session.close()
