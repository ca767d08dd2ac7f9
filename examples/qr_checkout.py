"""
QR Checkout Example — rent a piano, pay by bank transfer, watch the session.

Run: uv run python examples/qr_checkout.py
"""

import asyncio
from datetime import date

from kungfu import Ok, Error

from pianopay import pricing as P
from pianopay import present as V
from pianopay import session as S
from pianopay._clock import ManualClock
from pianopay.orders import MemoryOrderApi, OrderKind, PaymentMethod
from pianopay.persistence import MemoryKeyValueStore, PendingOrderStore
from examples._infra import RATES, banner, catalog_price, run

START = date(2026, 3, 1)
END = date(2026, 3, 6)


# ═══════════════════════════════════════════════════════════════════════════════
# Wiring
# ═══════════════════════════════════════════════════════════════════════════════

clock = ManualClock()
api = MemoryOrderApi(clock=clock, pricer=catalog_price)
store = PendingOrderStore(MemoryKeyValueStore(), clock)
policy = S.SessionPolicy().with_intervals(countdown=0.05, poll=0.1)


def show(snapshot: S.SessionSnapshot) -> None:
    view = V.render(snapshot)
    line = f"  [{view.step.value:>9}] {view.title}"
    if view.countdown:
        line += f" | {view.countdown}"
    print(line)


async def wait_for(session: S.PaymentSession, step: S.Step) -> None:
    while session.step is not step:
        await asyncio.sleep(0.02)


# ═══════════════════════════════════════════════════════════════════════════════
# Demo
# ═══════════════════════════════════════════════════════════════════════════════


async def main() -> None:
    banner("QR Checkout")

    # 1. Preview
    quote = P.quote(OrderKind.RENT, RATES["42"], START, END)
    print(f"\n1. Preview: {quote.days} days, -{quote.discount_percent}% → {V.format_vnd(quote.total)}")

    # 2. Confirm by QR
    print("\n2. Confirm (QR):")
    session = S.PaymentSession(api, S.Subject(OrderKind.RENT, "42", "Yamaha U1"), store=store, clock=clock, policy=policy)
    session.subscribe(show)
    await session.open()
    match await session.confirm(PaymentMethod.QR, rental_start=START, rental_end=END, expected_total=quote.total):
        case Ok(order):
            print(f"   order #{order.id}, total {V.format_vnd(order.total_price)}")
        case Error(e):
            print(f"   error: {e.message}")
            return

    for field in V.render(session.snapshot).bank_fields:
        print(f"   {field.label}: {field.display}")

    # 3. Customer reloads the page: the same order resumes
    print("\n3. Reload:")
    await session.close()
    resumed = S.PaymentSession(api, S.Subject(OrderKind.RENT, "42"), store=store, clock=clock, policy=policy)
    await resumed.open()
    print(f"   resumed order #{resumed.order.id}, creates so far: {api.calls['create_order']}")

    # 4. Transfer lands
    print("\n4. Bank confirms transfer:")
    resumed.subscribe(show)
    api.approve(order.id)
    await wait_for(resumed, S.Step.SUCCESS)
    await resumed.close()

    # 5. Second order left unpaid
    print("\n5. Unpaid order:")
    late = S.PaymentSession(api, S.Subject(OrderKind.BUY, "7"), store=store, clock=clock, policy=policy)
    late.subscribe(show)
    await late.open()
    await late.confirm(PaymentMethod.QR)
    clock.advance(3601)
    await wait_for(late, S.Step.EXPIRED)
    await late.reset()
    await late.close()

    print(f"\nSummary: {api.calls['create_order']} orders, {api.calls['check_status']} status polls")


if __name__ == "__main__":
    run(main)
