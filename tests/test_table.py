from __future__ import annotations

from datetime import datetime, timezone

import pytest

from pianopay.orders import Order, OrderKind, OrderStatus, PaymentMethod, StatusCheck
from pianopay.session import (
    TRANSITIONS,
    CancelConfirmed,
    CloseRequested,
    CountdownElapsed,
    Effect,
    OrderCreated,
    Opened,
    ResetRequested,
    StatusReported,
    Step,
    find_transition,
    targets_from,
)

ORDER = Order(
    id="1",
    subject_id="42",
    kind=OrderKind.RENT,
    payment_method=PaymentMethod.QR,
    status=OrderStatus.PENDING,
    total_price=36_000_000,
    payment_expired_at=datetime(2026, 1, 1, 10, tzinfo=timezone.utc),
)


def test_qr_never_returns_to_select() -> None:
    assert targets_from(Step.QR) == {Step.SUCCESS, Step.EXPIRED, Step.CANCELLED, Step.CLOSED}


def test_leaving_qr_stops_timers() -> None:
    rows = [t for t in TRANSITIONS if t.source is Step.QR and t.target is not Step.QR]
    assert rows
    for row in rows:
        assert Effect.STOP_TIMERS in row.effects


def test_terminal_outcomes_clear_store() -> None:
    for row in TRANSITIONS:
        if row.source is Step.QR and row.target.is_terminal:
            assert Effect.CLEAR_STORE in row.effects


def test_closing_from_qr_keeps_store() -> None:
    row = find_transition(Step.QR, CloseRequested())
    assert row is not None
    assert row.target is Step.CLOSED
    assert Effect.CLEAR_STORE not in row.effects


def test_timers_only_start_on_entering_qr() -> None:
    for row in TRANSITIONS:
        if Effect.START_TIMERS in row.effects:
            assert row.target is Step.QR


def test_order_created_routes_by_method() -> None:
    cod = OrderCreated(Order("2", "7", OrderKind.BUY, PaymentMethod.COD, OrderStatus.PENDING, 1))

    assert find_transition(Step.SELECT, OrderCreated(ORDER)).target is Step.QR
    assert find_transition(Step.SELECT, cod).target is Step.SUCCESS


@pytest.mark.parametrize(
    ("check", "target"),
    [
        (StatusCheck(OrderStatus.APPROVED, is_expired=True), Step.SUCCESS),
        (StatusCheck(OrderStatus.COMPLETED, is_expired=False), Step.SUCCESS),
        (StatusCheck(OrderStatus.REJECTED, is_expired=False), Step.CANCELLED),
        (StatusCheck(OrderStatus.CANCELLED, is_expired=True), Step.CANCELLED),
        (StatusCheck(OrderStatus.PENDING, is_expired=True), Step.EXPIRED),
    ],
)
def test_status_precedence(check: StatusCheck, target: Step) -> None:
    row = find_transition(Step.QR, StatusReported(0, check))
    assert row is not None
    assert row.target is target


def test_pending_status_is_not_a_transition() -> None:
    assert find_transition(Step.QR, StatusReported(0, StatusCheck(OrderStatus.PENDING, False))) is None


@pytest.mark.parametrize(
    ("step", "event"),
    [
        (Step.SELECT, CountdownElapsed(0)),
        (Step.SELECT, CancelConfirmed(0)),
        (Step.QR, ResetRequested()),
        (Step.QR, Opened()),
        (Step.SUCCESS, ResetRequested()),
        (Step.CLOSED, CloseRequested()),
    ],
)
def test_unmatched_events(step: Step, event: object) -> None:
    assert find_transition(step, event) is None
