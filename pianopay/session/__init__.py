"""
Session — payment session state machine.

    from pianopay import session as S

    session = S.PaymentSession(api, S.Subject(OrderKind.BUY, "7", "Yamaha U1"), store=bridge)
    unsubscribe = session.subscribe(on_change)

    await session.open()
    match await session.confirm(PaymentMethod.QR):
        case Ok(order): ...        # QR step, countdown and poll running
        case Error(e): ...         # still in SELECT, snapshot.last_error set
"""

from __future__ import annotations

from pianopay.session._types import (
    Step,
    Subject,
    SessionSnapshot,
)
from pianopay.session._events import (
    Opened,
    Resumed,
    OrderCreated,
    StatusReported,
    CountdownElapsed,
    OrderVanished,
    CancelConfirmed,
    ResetRequested,
    CloseRequested,
    Event,
    ScopedEvent,
    SCOPED_EVENTS,
)
from pianopay.session._policy import SessionPolicy, DEFAULT_WINDOW_SECONDS
from pianopay.session._table import (
    Effect,
    Transition,
    TRANSITIONS,
    find_transition,
    targets_from,
)
from pianopay.session._ticker import Ticker, Sleep
from pianopay.session._machine import PaymentSession, Listener, COUNTDOWN, POLL

__all__ = (
    "Step",
    "Subject",
    "SessionSnapshot",
    "Opened",
    "Resumed",
    "OrderCreated",
    "StatusReported",
    "CountdownElapsed",
    "OrderVanished",
    "CancelConfirmed",
    "ResetRequested",
    "CloseRequested",
    "Event",
    "ScopedEvent",
    "SCOPED_EVENTS",
    "SessionPolicy",
    "DEFAULT_WINDOW_SECONDS",
    "Effect",
    "Transition",
    "TRANSITIONS",
    "find_transition",
    "targets_from",
    "Ticker",
    "Sleep",
    "PaymentSession",
    "Listener",
    "COUNTDOWN",
    "POLL",
)
