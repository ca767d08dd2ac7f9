"""
Transition table — the payment session state machine as data.

Each row names its source step, the event type that fires it, an optional
guard on the event, the target step and the effects the machine performs.
Leaving QR always carries STOP_TIMERS; terminal steps clear the persisted
order. Events without a matching row leave the session unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from pianopay.orders import OrderStatus, PaymentMethod
from pianopay.session._events import (
    Event,
    Opened,
    Resumed,
    OrderCreated,
    StatusReported,
    CountdownElapsed,
    OrderVanished,
    CancelConfirmed,
    ResetRequested,
    CloseRequested,
)
from pianopay.session._types import Step


class Effect(Enum):
    """Side effects attached to a transition, run in declaration order."""

    STOP_TIMERS = auto()
    ADOPT_ORDER = auto()
    DROP_ORDER = auto()
    PERSIST = auto()
    CLEAR_STORE = auto()
    START_TIMERS = auto()


@dataclass(frozen=True, slots=True)
class Transition:
    source: Step
    event: type
    target: Step
    effects: tuple[Effect, ...] = ()
    guard: Callable[[Event], bool] | None = None

    def matches(self, step: Step, event: Event) -> bool:
        if self.source is not step or not isinstance(event, self.event):
            return False
        return self.guard is None or self.guard(event)


# ═══════════════════════════════════════════════════════════════════════════════
# Guards
# ═══════════════════════════════════════════════════════════════════════════════


def _paid_on_delivery(event: Event) -> bool:
    return isinstance(event, OrderCreated) and event.order.payment_method is PaymentMethod.COD


def _paid_by_qr(event: Event) -> bool:
    return isinstance(event, OrderCreated) and event.order.payment_method is PaymentMethod.QR


def _approved(event: Event) -> bool:
    return isinstance(event, StatusReported) and event.check.status in (
        OrderStatus.APPROVED,
        OrderStatus.COMPLETED,
    )


def _cancelled(event: Event) -> bool:
    return isinstance(event, StatusReported) and event.check.status in (
        OrderStatus.CANCELLED,
        OrderStatus.REJECTED,
    )


def _expired(event: Event) -> bool:
    return isinstance(event, StatusReported) and event.check.is_expired


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════

_LEAVE_QR = (Effect.STOP_TIMERS, Effect.CLEAR_STORE)
_FINISH = (Effect.CLEAR_STORE, Effect.DROP_ORDER)

TRANSITIONS: tuple[Transition, ...] = (
    # Opening
    Transition(Step.CLOSED, Opened, Step.SELECT),
    Transition(Step.CLOSED, Resumed, Step.QR, (Effect.ADOPT_ORDER, Effect.START_TIMERS)),
    # Method choice
    Transition(Step.SELECT, OrderCreated, Step.SUCCESS, (Effect.ADOPT_ORDER,), _paid_on_delivery),
    Transition(
        Step.SELECT,
        OrderCreated,
        Step.QR,
        (Effect.STOP_TIMERS, Effect.ADOPT_ORDER, Effect.PERSIST, Effect.START_TIMERS),
        _paid_by_qr,
    ),
    Transition(Step.SELECT, CloseRequested, Step.CLOSED, (Effect.DROP_ORDER,)),
    # Waiting for the transfer; row order is precedence for one status reply
    Transition(Step.QR, StatusReported, Step.SUCCESS, _LEAVE_QR, _approved),
    Transition(Step.QR, StatusReported, Step.CANCELLED, _LEAVE_QR, _cancelled),
    Transition(Step.QR, StatusReported, Step.EXPIRED, _LEAVE_QR, _expired),
    Transition(Step.QR, CountdownElapsed, Step.EXPIRED, _LEAVE_QR),
    Transition(Step.QR, OrderVanished, Step.EXPIRED, _LEAVE_QR),
    Transition(Step.QR, CancelConfirmed, Step.CANCELLED, _LEAVE_QR),
    # Dismissed while waiting: keep the persisted order so it can resume
    Transition(Step.QR, CloseRequested, Step.CLOSED, (Effect.STOP_TIMERS, Effect.DROP_ORDER)),
    # Terminal steps
    Transition(Step.SUCCESS, CloseRequested, Step.CLOSED, _FINISH),
    Transition(Step.EXPIRED, ResetRequested, Step.SELECT, _FINISH),
    Transition(Step.EXPIRED, CloseRequested, Step.CLOSED, _FINISH),
    Transition(Step.CANCELLED, ResetRequested, Step.SELECT, _FINISH),
    Transition(Step.CANCELLED, CloseRequested, Step.CLOSED, _FINISH),
)


def find_transition(step: Step, event: Event) -> Transition | None:
    """First row matching step and event, or None."""
    for transition in TRANSITIONS:
        if transition.matches(step, event):
            return transition
    return None


def targets_from(step: Step) -> frozenset[Step]:
    """Every step reachable from `step` in one transition."""
    return frozenset(t.target for t in TRANSITIONS if t.source is step)


__all__ = (
    "Effect",
    "Transition",
    "TRANSITIONS",
    "find_transition",
    "targets_from",
)
