"""
Session events — everything that can move a payment session.

Events raised by timers or network replies carry the generation of the QR
session that produced them; the machine drops any whose generation is no
longer current.
"""

from __future__ import annotations

from dataclasses import dataclass

from pianopay.orders import Order, StatusCheck


@dataclass(frozen=True, slots=True)
class Opened:
    """Flow opened with nothing to resume."""


@dataclass(frozen=True, slots=True)
class Resumed:
    """Flow opened with a persisted QR order still inside its window."""

    order: Order


@dataclass(frozen=True, slots=True)
class OrderCreated:
    """Backend accepted the order the user confirmed."""

    order: Order


@dataclass(frozen=True, slots=True)
class StatusReported:
    """Status poll answered."""

    generation: int
    check: StatusCheck


@dataclass(frozen=True, slots=True)
class CountdownElapsed:
    """Local countdown reached zero."""

    generation: int


@dataclass(frozen=True, slots=True)
class OrderVanished:
    """Status poll says the order no longer exists."""

    generation: int


@dataclass(frozen=True, slots=True)
class CancelConfirmed:
    """Backend accepted the cancel request."""

    generation: int


@dataclass(frozen=True, slots=True)
class ResetRequested:
    """User chose "Đặt lại" from a terminal step."""


@dataclass(frozen=True, slots=True)
class CloseRequested:
    """User closed the flow."""


type Event = (
    Opened
    | Resumed
    | OrderCreated
    | StatusReported
    | CountdownElapsed
    | OrderVanished
    | CancelConfirmed
    | ResetRequested
    | CloseRequested
)

type ScopedEvent = StatusReported | CountdownElapsed | OrderVanished | CancelConfirmed

SCOPED_EVENTS: tuple[type, ...] = (
    StatusReported,
    CountdownElapsed,
    OrderVanished,
    CancelConfirmed,
)


__all__ = (
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
)
