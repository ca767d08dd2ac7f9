"""
Session types — steps, subject and snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pianopay.orders import Order, OrderError, OrderKind, PaymentMethod


class Step(Enum):
    """
    Payment session step.

    Lifecycle:
        CLOSED → SELECT → SUCCESS                  (COD)
                        → QR → SUCCESS | EXPIRED | CANCELLED
        CLOSED → QR                                (resumed)
        EXPIRED | CANCELLED → SELECT               (reset)
        any → CLOSED                               (close)
    """

    CLOSED = "closed"
    SELECT = "select"
    QR = "qr"
    SUCCESS = "success"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (Step.SUCCESS, Step.EXPIRED, Step.CANCELLED)


@dataclass(frozen=True, slots=True)
class Subject:
    """What is being bought, rented or enrolled in."""

    kind: OrderKind
    subject_id: str
    name: str = ""


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """
    Read-only view of a payment session at one moment.

    Note: remaining_seconds and window_seconds are 0 outside QR.
    """

    step: Step
    subject: Subject
    payment_method: PaymentMethod
    allowed_methods: tuple[PaymentMethod, ...]
    order: Order | None
    expected_total: int | None
    remaining_seconds: int
    window_seconds: int
    submitting: bool
    cancelling: bool
    auth_error: bool
    poll_failures: int
    poll_failure_threshold: int
    last_error: OrderError | None

    @property
    def total(self) -> int | None:
        """Server-confirmed total once the order exists, preview before."""
        if self.order is not None:
            return self.order.total_price
        return self.expected_total

    @property
    def polling_unreliable(self) -> bool:
        return self.auth_error or self.poll_failures >= self.poll_failure_threshold


__all__ = ("Step", "Subject", "SessionSnapshot")
