"""
Order types — domain model of a purchase, rental or enrolment.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum


# ═══════════════════════════════════════════════════════════════════════════════
# Enums — wire values are the enum values
# ═══════════════════════════════════════════════════════════════════════════════


class OrderKind(Enum):
    BUY = "buy"
    RENT = "rent"
    COURSE = "course"


class PaymentMethod(Enum):
    COD = "COD"
    QR = "QR"


class OrderStatus(Enum):
    """
    Server-authoritative order status.

    Lifecycle:
        PENDING → APPROVED | REJECTED | CANCELLED | COMPLETED
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BankInfo:
    """Bank transfer instructions for a QR payment."""

    bank_name: str
    account_number: str
    amount: int
    description: str


@dataclass(frozen=True, slots=True)
class Order:
    """
    Order snapshot as returned by the backend.

    Note: payment_expired_at, qr_url and bank_info are only set for QR orders.
    """

    id: str
    subject_id: str
    kind: OrderKind
    payment_method: PaymentMethod
    status: OrderStatus
    total_price: int
    rental_start: date | None = None
    rental_end: date | None = None
    rental_days: int | None = None
    payment_expired_at: datetime | None = None
    qr_url: str | None = None
    bank_info: BankInfo | None = None
    created_at: datetime | None = None

    @property
    def is_qr(self) -> bool:
        return self.payment_method is PaymentMethod.QR

    @property
    def is_pending(self) -> bool:
        return self.status is OrderStatus.PENDING

    def is_expired_at(self, now: datetime) -> bool:
        """True once the QR payment window has closed."""
        if self.payment_expired_at is None:
            return False
        return now >= self.payment_expired_at

    def with_status(self, status: OrderStatus) -> Order:
        return replace(self, status=status)


# ═══════════════════════════════════════════════════════════════════════════════
# Requests / Responses
# ═══════════════════════════════════════════════════════════════════════════════


def _day(value: date | None) -> date | None:
    # datetime is a date subclass
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True, slots=True)
class CreateOrderInput:
    """What the user confirmed on the selection screen."""

    subject_id: str
    kind: OrderKind
    payment_method: PaymentMethod
    rental_start: date | None = None
    rental_end: date | None = None

    def by_day(self) -> CreateOrderInput:
        """Rental bounds truncated to calendar days; orders are booked per day."""
        return replace(
            self,
            rental_start=_day(self.rental_start),
            rental_end=_day(self.rental_end),
        )


@dataclass(frozen=True, slots=True)
class StatusCheck:
    """Result of a status poll."""

    status: OrderStatus
    is_expired: bool


__all__ = (
    "OrderKind",
    "PaymentMethod",
    "OrderStatus",
    "BankInfo",
    "Order",
    "CreateOrderInput",
    "StatusCheck",
)
