"""
Wire models — pydantic DTOs for the backend order API.

Every DTO converts with to_domain() / from_domain(), so nothing outside this
module sees backend field names.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict

from pianopay.orders._types import (
    BankInfo,
    CreateOrderInput,
    Order,
    OrderKind,
    OrderStatus,
    PaymentMethod,
    StatusCheck,
)


def _wire_id(value: str) -> int | str:
    """Numeric ids travel as numbers."""
    return int(value) if value.isdigit() else value


def _aware(value: datetime | None) -> datetime | None:
    """Naive timestamps from the backend are UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _day(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# Envelope — {success, data, message, code}
# ═══════════════════════════════════════════════════════════════════════════════


class Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    data: Any = None
    message: str | None = None
    code: str | None = None

    @classmethod
    def from_body(cls, body: Any, status_code: int) -> Envelope:
        """
        Read a response body.

        Bodies without a `success` flag are treated as bare data, successful
        when the HTTP status is.
        """
        ok = status_code < 400
        if isinstance(body, dict) and "success" in body:
            return cls.model_validate(body)
        if isinstance(body, dict) and not ok:
            # FastAPI puts validation errors in a list under `detail`
            message = body.get("message") or body.get("detail")
            code = body.get("code")
            return cls(
                success=False,
                message=message if isinstance(message, str) else None,
                code=code if isinstance(code, str) else None,
            )
        return cls(success=ok, data=body)


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


class BankInfoOut(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bank_name: str
    account_number: str
    amount: int
    description: str

    def to_domain(self) -> BankInfo:
        return BankInfo(
            bank_name=self.bank_name,
            account_number=self.account_number,
            amount=self.amount,
            description=self.description,
        )

    @classmethod
    def from_domain(cls, info: BankInfo) -> BankInfoOut:
        return cls(
            bank_name=info.bank_name,
            account_number=info.account_number,
            amount=info.amount,
            description=info.description,
        )


class OrderOut(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | str
    piano_id: int | str | None = None
    course_id: int | str | None = None
    type: OrderKind
    payment_method: PaymentMethod = PaymentMethod.COD
    status: OrderStatus = OrderStatus.PENDING
    total_price: float
    rental_start_date: date | datetime | None = None
    rental_end_date: date | datetime | None = None
    rental_days: int | None = None
    payment_expired_at: datetime | None = None
    qr_url: str | None = None
    bank_info: BankInfoOut | None = None
    created_at: datetime | None = None

    def to_domain(self) -> Order:
        subject = self.course_id if self.type is OrderKind.COURSE else self.piano_id
        if subject is None:
            subject = self.piano_id if self.piano_id is not None else self.course_id
        return Order(
            id=str(self.id),
            subject_id="" if subject is None else str(subject),
            kind=self.type,
            payment_method=self.payment_method,
            status=self.status,
            total_price=round(self.total_price),
            rental_start=_day(self.rental_start_date),
            rental_end=_day(self.rental_end_date),
            rental_days=self.rental_days,
            payment_expired_at=_aware(self.payment_expired_at),
            qr_url=self.qr_url,
            bank_info=self.bank_info.to_domain() if self.bank_info else None,
            created_at=_aware(self.created_at),
        )

    @classmethod
    def from_domain(cls, order: Order) -> OrderOut:
        subject = _wire_id(order.subject_id)
        is_course = order.kind is OrderKind.COURSE
        return cls(
            id=_wire_id(order.id),
            piano_id=None if is_course else subject,
            course_id=subject if is_course else None,
            type=order.kind,
            payment_method=order.payment_method,
            status=order.status,
            total_price=order.total_price,
            rental_start_date=order.rental_start,
            rental_end_date=order.rental_end,
            rental_days=order.rental_days,
            payment_expired_at=order.payment_expired_at,
            qr_url=order.qr_url,
            bank_info=BankInfoOut.from_domain(order.bank_info) if order.bank_info else None,
            created_at=order.created_at,
        )


class CreateOrderIn(BaseModel):
    piano_id: int | str | None = None
    course_id: int | str | None = None
    type: OrderKind
    payment_method: PaymentMethod
    rental_start_date: date | None = None
    rental_end_date: date | None = None

    @classmethod
    def from_domain(cls, data: CreateOrderInput) -> CreateOrderIn:
        data = data.by_day()
        subject = _wire_id(data.subject_id)
        is_course = data.kind is OrderKind.COURSE
        is_rent = data.kind is OrderKind.RENT
        return cls(
            piano_id=None if is_course else subject,
            course_id=subject if is_course else None,
            type=data.kind,
            payment_method=data.payment_method,
            rental_start_date=data.rental_start if is_rent else None,
            rental_end_date=data.rental_end if is_rent else None,
        )

    def to_domain(self) -> CreateOrderInput:
        subject = self.course_id if self.type is OrderKind.COURSE else self.piano_id
        return CreateOrderInput(
            subject_id="" if subject is None else str(subject),
            kind=self.type,
            payment_method=self.payment_method,
            rental_start=self.rental_start_date,
            rental_end=self.rental_end_date,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Status
# ═══════════════════════════════════════════════════════════════════════════════


class StatusOut(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: OrderStatus
    is_expired: bool = False

    def to_domain(self) -> StatusCheck:
        return StatusCheck(status=self.status, is_expired=self.is_expired)

    @classmethod
    def from_domain(cls, check: StatusCheck) -> StatusOut:
        return cls(status=check.status, is_expired=check.is_expired)


__all__ = (
    "Envelope",
    "BankInfoOut",
    "OrderOut",
    "CreateOrderIn",
    "StatusOut",
)
