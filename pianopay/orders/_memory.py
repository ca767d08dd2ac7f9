"""
Memory order API — in-process backend for tests and demos.

Implements OrderApi with the backend's rules (QR payment window, cancel only
while pending) and exposes the server-side transitions a real backend would
drive on its own: approval by the payment rail, rejection, expiry.

Note: Single process only. No auth provider, no settlement.
"""

from __future__ import annotations

import asyncio
from collections import Counter, defaultdict, deque
from collections.abc import Callable
from dataclasses import replace
from datetime import timedelta

from kungfu import Result, Ok, Error, LazyCoroResult

from pianopay._clock import Clock, SystemClock
from pianopay.orders._errors import OrderError, OrderErrors
from pianopay.orders._types import (
    BankInfo,
    CreateOrderInput,
    Order,
    OrderKind,
    OrderStatus,
    PaymentMethod,
    StatusCheck,
)
from pianopay.orders._validate import validate_create

type Pricer = Callable[[CreateOrderInput], int]

DEFAULT_PAYMENT_WINDOW = timedelta(hours=1)


class MemoryOrderApi:
    """
    In-memory order backend.

    Example:
        api = MemoryOrderApi(clock=clock, pricer=lambda d: 36_000_000)
        match await api.create_order(data):
            case Ok(order):
                api.approve(order.id)  # payment rail confirmed the transfer
        api.fail_next("check_status", OrderErrors.auth())
    """

    def __init__(
        self,
        clock: Clock | None = None,
        *,
        pricer: Pricer,
        payment_window: timedelta = DEFAULT_PAYMENT_WINDOW,
        bank_name: str = "Vietcombank",
        account_number: str = "0123456789",
    ) -> None:
        self._clock = clock or SystemClock()
        self._pricer = pricer
        self._window = payment_window
        self._bank_name = bank_name
        self._account_number = account_number
        self._orders: dict[str, Order] = {}
        self._next_id = 1
        self._failures: defaultdict[str, deque[OrderError]] = defaultdict(deque)
        self.calls: Counter[str] = Counter()
        self.authenticated = True
        self.status_gate: asyncio.Event | None = None

    # ───────────────────────────────────────────────────────────────────────────
    # OrderApi
    # ───────────────────────────────────────────────────────────────────────────

    def create_order(self, data: CreateOrderInput) -> LazyCoroResult[Order, OrderError]:
        async def impl() -> Result[Order, OrderError]:
            self.calls["create_order"] += 1
            if (failure := self._failure("create_order")) is not None:
                return Error(failure)
            match validate_create(data):
                case Error(e):
                    return Error(e)
                case Ok(valid):
                    order = self._new_order(valid)
            self._orders[order.id] = order
            return Ok(order)

        return LazyCoroResult(impl)

    def cancel_order(self, order_id: str) -> LazyCoroResult[None, OrderError]:
        async def impl() -> Result[None, OrderError]:
            self.calls["cancel_order"] += 1
            if (failure := self._failure("cancel_order")) is not None:
                return Error(failure)
            order = self._orders.get(order_id)
            if order is None:
                return Error(OrderErrors.not_found(f"Order {order_id} not found"))
            if not order.is_pending:
                return Error(OrderErrors.invalid_state(
                    f"Order {order_id} is {order.status.value}, only pending orders can be cancelled",
                    400,
                ))
            self._orders[order_id] = order.with_status(OrderStatus.CANCELLED)
            return Ok(None)

        return LazyCoroResult(impl)

    def check_status(self, order_id: str) -> LazyCoroResult[StatusCheck, OrderError]:
        async def impl() -> Result[StatusCheck, OrderError]:
            self.calls["check_status"] += 1
            if self.status_gate is not None:
                await self.status_gate.wait()
            if (failure := self._failure("check_status")) is not None:
                return Error(failure)
            order = self._orders.get(order_id)
            if order is None:
                return Error(OrderErrors.not_found(f"Order {order_id} not found"))
            return Ok(StatusCheck(
                status=order.status,
                is_expired=order.is_pending and order.is_expired_at(self._clock.now()),
            ))

        return LazyCoroResult(impl)

    def my_orders(self) -> LazyCoroResult[list[Order], OrderError]:
        async def impl() -> Result[list[Order], OrderError]:
            self.calls["my_orders"] += 1
            if (failure := self._failure("my_orders")) is not None:
                return Error(failure)
            return Ok(list(self._orders.values()))

        return LazyCoroResult(impl)

    def active_rentals(self) -> LazyCoroResult[list[Order], OrderError]:
        async def impl() -> Result[list[Order], OrderError]:
            self.calls["active_rentals"] += 1
            if (failure := self._failure("active_rentals")) is not None:
                return Error(failure)
            today = self._clock.now().date()
            return Ok([
                o for o in self._orders.values()
                if o.kind is OrderKind.RENT
                and o.status in (OrderStatus.APPROVED, OrderStatus.COMPLETED)
                and o.rental_end is not None
                and o.rental_end >= today
            ])

        return LazyCoroResult(impl)

    # ───────────────────────────────────────────────────────────────────────────
    # Server-side controls
    # ───────────────────────────────────────────────────────────────────────────

    def get(self, order_id: str) -> Order | None:
        return self._orders.get(order_id)

    def approve(self, order_id: str) -> None:
        self._set_status(order_id, OrderStatus.APPROVED)

    def reject(self, order_id: str) -> None:
        self._set_status(order_id, OrderStatus.REJECTED)

    def cancel(self, order_id: str) -> None:
        self._set_status(order_id, OrderStatus.CANCELLED)

    def expire(self, order_id: str) -> None:
        """Close the QR payment window now."""
        order = self._orders[order_id]
        self._orders[order_id] = replace(order, payment_expired_at=self._clock.now())

    def delete(self, order_id: str) -> None:
        self._orders.pop(order_id, None)

    def fail_next(self, operation: str, error: OrderError, times: int = 1) -> None:
        """Queue errors returned by the next calls of `operation`."""
        for _ in range(times):
            self._failures[operation].append(error)

    # ───────────────────────────────────────────────────────────────────────────
    # Internals
    # ───────────────────────────────────────────────────────────────────────────

    def _failure(self, operation: str) -> OrderError | None:
        if not self.authenticated:
            return OrderErrors.auth()
        queue = self._failures[operation]
        return queue.popleft() if queue else None

    def _set_status(self, order_id: str, status: OrderStatus) -> None:
        self._orders[order_id] = self._orders[order_id].with_status(status)

    def _new_order(self, data: CreateOrderInput) -> Order:
        order_id = str(self._next_id)
        self._next_id += 1
        now = self._clock.now()
        total = self._pricer(data)

        days = None
        if data.kind is OrderKind.RENT and data.rental_start and data.rental_end:
            # whole days once validate_create has run
            days = (data.rental_end - data.rental_start).days

        order = Order(
            id=order_id,
            subject_id=data.subject_id,
            kind=data.kind,
            payment_method=data.payment_method,
            status=OrderStatus.PENDING,
            total_price=total,
            rental_start=data.rental_start,
            rental_end=data.rental_end,
            rental_days=days,
            created_at=now,
        )
        if data.payment_method is not PaymentMethod.QR:
            return order

        description = f"PIANO{order_id}"
        return replace(
            order,
            payment_expired_at=now + self._window,
            qr_url=(
                f"https://img.vietqr.io/image/{self._bank_name}-{self._account_number}-compact.png"
                f"?amount={total}&addInfo={description}"
            ),
            bank_info=BankInfo(
                bank_name=self._bank_name,
                account_number=self._account_number,
                amount=total,
                description=description,
            ),
        )


__all__ = ("MemoryOrderApi", "Pricer", "DEFAULT_PAYMENT_WINDOW")
