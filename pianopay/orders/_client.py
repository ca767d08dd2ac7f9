"""
Order client — create / cancel / poll against the backend order API.

Every operation is lazy: it returns a LazyCoroResult and nothing is sent
until it is awaited.

    client = O.OrderClient(transport)

    match await client.create_order(data):
        case Ok(order):
            ...
        case Error(e) if e.is_auth:
            ...
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from kungfu import Result, Ok, Error, LazyCoroResult
from combinators import lift as L
from pydantic import ValidationError

from pianopay.orders._errors import (
    OrderError,
    OrderErrorKind,
    OrderErrors,
    classify,
)
from pianopay.orders._transport import HttpResponse, Transport
from pianopay.orders._types import CreateOrderInput, Order, StatusCheck
from pianopay.orders._validate import validate_create
from pianopay.orders._wire import CreateOrderIn, Envelope, OrderOut, StatusOut

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# OrderApi Protocol — what the payment session depends on
# ═══════════════════════════════════════════════════════════════════════════════


class OrderApi(Protocol):
    def create_order(self, data: CreateOrderInput) -> LazyCoroResult[Order, OrderError]: ...

    def cancel_order(self, order_id: str) -> LazyCoroResult[None, OrderError]: ...

    def check_status(self, order_id: str) -> LazyCoroResult[StatusCheck, OrderError]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Response Decoding
# ═══════════════════════════════════════════════════════════════════════════════

_DEFAULT_MESSAGES: dict[OrderErrorKind, str] = {
    OrderErrorKind.VALIDATION: "Dữ liệu đơn hàng không hợp lệ",
    OrderErrorKind.AUTH: "Phiên đăng nhập đã hết hạn",
    OrderErrorKind.TRANSIENT: "Máy chủ tạm thời không phản hồi",
    OrderErrorKind.INVALID_STATE: "Không thể thực hiện với trạng thái đơn hàng hiện tại",
    OrderErrorKind.NOT_FOUND: "Không tìm thấy đơn hàng",
}


def decode[T](
    response: HttpResponse,
    parse: Callable[[Any], T],
    *,
    bad_request: OrderErrorKind = OrderErrorKind.VALIDATION,
) -> Result[T, OrderError]:
    """Unwrap the envelope and parse its data, or classify the failure."""
    try:
        envelope = Envelope.from_body(response.body, response.status_code)
    except ValidationError as e:
        return Error(OrderErrors.transient(f"Malformed response: {e}", response.status_code))

    if not response.ok or not envelope.success:
        # success=false on a 2xx is a rejected request
        status = response.status_code if not response.ok else 400
        kind = classify(status, envelope.code, bad_request=bad_request)
        message = envelope.message or _DEFAULT_MESSAGES[kind]
        return Error(OrderError(kind, message, response.status_code))

    try:
        return Ok(parse(envelope.data))
    except (ValidationError, TypeError, ValueError) as e:
        return Error(OrderErrors.transient(f"Malformed response: {e}", response.status_code))


def _order(data: Any) -> Order:
    return OrderOut.model_validate(data).to_domain()


def _orders(data: Any) -> list[Order]:
    return [OrderOut.model_validate(item).to_domain() for item in data or []]


def _status(data: Any) -> StatusCheck:
    return StatusOut.model_validate(data).to_domain()


def _nothing(_: Any) -> None:
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Order Client
# ═══════════════════════════════════════════════════════════════════════════════


class OrderClient:
    """
    REST client for the order API.

    Failure kinds follow OrderErrorKind: network errors and 5xx are
    TRANSIENT, 401/403 AUTH, 404 NOT_FOUND, 409 INVALID_STATE.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def create_order(self, data: CreateOrderInput) -> LazyCoroResult[Order, OrderError]:
        """
        POST /orders.

        Input is validated first; an invalid rental range fails with
        VALIDATION without touching the network. The backend recomputes
        the price and is authoritative.
        """

        async def impl() -> Result[Order, OrderError]:
            match validate_create(data):
                case Error(e):
                    return Error(e)
                case Ok(valid):
                    payload = CreateOrderIn.from_domain(valid).to_wire()

            result = await self._call("POST", "/orders", _order, json=payload)
            match result:
                case Ok(order):
                    logger.info("order %s created (%s, %s)", order.id, order.kind.value, order.payment_method.value)
                case Error(e):
                    logger.warning("create order failed: %s %s", e.kind.name, e.message)
            return result

        return LazyCoroResult(impl)

    def cancel_order(self, order_id: str) -> LazyCoroResult[None, OrderError]:
        """POST /orders/{id}/cancel. Only pending orders can be cancelled."""

        async def impl() -> Result[None, OrderError]:
            return await self._call(
                "POST",
                f"/orders/{order_id}/cancel",
                _nothing,
                bad_request=OrderErrorKind.INVALID_STATE,
            )

        return LazyCoroResult(impl)

    def check_status(self, order_id: str) -> LazyCoroResult[StatusCheck, OrderError]:
        """GET /orders/{id}/status. Read-only, safe to call on a timer."""

        async def impl() -> Result[StatusCheck, OrderError]:
            return await self._call("GET", f"/orders/{order_id}/status", _status)

        return LazyCoroResult(impl)

    def my_orders(self) -> LazyCoroResult[list[Order], OrderError]:
        """GET /orders/my-orders."""

        async def impl() -> Result[list[Order], OrderError]:
            return await self._call("GET", "/orders/my-orders", _orders)

        return LazyCoroResult(impl)

    def active_rentals(self) -> LazyCoroResult[list[Order], OrderError]:
        """GET /orders/active-rentals."""

        async def impl() -> Result[list[Order], OrderError]:
            return await self._call("GET", "/orders/active-rentals", _orders)

        return LazyCoroResult(impl)

    async def _call[T](
        self,
        method: str,
        path: str,
        parse: Callable[[Any], T],
        *,
        json: Any | None = None,
        bad_request: OrderErrorKind = OrderErrorKind.VALIDATION,
    ) -> Result[T, OrderError]:
        sent = await L.catching_async(
            lambda: self._transport.request(method, path, json),
            on_error=lambda e: OrderErrors.transient(f"Network error: {e}"),
        )
        match sent:
            case Ok(response):
                return decode(response, parse, bad_request=bad_request)
            case Error(e):
                return Error(e)


__all__ = (
    "OrderApi",
    "OrderClient",
    "decode",
)
