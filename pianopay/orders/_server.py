"""
Order server — expose an order backend over the REST contract the client speaks.

Wraps any OrderBackend (MemoryOrderApi for local development, or an
OrderClient to proxy a real backend) in a FastAPI app:

    POST /api/orders                  CreateOrderIn  → OrderOut
    POST /api/orders/{id}/cancel      —              → —
    GET  /api/orders/{id}/status      —              → StatusOut
    GET  /api/orders/my-orders        —              → [OrderOut]
    GET  /api/orders/active-rentals   —              → [OrderOut]

Replies use the {success, data, message, code} envelope; `code` carries the
error kind name so the client classifies without guessing from the status.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

import fastapi
from fastapi.responses import JSONResponse
from kungfu import Result, Ok, Error, LazyCoroResult

from pianopay.orders._client import OrderApi
from pianopay.orders._errors import OrderError, OrderErrorKind
from pianopay.orders._types import Order, StatusCheck
from pianopay.orders._wire import CreateOrderIn, OrderOut, StatusOut

logger = logging.getLogger(__name__)

_STATUS: dict[OrderErrorKind, int] = {
    OrderErrorKind.VALIDATION: 400,
    OrderErrorKind.AUTH: 401,
    OrderErrorKind.TRANSIENT: 503,
    OrderErrorKind.INVALID_STATE: 409,
    OrderErrorKind.NOT_FOUND: 404,
}


class OrderBackend(OrderApi, Protocol):
    def my_orders(self) -> LazyCoroResult[list[Order], OrderError]: ...

    def active_rentals(self) -> LazyCoroResult[list[Order], OrderError]: ...


def _failure(e: OrderError) -> JSONResponse:
    logger.info("order request failed: %s %s", e.kind.name, e.message)
    return JSONResponse(
        {"success": False, "message": e.message, "code": e.kind.name},
        status_code=e.status_code or _STATUS[e.kind],
    )


def _reply[T](
    result: Result[T, OrderError],
    dump: Callable[[T], Any] = lambda _: None,
    *,
    status_code: int = 200,
    message: str | None = None,
) -> JSONResponse:
    match result:
        case Ok(value):
            data = dump(value)
            body: dict[str, Any] = {"success": True, "data": data}
            if message is not None:
                body["message"] = message
            return JSONResponse(body, status_code=status_code)
        case Error(e):
            return _failure(e)


def _dump_order(order: Order) -> dict[str, Any]:
    return OrderOut.from_domain(order).model_dump(mode="json")


def _dump_status(check: StatusCheck) -> dict[str, Any]:
    return StatusOut.from_domain(check).model_dump(mode="json")


def _dump_orders(orders: list[Order]) -> list[dict[str, Any]]:
    return [_dump_order(o) for o in orders]


def create_app(
    backend: OrderBackend,
    *,
    prefix: str = "/api",
    token: str | None = None,
) -> fastapi.FastAPI:
    """
    Build the order API app.

    With `token` set, every request must carry `Authorization: Bearer <token>`.
    """
    app = fastapi.FastAPI(title="pianopay orders")
    router = fastapi.APIRouter(prefix=prefix)

    def authorize(authorization: str | None = fastapi.Header(default=None)) -> None:
        if token is not None and authorization != f"Bearer {token}":
            raise fastapi.HTTPException(status_code=401, detail="Phiên đăng nhập đã hết hạn")

    @router.post("/orders", status_code=201)
    async def create_order(req: CreateOrderIn) -> JSONResponse:
        result = await backend.create_order(req.to_domain())
        return _reply(result, _dump_order, status_code=201)

    @router.post("/orders/{order_id}/cancel")
    async def cancel_order(order_id: str) -> JSONResponse:
        return _reply(await backend.cancel_order(order_id), message="Đã hủy đơn hàng")

    @router.get("/orders/my-orders")
    async def my_orders() -> JSONResponse:
        return _reply(await backend.my_orders(), _dump_orders)

    @router.get("/orders/active-rentals")
    async def active_rentals() -> JSONResponse:
        return _reply(await backend.active_rentals(), _dump_orders)

    @router.get("/orders/{order_id}/status")
    async def check_status(order_id: str) -> JSONResponse:
        return _reply(await backend.check_status(order_id), _dump_status)

    app.include_router(router, dependencies=[fastapi.Depends(authorize)])
    return app


__all__ = ("OrderBackend", "create_app")
