"""
Orders — order API client.

    from pianopay import orders as O

    client = O.OrderClient(O.RequestsTransport(O.ApiConfig.from_env(), token=get_token))
    result = await client.create_order(O.CreateOrderInput(
        subject_id="42",
        kind=O.OrderKind.RENT,
        payment_method=O.PaymentMethod.QR,
        rental_start=date(2026, 3, 1),
        rental_end=date(2026, 3, 6),
    ))
"""

from __future__ import annotations

from pianopay.orders._types import (
    OrderKind,
    PaymentMethod,
    OrderStatus,
    BankInfo,
    Order,
    CreateOrderInput,
    StatusCheck,
)
from pianopay.orders._errors import (
    OrderErrorKind,
    OrderError,
    OrderErrors,
    classify,
)
from pianopay.orders._config import ApiConfig
from pianopay.orders._transport import (
    TokenProvider,
    HttpResponse,
    Transport,
    RequestsTransport,
)
from pianopay.orders._validate import validate_create
from pianopay.orders._client import OrderApi, OrderClient, decode
from pianopay.orders._memory import MemoryOrderApi, Pricer
from pianopay.orders._server import OrderBackend, create_app
from pianopay.orders import _wire as wire

__all__ = (
    "OrderKind",
    "PaymentMethod",
    "OrderStatus",
    "BankInfo",
    "Order",
    "CreateOrderInput",
    "StatusCheck",
    "OrderErrorKind",
    "OrderError",
    "OrderErrors",
    "classify",
    "ApiConfig",
    "TokenProvider",
    "HttpResponse",
    "Transport",
    "RequestsTransport",
    "validate_create",
    "OrderApi",
    "OrderClient",
    "decode",
    "MemoryOrderApi",
    "Pricer",
    "OrderBackend",
    "create_app",
    "wire",
)
