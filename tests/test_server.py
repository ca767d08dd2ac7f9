from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from pianopay import orders as O
from pianopay._clock import ManualClock
from pianopay.session import PaymentSession, Step, Subject

from _helpers import ok, err, never, RENT_START, RENT_END

TOKEN = "secret-token"


@pytest.fixture
def http_client(api: O.MemoryOrderApi) -> O.OrderClient:
    """OrderClient → HTTP → order server → memory backend."""
    app = O.create_app(api, token=TOKEN)
    return O.OrderClient(O.RequestsTransport(
        O.ApiConfig().with_base_url("http://testserver/api"),
        token=lambda: TOKEN,
        session=TestClient(app),
    ))


async def test_create_and_poll_over_http(http_client: O.OrderClient, api: O.MemoryOrderApi) -> None:
    data = O.CreateOrderInput("42", O.OrderKind.RENT, O.PaymentMethod.QR, RENT_START, RENT_END)

    order = ok(await http_client.create_order(data))

    assert order == api.get(order.id)
    assert ok(await http_client.check_status(order.id)) == O.StatusCheck(O.OrderStatus.PENDING, False)

    api.approve(order.id)
    assert ok(await http_client.check_status(order.id)).status is O.OrderStatus.APPROVED
    assert [o.id for o in ok(await http_client.active_rentals())] == [order.id]
    assert len(ok(await http_client.my_orders())) == 1


async def test_backend_errors_keep_their_kind(http_client: O.OrderClient, api: O.MemoryOrderApi) -> None:
    order = ok(await http_client.create_order(O.CreateOrderInput("7", O.OrderKind.BUY, O.PaymentMethod.COD)))
    ok(await http_client.cancel_order(order.id))

    assert err(await http_client.cancel_order(order.id)).kind is O.OrderErrorKind.INVALID_STATE
    assert err(await http_client.check_status("99")).kind is O.OrderErrorKind.NOT_FOUND

    api.fail_next("check_status", O.OrderErrors.transient("database down"))
    e = err(await http_client.check_status(order.id))
    assert e.kind is O.OrderErrorKind.TRANSIENT
    assert e.message == "database down"


async def test_missing_token_is_auth_error(api: O.MemoryOrderApi) -> None:
    client = O.OrderClient(O.RequestsTransport(
        O.ApiConfig().with_base_url("http://testserver/api"),
        session=TestClient(O.create_app(api, token=TOKEN)),
    ))

    e = err(await client.check_status("1"))

    assert e.is_auth
    assert e.message == "Phiên đăng nhập đã hết hạn"


async def test_malformed_request_is_validation_error(api: O.MemoryOrderApi) -> None:
    test_client = TestClient(O.create_app(api))
    transport = O.RequestsTransport(
        O.ApiConfig().with_base_url("http://testserver/api"),
        session=test_client,
    )

    response = await transport.request("POST", "/orders", {"type": "lease"})
    result = O.decode(response, lambda data: data)

    assert err(result).kind is O.OrderErrorKind.VALIDATION


async def test_session_over_http(http_client: O.OrderClient, api: O.MemoryOrderApi, clock: ManualClock) -> None:
    session = PaymentSession(http_client, Subject(O.OrderKind.RENT, "42"), clock=clock, sleep=never)
    await session.open()
    order = ok(await session.confirm(O.PaymentMethod.QR, rental_start=RENT_START, rental_end=RENT_END))

    api.approve(order.id)
    for _ in range(200):
        if session.step is Step.SUCCESS:
            break
        await asyncio.sleep(0.01)

    assert session.step is Step.SUCCESS
    await session.close()
