"""Shared test helpers."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest
from kungfu import Result, Ok, Error

from pianopay import pricing as P
from pianopay.orders import CreateOrderInput, OrderKind

RATES: dict[str, int] = {"42": 1_000_000, "7": 15_000}
COURSE_PRICES: dict[str, int] = {"c1": 2_500_000}


def ok[T](result: Result[T, object]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"expected Ok, got Error({e!r})")


def err[E](result: Result[object, E]) -> E:
    match result:
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")
        case Error(e):
            return e


def catalog_price(data: CreateOrderInput) -> int:
    """Backend-side pricing for the memory API."""
    match data.kind:
        case OrderKind.RENT:
            assert data.rental_start is not None and data.rental_end is not None
            days = P.rental_days(data.rental_start, data.rental_end)
            return P.rental_price(RATES[data.subject_id], days)
        case OrderKind.BUY:
            return P.buy_price(RATES[data.subject_id])
        case OrderKind.COURSE:
            return COURSE_PRICES[data.subject_id]


async def settle(rounds: int = 10) -> None:
    """Let background ticker tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def never(_: float) -> None:
    """Sleep that never wakes: tickers fire once, then wait forever."""
    await asyncio.Event().wait()


RENT_START = date(2026, 1, 1)
RENT_END = date(2026, 1, 6)
