"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine

from pianopay import pricing as P
from pianopay.orders import CreateOrderInput, OrderKind


# Catalog — hourly rates and course prices the backend would hold
RATES: dict[str, int] = {"42": 1_000_000, "7": 15_000}
COURSES: dict[str, int] = {"c1": 2_500_000}


def catalog_price(data: CreateOrderInput) -> int:
    match data.kind:
        case OrderKind.RENT:
            days = P.rental_days(data.rental_start, data.rental_end)
            return P.rental_price(RATES[data.subject_id], days)
        case OrderKind.BUY:
            return P.buy_price(RATES[data.subject_id])
        case OrderKind.COURSE:
            return COURSES[data.subject_id]


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    logging.basicConfig(level=logging.WARNING, format="  [%(name)s] %(message)s")
    asyncio.run(main())
