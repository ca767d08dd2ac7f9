"""
Pricing rules — pure, deterministic price calculation.

The same functions back the live preview on the selection screen and the
cross-check against the server-confirmed total, so nothing here performs I/O.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from pianopay.orders._types import OrderKind

# ═══════════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════════

HOURS_PER_DAY = 8
"""Billable hours per rental day."""

BUY_MULTIPLIER = 1000
"""Purchase price is this many hours of the hourly rate."""

DISCOUNT_TIERS: tuple[tuple[int, int], ...] = (
    (8, 15),
    (3, 10),
)
"""(minimum days, discount percent), longest tier first."""

_DAY = timedelta(days=1)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class InvalidDuration(ValueError):
    """Rental duration below one day."""

    def __init__(self, days: int) -> None:
        super().__init__(f"Rental duration must be at least 1 day, got {days}")
        self.days = days


# ═══════════════════════════════════════════════════════════════════════════════
# Rules
# ═══════════════════════════════════════════════════════════════════════════════


def discount_percent(days: int) -> int:
    """Discount percent applied to a rental of `days` days."""
    for min_days, percent in DISCOUNT_TIERS:
        if days >= min_days:
            return percent
    return 0


def discount_factor(days: int) -> float:
    """0.85 from 8 days, 0.90 from 3 days, otherwise 1.0."""
    return (100 - discount_percent(days)) / 100


def rental_price(base_rate: float, days: int) -> int:
    """
    Total rental price, rounded half up to a whole amount.

    Example:
        rental_price(100_000, 2)  # 1_600_000, no discount
        rental_price(100_000, 3)  # 2_160_000, 10% off
        rental_price(100_000, 8)  # 5_440_000, 15% off
    """
    if days < 1:
        raise InvalidDuration(days)

    subtotal = Decimal(str(base_rate)) * HOURS_PER_DAY * days
    return _whole(subtotal * (100 - discount_percent(days)) / 100)


def buy_price(base_rate: float) -> int:
    """Purchase price: hourly rate times BUY_MULTIPLIER."""
    return _whole(Decimal(str(base_rate)) * BUY_MULTIPLIER)


def rental_days(start: date | datetime, end: date | datetime) -> int:
    """
    Whole rental days between start and end, rounded up.

    A partial day counts as a full one. Raises InvalidDuration when end
    is not after start.
    """
    elapsed = _as_datetime(end) - _as_datetime(start)
    days = math.ceil(elapsed / _DAY)
    if days < 1:
        raise InvalidDuration(days)
    return days


def _whole(amount: Decimal) -> int:
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


# ═══════════════════════════════════════════════════════════════════════════════
# Quote — Live Preview
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Quote:
    """Price preview shown before the order is confirmed."""

    kind: OrderKind
    days: int | None
    subtotal: int
    discount_percent: int
    total: int


def quote(
    kind: OrderKind,
    base_rate: float = 0,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
    listed_price: int | None = None,
) -> Quote:
    """
    Build a price preview for the given order kind.

    Rentals need both dates, courses need the listed price.

    Example:
        P.quote(OrderKind.RENT, 1_000_000, date(2026, 1, 1), date(2026, 1, 6))
        # Quote(kind=RENT, days=5, subtotal=40_000_000, discount_percent=10,
        #       total=36_000_000)
    """
    match kind:
        case OrderKind.RENT:
            if start is None or end is None:
                raise ValueError("Rental quote requires start and end")
            days = rental_days(start, end)
            subtotal = _whole(Decimal(str(base_rate)) * HOURS_PER_DAY * days)
            return Quote(
                kind=kind,
                days=days,
                subtotal=subtotal,
                discount_percent=discount_percent(days),
                total=rental_price(base_rate, days),
            )
        case OrderKind.BUY:
            total = buy_price(base_rate)
            return Quote(kind=kind, days=None, subtotal=total, discount_percent=0, total=total)
        case OrderKind.COURSE:
            if listed_price is None:
                raise ValueError("Course quote requires listed_price")
            return Quote(
                kind=kind,
                days=None,
                subtotal=listed_price,
                discount_percent=0,
                total=listed_price,
            )


__all__ = (
    "HOURS_PER_DAY",
    "BUY_MULTIPLIER",
    "DISCOUNT_TIERS",
    "InvalidDuration",
    "discount_percent",
    "discount_factor",
    "rental_price",
    "buy_price",
    "rental_days",
    "Quote",
    "quote",
)
