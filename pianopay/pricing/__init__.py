"""
Pricing — pure buy / rental / course price calculation.

    from pianopay import pricing as P

    P.rental_price(1_000_000, 5)   # 36_000_000
    P.buy_price(1_000_000)         # 1_000_000_000
"""

from __future__ import annotations

from pianopay.pricing._rules import (
    HOURS_PER_DAY,
    BUY_MULTIPLIER,
    DISCOUNT_TIERS,
    InvalidDuration,
    discount_percent,
    discount_factor,
    rental_price,
    buy_price,
    rental_days,
    Quote,
    quote,
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
