from __future__ import annotations

from datetime import date, datetime

import pytest

from pianopay import pricing as P
from pianopay.orders import OrderKind


@pytest.mark.parametrize(
    ("days", "expected"),
    [
        (1, 800_000),
        (2, 1_600_000),
        (3, 2_160_000),
        (7, 5_040_000),
        (8, 5_440_000),
        (30, 20_400_000),
    ],
)
def test_rental_price_tiers(days: int, expected: int) -> None:
    assert P.rental_price(100_000, days) == expected


def test_rental_price_is_deterministic() -> None:
    results = {P.rental_price(123_457, days) for days in [5] * 20}
    assert results == {P.rental_price(123_457, 5)}


@pytest.mark.parametrize(
    ("days", "factor"),
    [(1, 1.0), (2, 1.0), (3, 0.9), (7, 0.9), (8, 0.85), (365, 0.85)],
)
def test_discount_boundaries(days: int, factor: float) -> None:
    assert P.discount_factor(days) == pytest.approx(factor)


def test_rental_price_rounds_half_up() -> None:
    # 1.0625 * 8 = 8.5
    assert P.rental_price(1.0625, 1) == 9
    # 1.0625 * 8 * 3 * 0.9 = 22.95
    assert P.rental_price(1.0625, 3) == 23


@pytest.mark.parametrize("days", [0, -1, -30])
def test_rental_price_rejects_short_durations(days: int) -> None:
    with pytest.raises(P.InvalidDuration) as exc:
        P.rental_price(100_000, days)
    assert exc.value.days == days
    assert isinstance(exc.value, ValueError)


def test_buy_price() -> None:
    assert P.buy_price(15_000) == 15_000_000


def test_rental_days_counts_whole_days() -> None:
    assert P.rental_days(date(2026, 1, 1), date(2026, 1, 6)) == 5


def test_rental_days_rounds_partial_days_up() -> None:
    start = datetime(2026, 1, 1, 9, 0)
    assert P.rental_days(start, datetime(2026, 1, 2, 10, 0)) == 2
    assert P.rental_days(start, datetime(2026, 1, 1, 10, 0)) == 1


def test_rental_days_rejects_empty_range() -> None:
    with pytest.raises(P.InvalidDuration):
        P.rental_days(date(2026, 1, 6), date(2026, 1, 6))
    with pytest.raises(P.InvalidDuration):
        P.rental_days(date(2026, 1, 6), date(2026, 1, 1))


def test_rent_quote() -> None:
    q = P.quote(OrderKind.RENT, 1_000_000, date(2026, 1, 1), date(2026, 1, 6))
    assert q.days == 5
    assert q.subtotal == 40_000_000
    assert q.discount_percent == 10
    assert q.total == 36_000_000


def test_buy_and_course_quotes() -> None:
    assert P.quote(OrderKind.BUY, 15_000).total == 15_000_000
    course = P.quote(OrderKind.COURSE, listed_price=2_500_000)
    assert course.total == 2_500_000
    assert course.discount_percent == 0


def test_quote_requires_inputs() -> None:
    with pytest.raises(ValueError):
        P.quote(OrderKind.RENT, 1_000_000)
    with pytest.raises(ValueError):
        P.quote(OrderKind.COURSE)
