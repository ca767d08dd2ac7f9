"""
Input validation — runs before any network call.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from pianopay.orders._errors import OrderError, OrderErrors
from pianopay.orders._types import CreateOrderInput, OrderKind


def validate_create(data: CreateOrderInput) -> Result[CreateOrderInput, OrderError]:
    """
    Rentals need both dates and a range that ends after it starts.

    The accepted input has its rental bounds truncated to calendar days, so
    datetimes from a picker compare and travel the way the backend books them.
    """
    if not data.subject_id:
        return Error(OrderErrors.validation("Thiếu mã sản phẩm"))

    if data.kind is not OrderKind.RENT:
        return Ok(data)

    data = data.by_day()
    if data.rental_start is None or data.rental_end is None:
        return Error(OrderErrors.validation("Vui lòng chọn ngày bắt đầu và kết thúc thuê"))

    if data.rental_end <= data.rental_start:
        return Error(OrderErrors.validation("Ngày kết thúc phải sau ngày bắt đầu"))

    return Ok(data)


__all__ = ("validate_create",)
