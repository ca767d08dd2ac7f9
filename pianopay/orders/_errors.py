"""
Order errors — typed failure kinds for the order API.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class OrderErrorKind(Enum):
    """
    Kinds of order API errors.

    VALIDATION:    Malformed input, never retried.
    AUTH:          Missing or expired credentials.
    TRANSIENT:     Network failure, timeout or 5xx. Retry on next tick.
    INVALID_STATE: Operation not allowed for the order's current status.
    NOT_FOUND:     Order no longer exists. Terminal.
    """

    VALIDATION = auto()
    AUTH = auto()
    TRANSIENT = auto()
    INVALID_STATE = auto()
    NOT_FOUND = auto()


@dataclass(frozen=True, slots=True)
class OrderError:
    """Order operation error."""

    kind: OrderErrorKind
    message: str
    status_code: int | None = None

    @property
    def is_auth(self) -> bool:
        return self.kind is OrderErrorKind.AUTH

    @property
    def is_transient(self) -> bool:
        return self.kind is OrderErrorKind.TRANSIENT

    @property
    def is_terminal(self) -> bool:
        return self.kind is OrderErrorKind.NOT_FOUND


class OrderErrors:
    @staticmethod
    def validation(msg: str) -> OrderError:
        return OrderError(OrderErrorKind.VALIDATION, msg)

    @staticmethod
    def auth(msg: str = "Phiên đăng nhập đã hết hạn", status_code: int | None = 401) -> OrderError:
        return OrderError(OrderErrorKind.AUTH, msg, status_code)

    @staticmethod
    def transient(msg: str, status_code: int | None = None) -> OrderError:
        return OrderError(OrderErrorKind.TRANSIENT, msg, status_code)

    @staticmethod
    def invalid_state(msg: str, status_code: int | None = None) -> OrderError:
        return OrderError(OrderErrorKind.INVALID_STATE, msg, status_code)

    @staticmethod
    def not_found(msg: str, status_code: int | None = 404) -> OrderError:
        return OrderError(OrderErrorKind.NOT_FOUND, msg, status_code)


# ═══════════════════════════════════════════════════════════════════════════════
# Classification — structured code first, HTTP status second
# ═══════════════════════════════════════════════════════════════════════════════

_CODES: dict[str, OrderErrorKind] = {
    "VALIDATION": OrderErrorKind.VALIDATION,
    "VALIDATION_ERROR": OrderErrorKind.VALIDATION,
    "AUTH": OrderErrorKind.AUTH,
    "UNAUTHORIZED": OrderErrorKind.AUTH,
    "TOKEN_EXPIRED": OrderErrorKind.AUTH,
    "INVALID_STATE": OrderErrorKind.INVALID_STATE,
    "NOT_PENDING": OrderErrorKind.INVALID_STATE,
    "NOT_FOUND": OrderErrorKind.NOT_FOUND,
    "ORDER_NOT_FOUND": OrderErrorKind.NOT_FOUND,
}


def classify(
    status_code: int,
    code: str | None = None,
    *,
    bad_request: OrderErrorKind = OrderErrorKind.VALIDATION,
) -> OrderErrorKind:
    """
    Map a failed response to an error kind.

    `bad_request` is the kind a plain 400 maps to; cancel uses INVALID_STATE
    since the only thing it validates is the order status.
    """
    if code is not None and code.upper() in _CODES:
        return _CODES[code.upper()]

    if status_code in (401, 403):
        return OrderErrorKind.AUTH
    if status_code == 404:
        return OrderErrorKind.NOT_FOUND
    if status_code == 409:
        return OrderErrorKind.INVALID_STATE
    if status_code >= 500 or status_code in (408, 429):
        return OrderErrorKind.TRANSIENT
    if status_code == 400:
        return bad_request
    return OrderErrorKind.VALIDATION


__all__ = (
    "OrderErrorKind",
    "OrderError",
    "OrderErrors",
    "classify",
)
