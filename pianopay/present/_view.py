"""
View — display content for a payment session snapshot.

Pure mapping from SessionSnapshot to what the payment dialog shows. Nothing
here decides a transition; actions are only listed as enabled or not.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pianopay.orders import OrderKind, PaymentMethod
from pianopay.session import DEFAULT_WINDOW_SECONDS, SessionSnapshot, Step


# ═══════════════════════════════════════════════════════════════════════════════
# Formatting
# ═══════════════════════════════════════════════════════════════════════════════


def format_countdown(seconds: int) -> str:
    """
    MM:SS, minutes not capped at 59.

    Example:
        format_countdown(3599)  # "59:59"
    """
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_vnd(amount: int) -> str:
    """
    Vietnamese dong with dot grouping.

    Example:
        format_vnd(36_000_000)  # "36.000.000 ₫"
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{abs(amount):,} ₫".replace(",", ".")


def progress_fraction(remaining: int, window: int) -> float:
    """Share of the payment window left, clamped to [0, 1]."""
    if window <= 0:
        return 0.0
    return min(1.0, max(0.0, remaining / window))


# ═══════════════════════════════════════════════════════════════════════════════
# View model
# ═══════════════════════════════════════════════════════════════════════════════


class Action(Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    RESET = "reset"
    CLOSE = "close"


@dataclass(frozen=True, slots=True)
class ActionView:
    action: Action
    label: str
    enabled: bool = True


@dataclass(frozen=True, slots=True)
class BankField:
    """One copyable row of the transfer instructions."""

    key: str
    label: str
    display: str
    copy_value: str
    highlight: bool = False


@dataclass(frozen=True, slots=True)
class View:
    step: Step
    title: str
    summary: tuple[tuple[str, str], ...] = ()
    message: str | None = None
    countdown: str | None = None
    progress: float | None = None
    qr_url: str | None = None
    bank_fields: tuple[BankField, ...] = ()
    notice: str | None = None
    banner: str | None = None
    status_line: str | None = None
    error: str | None = None
    actions: tuple[ActionView, ...] = ()

    def action(self, action: Action) -> ActionView | None:
        for view in self.actions:
            if view.action is action:
                return view
        return None

    def enabled(self, action: Action) -> bool:
        view = self.action(action)
        return view is not None and view.enabled


# ═══════════════════════════════════════════════════════════════════════════════
# Texts
# ═══════════════════════════════════════════════════════════════════════════════

TITLES: dict[Step, str] = {
    Step.CLOSED: "",
    Step.SELECT: "Chọn phương thức thanh toán",
    Step.QR: "Thanh toán chuyển khoản",
    Step.SUCCESS: "Đặt hàng thành công!",
    Step.EXPIRED: "Hết thời gian thanh toán",
    Step.CANCELLED: "Đã hủy đơn hàng",
}

METHOD_LABELS: dict[PaymentMethod, str] = {
    PaymentMethod.COD: "Thanh toán khi nhận hàng (COD)",
    PaymentMethod.QR: "Chuyển khoản (VietQR)",
}

KIND_LABELS: dict[OrderKind, str] = {
    OrderKind.BUY: "Mua",
    OrderKind.RENT: "Thuê",
    OrderKind.COURSE: "Khóa học",
}

AUTH_BANNER = (
    "Phiên đăng nhập đã hết hạn. Nếu bạn đã chuyển khoản thành công, đơn hàng "
    "vẫn sẽ được xử lý. Vui lòng đăng nhập lại để kiểm tra trạng thái đơn hàng."
)
UNRELIABLE_STATUS = "Không thể kiểm tra trạng thái tự động"
WAITING_STATUS = "Đang chờ thanh toán..."

_CLOSE = ActionView(Action.CLOSE, "Đóng")
_RESET = ActionView(Action.RESET, "Đặt lại")


# ═══════════════════════════════════════════════════════════════════════════════
# Render
# ═══════════════════════════════════════════════════════════════════════════════


def render(snapshot: SessionSnapshot) -> View:
    """Display content for one snapshot."""
    error = snapshot.last_error.message if snapshot.last_error is not None else None

    match snapshot.step:
        case Step.CLOSED:
            return View(step=Step.CLOSED, title="")
        case Step.SELECT:
            return _select(snapshot, error)
        case Step.QR:
            return _qr(snapshot, error)
        case Step.SUCCESS:
            return _success(snapshot)
        case Step.EXPIRED:
            return View(
                step=Step.EXPIRED,
                title=TITLES[Step.EXPIRED],
                message=f"Đơn hàng đã bị hủy do quá thời gian thanh toán {_window_minutes(snapshot)} phút.",
                actions=(_CLOSE, _RESET),
            )
        case Step.CANCELLED:
            return View(
                step=Step.CANCELLED,
                title=TITLES[Step.CANCELLED],
                message="Đơn hàng của bạn đã được hủy thành công.",
                actions=(_CLOSE, _RESET),
            )


def _window_minutes(snapshot: SessionSnapshot) -> int:
    seconds = snapshot.window_seconds or DEFAULT_WINDOW_SECONDS
    return max(1, seconds // 60)


def _select(snapshot: SessionSnapshot, error: str | None) -> View:
    subject = snapshot.subject
    summary: list[tuple[str, str]] = []
    if subject.name:
        summary.append(("Đơn hàng", subject.name))
    summary.append(("Loại", KIND_LABELS[subject.kind]))
    summary.append(("Phương thức", METHOD_LABELS[snapshot.payment_method]))
    if snapshot.total is not None:
        summary.append(("Tổng cộng", format_vnd(snapshot.total)))

    return View(
        step=Step.SELECT,
        title=TITLES[Step.SELECT],
        summary=tuple(summary),
        error=error,
        actions=(
            ActionView(
                Action.CONFIRM,
                "Đang xử lý..." if snapshot.submitting else "Xác nhận đặt hàng",
                enabled=not snapshot.submitting,
            ),
            _CLOSE,
        ),
    )


def _qr(snapshot: SessionSnapshot, error: str | None) -> View:
    order = snapshot.order
    fields = bank_fields(snapshot)
    description = order.bank_info.description if order and order.bank_info else None

    return View(
        step=Step.QR,
        title=TITLES[Step.QR],
        countdown=f"Thời gian còn lại: {format_countdown(snapshot.remaining_seconds)}",
        progress=progress_fraction(snapshot.remaining_seconds, snapshot.window_seconds),
        qr_url=order.qr_url if order else None,
        bank_fields=fields,
        notice=(
            f"Lưu ý: Vui lòng nhập chính xác nội dung chuyển khoản {description} "
            "để hệ thống tự động xác nhận thanh toán."
            if description
            else None
        ),
        banner=AUTH_BANNER if snapshot.auth_error else None,
        status_line=UNRELIABLE_STATUS if snapshot.polling_unreliable else WAITING_STATUS,
        error=error,
        actions=(
            ActionView(
                Action.CANCEL,
                "Đang hủy..." if snapshot.cancelling else "Hủy đơn hàng",
                enabled=not snapshot.cancelling,
            ),
            _CLOSE,
        ),
    )


def _success(snapshot: SessionSnapshot) -> View:
    paid_by_qr = snapshot.payment_method is PaymentMethod.QR
    order = snapshot.order
    return View(
        step=Step.SUCCESS,
        title=TITLES[Step.SUCCESS],
        summary=(("Mã đơn hàng", f"#{order.id}"),) if order is not None else (),
        message=(
            "Thanh toán thành công! Chúng tôi đã nhận được thanh toán và sẽ xử lý "
            "đơn hàng của bạn sớm nhất."
            if paid_by_qr
            else "Đơn hàng của bạn đang chờ xét duyệt. Chúng tôi sẽ liên hệ sớm nhất!"
        ),
        actions=(_CLOSE,),
    )


def bank_fields(snapshot: SessionSnapshot) -> tuple[BankField, ...]:
    """Transfer instruction rows; empty when the order carries no bank info."""
    order = snapshot.order
    if order is None or order.bank_info is None:
        return ()
    info = order.bank_info
    return (
        BankField("bank", "Ngân hàng", info.bank_name, info.bank_name),
        BankField("account", "Số tài khoản", info.account_number, info.account_number),
        BankField("amount", "Số tiền", format_vnd(info.amount), str(info.amount)),
        BankField("description", "Nội dung CK", info.description, info.description, highlight=True),
    )


__all__ = (
    "format_countdown",
    "format_vnd",
    "progress_fraction",
    "Action",
    "ActionView",
    "BankField",
    "View",
    "TITLES",
    "METHOD_LABELS",
    "KIND_LABELS",
    "AUTH_BANNER",
    "UNRELIABLE_STATUS",
    "WAITING_STATUS",
    "render",
    "bank_fields",
)
