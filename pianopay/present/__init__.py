"""
Present — display mapping for payment session snapshots.

    from pianopay import present as V

    session.subscribe(lambda snap: draw(V.render(snap)))

    view = V.render(session.snapshot)
    view.countdown            # "Thời gian còn lại: 59:59"
    view.enabled(V.Action.CANCEL)
    await V.copy_field(clipboard, view.bank_fields[3])
"""

from __future__ import annotations

from pianopay.present._view import (
    format_countdown,
    format_vnd,
    progress_fraction,
    Action,
    ActionView,
    BankField,
    View,
    TITLES,
    METHOD_LABELS,
    KIND_LABELS,
    AUTH_BANNER,
    UNRELIABLE_STATUS,
    WAITING_STATUS,
    render,
    bank_fields,
)
from pianopay.present._clipboard import Clipboard, MemoryClipboard, copy_field

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
    "Clipboard",
    "MemoryClipboard",
    "copy_field",
)
