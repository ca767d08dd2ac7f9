"""
Clipboard — best-effort copy of transfer details.
"""

from __future__ import annotations

import logging
from typing import Protocol

from combinators import lift as L
from kungfu import Ok, Error

from pianopay.present._view import BankField

logger = logging.getLogger(__name__)


class Clipboard(Protocol):
    async def write_text(self, text: str) -> None: ...


class MemoryClipboard:
    """Clipboard keeping everything written to it, for tests and demos."""

    def __init__(self, *, fail: bool = False) -> None:
        self.history: list[str] = []
        self.fail = fail

    @property
    def text(self) -> str | None:
        return self.history[-1] if self.history else None

    async def write_text(self, text: str) -> None:
        if self.fail:
            raise PermissionError("Clipboard access denied")
        self.history.append(text)


async def copy_field(clipboard: Clipboard, field: BankField) -> bool:
    """
    Copy field's raw value. Returns False when the clipboard refused.

    Note: The amount copies as plain digits, not the formatted display value.
    """
    result = await L.catching_async(
        lambda: clipboard.write_text(field.copy_value),
        on_error=lambda e: f"{type(e).__name__}: {e}",
    )
    match result:
        case Ok(_):
            return True
        case Error(reason):
            logger.info("could not copy %s: %s", field.key, reason)
            return False


__all__ = ("Clipboard", "MemoryClipboard", "copy_field")
