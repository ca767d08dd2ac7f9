"""
Ticker — named, cancellable periodic task.

A tick never overlaps the previous one: the next sleep starts only after the
callback returned, so a slow status poll delays the next poll instead of
piling up behind it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

type Sleep = Callable[[float], Awaitable[None]]


class Ticker:
    """
    Example:
        ticker = Ticker("poll", 5.0, session.poll)
        ticker.start()
        ...
        ticker.stop()
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: Callable[[], Awaitable[None]],
        *,
        immediate: bool = True,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.name = name
        self.interval = interval
        self._callback = callback
        self._immediate = immediate
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._stopped and not self._task.done()

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError(f"Ticker {self.name} already started")
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"pianopay-{self.name}"
        )

    def stop(self) -> None:
        """
        Stop ticking.

        Called from inside its own callback, the ticker finishes the current
        callback and exits instead of cancelling itself mid-flight.
        """
        self._stopped = True
        task = self._task
        if task is None or task.done():
            return
        if task is not asyncio.current_task():
            task.cancel()

    async def wait_stopped(self) -> None:
        if self._task is None:
            return
        await asyncio.gather(self._task, return_exceptions=True)

    async def _run(self) -> None:
        if self._immediate:
            await self._fire()
        while not self._stopped:
            await self._sleep(self.interval)
            if self._stopped:
                break
            await self._fire()

    async def _fire(self) -> None:
        try:
            await self._callback()
        except Exception:
            logger.exception("ticker %s callback failed", self.name)


__all__ = ("Ticker", "Sleep")
