"""Debounced background persistence."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable


class Debouncer:
    """Run an async callback once things have been quiet for ``delay`` seconds.

    Every ``schedule()`` restarts the timer, so a burst of changes leads to
    a single pass. Once the timer has fired the pass runs to completion;
    later calls start a new timer rather than interrupting it.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        self.delay = delay
        self._callback = callback
        self._timer: asyncio.Task | None = None
        self._running: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._fire_later())

    async def _fire_later(self) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        self._running = asyncio.current_task()
        try:
            await self._callback()
        finally:
            self._running = None

    def cancel(self) -> None:
        """Drop a scheduled pass that has not started yet."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def drain(self) -> None:
        """Wait for a scheduled or running pass to finish."""
        task = self._timer or self._running
        if task is not None:
            await task
