"""Timer-driven auto-advance for demo carousels.

A carousel advances one slide every ``interval`` seconds until it reaches
the last slide (or wraps around when ``loop=True``).  The pending timer is
an asyncio task: ``start()`` creates it, ``stop()`` cancels it, and any
manual navigation restarts the countdown so a stale tick can never move a
carousel the user has already moved.

Use it as ``async with AutoAdvance(...)`` to guarantee the task is cancelled
on every exit path.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

StepCallback = Callable[[int], object]  # may return an awaitable


class AutoAdvance:
    def __init__(
        self,
        on_step: StepCallback,
        interval: float,
        *,
        steps: int,
        loop: bool = False,
    ) -> None:
        if steps < 1:
            raise ValueError("steps must be at least 1")
        self.on_step = on_step
        self.interval = interval
        self.steps = steps
        self.loop = loop
        self.index = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            logger.debug("Auto-advance already running")
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass  # expected

    async def go_to(self, index: int) -> None:
        """Jump to *index* and restart the countdown if running."""
        if not 0 <= index < self.steps:
            logger.debug("Ignoring jump to slide %d of %d", index, self.steps)
            return
        await self._restart(index)

    async def reset(self) -> None:
        await self._restart(0)

    async def _restart(self, index: int) -> None:
        was_running = self.is_running
        await self.stop()
        self.index = index
        if was_running:
            await self.start()

    def _at_end(self) -> bool:
        return self.index >= self.steps - 1

    async def _run(self) -> None:
        while True:
            if self._at_end() and not self.loop:
                return
            await asyncio.sleep(self.interval)
            self.index = 0 if self._at_end() else self.index + 1
            await self._emit()

    async def _emit(self) -> None:
        try:
            result = self.on_step(self.index)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.error("Auto-advance callback failed at slide %d: %s", self.index, exc)

    async def __aenter__(self) -> AutoAdvance:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.stop()
        return False
