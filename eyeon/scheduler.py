"""Repeating timers keyed by region id.

The dashboard re-runs its initialisation on every resize and manual
refresh; the registry is what keeps that from stacking a second timer on a
region that already has one.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], "Awaitable[Any] | Any"]
FailureHook = Callable[[str, BaseException], None]


async def _repeat(interval: float, callback: TimerCallback, delay: float) -> None:
    """Call *callback* after *delay*, then every *interval* seconds.

    Ticks are awaited one at a time. A tick that overruns the interval
    pushes the next one a full interval past its end; missed slots are
    dropped, never fired back to back.
    """
    loop = asyncio.get_running_loop()
    await asyncio.sleep(delay)
    next_at = loop.time()
    while True:
        result = callback()
        if inspect.isawaitable(result):
            await result
        next_at += interval
        now = loop.time()
        if next_at < now:
            next_at = now + interval
        await asyncio.sleep(max(0.0, next_at - loop.time()))


class TimerRegistry:
    """At most one live repeating task per timer id."""

    def __init__(self, on_failure: FailureHook | None = None) -> None:
        self._timers: dict[str, asyncio.Task[None]] = {}
        self.on_failure = on_failure

    def __contains__(self, timer_id: object) -> bool:
        task = self._timers.get(timer_id)  # type: ignore[arg-type]
        return task is not None and not task.done()

    def __len__(self) -> int:
        return sum(1 for task in self._timers.values() if not task.done())

    def register_if_absent(
        self,
        timer_id: str,
        interval: float,
        callback: TimerCallback,
        delay: float = 0.0,
    ) -> bool:
        """Start a timer for *timer_id* unless one is already running.

        Returns:
            True if a new timer was created.
        """
        if timer_id in self:
            return False
        task = asyncio.ensure_future(_repeat(interval, callback, delay))
        task.add_done_callback(lambda t: self._finished(timer_id, t))
        self._timers[timer_id] = task
        logger.debug("timer %s registered (every %.3fs)", timer_id, interval)
        return True

    def _finished(self, timer_id: str, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error("timer %s stopped", timer_id, exc_info=exc)
        if self.on_failure is not None:
            self.on_failure(timer_id, exc)

    def cancel(self, timer_id: str) -> None:
        task = self._timers.pop(timer_id, None)
        if task is not None:
            task.cancel()

    async def cancel_all(self) -> None:
        tasks = list(self._timers.values())
        self._timers.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
