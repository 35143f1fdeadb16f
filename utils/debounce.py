"""
Asyncio debouncer
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Delay a callback until `trigger` has not been called for `delay` seconds.

    Every trigger cancels the pending timer and starts a new one; `cancel`
    drops a pending call (used on teardown). Once the quiet window has passed
    the callback runs to completion and is no longer cancelled.
    """

    def __init__(self, delay: float, callback: Callable[[Any], Awaitable[Any]]):
        self.delay = delay
        self.callback = callback
        self._timer: Optional[asyncio.Task] = None
        self._running: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def trigger(self, value: Any) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._run(value))

    async def _run(self, value: Any) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        self._running = asyncio.current_task()
        try:
            await self.callback(value)
        except Exception:
            logger.exception("Debounced callback failed")

    def cancel(self) -> None:
        if self.pending:
            self._timer.cancel()
        self._timer = None

    async def wait(self) -> None:
        """Wait for the pending or running call, if any, to finish"""
        task = self._timer or self._running
        if task is None or task.done():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
