"""DebouncedTask -- trailing-edge debounce for an async callback.

Each schedule() call restarts the timer, so a burst of calls inside the
window produces a single invocation once the window has been quiet. Fired
callbacks run as asyncio tasks; cancel() only stops the pending timer, never
an invocation that has already started.
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger(__name__)


class DebouncedTask:
    def __init__(
        self,
        delay: float,
        callback: Callable[[], Awaitable[None]],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.delay = delay
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired yet."""
        return self._handle is not None

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def schedule(self) -> None:
        """(Re)start the debounce window."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> bool:
        """Disarm the pending timer. Returns True if one was armed."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def _fire(self) -> None:
        self._handle = None
        task = self._loop.create_task(self._callback())
        self._in_flight.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("debounced_callback_failed", error=str(task.exception()))

    async def wait_idle(self) -> None:
        """Wait until every invocation that has already fired has finished."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
