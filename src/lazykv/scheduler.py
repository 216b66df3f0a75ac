"""FlushScheduler — coalesces bursts of mutations into a single disk write."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class FlushScheduler:
    """Write-behind timer with at most one pending flush.

    The first :meth:`arm` after a flush starts a timer of ``window``
    seconds.  Further calls before it fires do nothing, so a steady stream
    of mutations is still written at least once per window instead of being
    postponed forever.

    Flushes are serialized by a lock.  Each flush takes the waiters that
    were registered before it started and resolves them, in registration
    order, once the write has completed.

    Parameters:
        window:   Quiescence window in seconds.
        write:    Coroutine function that encodes and persists the mapping.
                  It must capture the mapping before its first ``await``.
        on_error: Receives failures of timer-driven flushes that nobody is
                  waiting on.
        on_flushed: Called after a successful write, once its waiters are
                  resolved.
    """

    def __init__(
        self,
        window: float,
        write: Callable[[], Awaitable[None]],
        on_error: Callable[[Exception], None],
        on_flushed: Callable[[], None] | None = None,
    ) -> None:
        self.window = window
        self._write = write
        self._on_error = on_error
        self._on_flushed = on_flushed
        self._pending = False
        self._timer: asyncio.TimerHandle | None = None
        self._waiters: list[asyncio.Future[None]] = []
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """``True`` while a flush timer is armed."""
        return self._pending

    def arm(self) -> None:
        """Start the flush timer unless one is already pending."""
        if self._pending:
            return
        self._pending = True
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.window, self._fire)

    def cancel(self) -> None:
        """Disarm the pending timer, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = False

    def add_waiter(self) -> asyncio.Future[None]:
        """Return a future resolved by the next flush to complete."""
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        return waiter

    async def flush(self) -> None:
        """Flush now, cancelling the timer.  Raises the write failure."""
        await self._flush(background=False)

    async def wait_idle(self) -> None:
        """Wait for timer-driven flushes that are already running."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _fire(self) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._flush(background=True))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _flush(self, *, background: bool) -> None:
        async with self._lock:
            self.cancel()
            waiters, self._waiters = self._waiters, []
            try:
                await self._write()
            except Exception as exc:
                logger.debug("Flush failed with %d waiter(s): %s", len(waiters), exc)
                for waiter in waiters:
                    if not waiter.done():
                        waiter.set_exception(exc)
                if not background:
                    raise
                if not waiters:
                    self._on_error(exc)
                return
            for waiter in waiters:
                if not waiter.done():
                    waiter.set_result(None)
            if self._on_flushed is not None:
                self._on_flushed()
