"""KeyStream — cooperative, order-preserving iteration over a store's keys."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable
from typing import Any

# Returned by a stream's lookup when the key is no longer stored.
MISSING: Any = object()


class KeyStream:
    """Async iterator of ``(key, value)`` pairs over a snapshot of the key set.

    The key list is fixed when the stream is created: keys added later are
    not visited.  Each value is looked up when its turn comes, so a key
    removed in the meantime is skipped.  The stream hands control back to
    the event loop before every step, which keeps a large store from
    monopolising the loop.

    Two ways to consume it::

        async for key, value in stream:
            ...

        await stream.consume(on_data, on_end)

    Parameters:
        keys:    Keys to visit, in order.
        lookup:  Returns a copy of the current value for a key, or
                 :data:`MISSING`.
        pattern: Optional regular expression; only keys it matches
                 (``re.search``) are emitted.
    """

    def __init__(
        self,
        keys: list[str],
        lookup: Callable[[str], Any],
        pattern: str | re.Pattern[str] | None = None,
    ) -> None:
        self._keys = keys
        self._lookup = lookup
        self._pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self._index = 0
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        """End the stream; no further entries are emitted."""
        self._stopped = True

    def __aiter__(self) -> KeyStream:
        return self

    async def __anext__(self) -> tuple[str, Any]:
        while not self._stopped and self._index < len(self._keys):
            await asyncio.sleep(0)
            if self._stopped:
                break
            key = self._keys[self._index]
            self._index += 1
            if self._pattern is not None and not self._pattern.search(key):
                continue
            value = self._lookup(key)
            if value is MISSING:
                continue
            return key, value
        self._stopped = True
        raise StopAsyncIteration

    async def consume(
        self,
        on_data: Callable[[str, Any], Any],
        on_end: Callable[[], Any] | None = None,
    ) -> None:
        """Feed every entry to *on_data*, then call *on_end* once.

        Returning ``False`` from *on_data* stops the stream early; *on_end*
        still fires.  Either handler may be a coroutine function.
        """
        async for key, value in self:
            result = on_data(key, value)
            if asyncio.iscoroutine(result):
                result = await result
            if result is False:
                self.stop()
        if on_end is not None:
            result = on_end()
            if asyncio.iscoroutine(result):
                await result
