"""Store — file-backed key-value store with an in-memory mirror and write-behind."""

from __future__ import annotations

import asyncio
import logging
import os
import re
from collections import deque
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from lazykv._internal import files
from lazykv._internal.clock import Clock, SystemClock
from lazykv.codecs.base import Codec
from lazykv.codecs.registry import CodecRegistry
from lazykv.exceptions import (
    CodecError,
    IllegalStateError,
    InvalidKeyError,
    InvalidPathError,
    InvalidValueError,
    NotLoadedError,
    ParseError,
    StoreError,
)
from lazykv.options import StoreOptions
from lazykv.scheduler import FlushScheduler
from lazykv.stream import MISSING, KeyStream
from lazykv.versions import VersionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")

EVENTS = ("loaded", "saved", "error")


class StoreState(str, Enum):
    UNOPENED = "unopened"
    LOADING = "loading"
    READY = "ready"
    CLOSED = "closed"


class Store:
    """Single-file key-value store.

    Reads are served from memory.  Mutations are applied to memory
    immediately and written to disk once the quiescence window after the
    first unsaved change has elapsed, so a burst of changes costs one write.

    Lifecycle::

        UNOPENED --open()--> LOADING --load ok--> READY --close()--> CLOSED

    Operations issued while the file is still loading are queued and run,
    in call order, as soon as it is loaded.  Values are deep-copied through
    the codec on the way in and out, so callers never share state with the
    store.

    Example::

        async with Store(create_if_missing=True).open("settings.json") as store:
            await store.set("theme", "dark")
            await store.get("theme")

    Parameters:
        options:    Store configuration.  Keyword *overrides* are applied on
                    top of it (or on top of the defaults).
        codec:      Explicit codec instance; defaults to the one registered
                    for ``options.format``.
        clock:      Injectable clock for backup timestamps.
    """

    def __init__(
        self,
        options: StoreOptions | None = None,
        *,
        codec: Codec | None = None,
        clock: Clock | None = None,
        **overrides: Any,
    ) -> None:
        if options is None:
            options = StoreOptions(**overrides)
        elif overrides:
            options = StoreOptions.model_validate({**options.model_dump(), **overrides})
        self.options = options
        self._codec = codec or CodecRegistry.create(options.format)
        self._clock = clock or SystemClock()
        self._state = StoreState.UNOPENED
        self._closing = False
        self._path: Path | None = None
        self._data: dict[str, Any] | None = None
        self._versions: VersionManager | None = None
        self._load_task: asyncio.Task[None] | None = None
        self._load_error: StoreError | None = None
        self._queue: deque[tuple[Callable[[], Any], asyncio.Future[Any]]] = deque()
        self._handlers: dict[str, list[Callable[..., Any]]] = {name: [] for name in EVENTS}
        self._scheduler = FlushScheduler(
            options.quiescence_window,
            self._write,
            self._emit_error,
            on_flushed=lambda: self._emit("saved"),
        )

    # ── introspection ────────────────────────────────────────

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def codec(self) -> Codec:
        return self._codec

    @property
    def dirty(self) -> bool:
        """``True`` while unsaved changes are waiting for the flush timer."""
        return self._scheduler.pending

    @property
    def versions(self) -> VersionManager | None:
        return self._versions

    # ── events ───────────────────────────────────────────────

    def on(self, event: str, handler: Callable[..., Any]) -> Store:
        """Subscribe *handler* to ``"loaded"``, ``"saved"`` or ``"error"``.

        ``"error"`` handlers receive failures that no caller is waiting for,
        such as a timer-driven flush or backup pruning.  Without one, those
        failures are logged.
        """
        if event not in self._handlers:
            raise ValueError(f"Unknown event '{event}'. Expected one of: {', '.join(EVENTS)}")
        self._handlers[event].append(handler)
        return self

    def _emit(self, event: str, *args: Any) -> None:
        # Handler failures never reach the engine.
        for handler in list(self._handlers[event]):
            try:
                handler(*args)
            except Exception as exc:
                if event == "error":
                    logger.exception("Error handler failed in store %s", self._path)
                else:
                    self._emit_error(exc)

    def _emit_error(self, exc: Exception) -> None:
        if not self._handlers["error"]:
            logger.error("Unhandled error in store %s", self._path, exc_info=exc)
            return
        self._emit("error", exc)

    # ── lifecycle ────────────────────────────────────────────

    def open(self, path: str | os.PathLike[str]) -> Store:
        """Start loading *path* and return immediately.

        Must be called from a running event loop.  Await
        :meth:`wait_loaded` (or use ``async with``) to observe the result;
        operations issued meanwhile are queued.
        """
        if not path or not os.fspath(path):
            raise InvalidPathError(path)
        in_flight = self._state is StoreState.LOADING and self._load_error is None
        if self._state is StoreState.READY or in_flight:
            raise IllegalStateError("open", self._state.value)

        self._path = Path(path)
        self._versions = VersionManager(
            self._path,
            self.options.retained_versions,
            clock=self._clock,
            on_error=self._emit_error,
        )
        self._data = None
        self._load_error = None
        self._state = StoreState.LOADING
        logger.debug("Loading store %s", self._path)
        self._load_task = asyncio.get_running_loop().create_task(self._load(self._path))
        return self

    async def _load(self, path: Path) -> None:
        try:
            raw = await files.read_file(path, create=self.options.create_if_missing)
            try:
                data = self._codec.decode(raw)
            except CodecError as exc:
                raise ParseError(str(path), str(exc)) from exc
        except StoreError as exc:
            self._fail_load(exc)
            return

        self._data = data
        self._state = StoreState.READY
        logger.debug("Loaded %d key(s) from %s", len(data), path)
        self._replay()
        self._emit("loaded")

    def _fail_load(self, exc: StoreError) -> None:
        logger.debug("Load of %s failed: %s", self._path, exc)
        self._load_error = exc
        if not self._queue:
            self._emit_error(exc)
            return
        while self._queue:
            _, future = self._queue.popleft()
            if not future.done():
                future.set_exception(exc)

    def _replay(self) -> None:
        while self._queue:
            operation, future = self._queue.popleft()
            if future.cancelled():
                continue
            try:
                result = operation()
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

    async def wait_loaded(self) -> None:
        """Wait until the store is ready.  Raises the load failure, if any."""
        await self._call("wait_loaded", lambda: None)

    async def close(self) -> None:
        """Flush one last time, drop the in-memory data and close the store.

        The store is closed even when the final flush fails; the failure is
        raised afterwards.
        """
        if self._state is StoreState.LOADING and self._load_error is not None:
            self._state = StoreState.CLOSED
            return
        await self._call("close", lambda: None)
        self._closing = True
        try:
            await self._scheduler.flush()
        finally:
            await self._scheduler.wait_idle()
            self._data = None
            self._state = StoreState.CLOSED
            self._closing = False
            logger.debug("Closed store %s", self._path)

    async def __aenter__(self) -> Store:
        await self.wait_loaded()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._state is StoreState.READY:
            await self.close()

    # ── gating ───────────────────────────────────────────────

    def _check_usable(self, operation: str) -> None:
        if self._state in (StoreState.UNOPENED, StoreState.CLOSED) or self._closing:
            state = "closing" if self._closing else self._state.value
            raise IllegalStateError(operation, state)
        if self._load_error is not None:
            raise self._load_error

    async def _call(self, operation: str, fn: Callable[[], T]) -> T:
        """Run *fn* against the mapping now, or once the load completes."""
        self._check_usable(operation)
        if self._state is StoreState.READY:
            return fn()
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._queue.append((fn, future))
        logger.debug("Queued '%s' until %s is loaded", operation, self._path)
        return await future

    # ── helpers ──────────────────────────────────────────────

    def _check_key(self, key: Any) -> None:
        if not isinstance(key, str) or not key:
            raise InvalidKeyError(key, "key must be a non-empty string")
        try:
            self._codec.validate_key(key)
        except CodecError as exc:
            raise InvalidKeyError(key, str(exc)) from exc

    def _probe(self, key: str, value: Any) -> Any:
        """Return a round-tripped copy of *value*, or raise ``InvalidValueError``."""
        try:
            copied = self._codec.copy({key: value})
        except CodecError as exc:
            raise InvalidValueError(key, str(exc)) from exc
        if copied.get(key, MISSING) != value:
            raise InvalidValueError(key, "value does not survive a round-trip through the codec")
        return copied[key]

    def _same(self, key: str, current: Any, new: Any) -> bool:
        return self._codec.dumps({key: current}) == self._codec.dumps({key: new})

    def _lookup(self, key: str) -> Any:
        data = self._data
        if data is None or key not in data:
            return MISSING
        return self._codec.copy({key: data[key]})[key]

    def _touch(self, wait: bool) -> asyncio.Future[None] | None:
        self._scheduler.arm()
        return self._scheduler.add_waiter() if wait else None

    def _mapping(self) -> dict[str, Any]:
        if self._data is None:
            raise NotLoadedError()
        return self._data

    async def _write(self) -> None:
        data, path = self._data, self._path
        if data is None or path is None:
            return
        payload = self._codec.encode(data)
        count = len(data)
        if self._versions is not None:
            await self._versions.snapshot()
        await files.write_file(path, payload)
        logger.debug("Flushed %d key(s) to %s", count, path)

    # ── reads ────────────────────────────────────────────────

    async def get(self, key: str) -> Any:
        """Return a copy of the value stored under *key*, or ``None`` if absent."""
        self._check_key(key)

        def _get() -> Any:
            value = self._lookup(key)
            return None if value is MISSING else value

        return await self._call("get", _get)

    async def contains(self, key: str) -> bool:
        """Return ``True`` if *key* is stored, even with a ``None`` value."""
        self._check_key(key)
        return await self._call("contains", lambda: key in self._mapping())

    async def get_all(self) -> dict[str, Any]:
        """Return a deep copy of every entry."""
        return await self._call("get_all", lambda: self._codec.copy(self._mapping()))

    async def stream(self, pattern: str | re.Pattern[str] | None = None) -> KeyStream:
        """Return a :class:`KeyStream` over the keys stored right now.

        Only keys matched by *pattern* (``re.search``) are emitted.
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return await self._call(
            "stream", lambda: KeyStream(list(self._mapping()), self._lookup, regex)
        )

    # ── mutations ────────────────────────────────────────────

    async def set(self, key: str, value: Any, *, wait: bool = False) -> None:
        """Store a copy of *value* under *key*.

        With ``wait=True`` the call returns once the change is on disk and
        raises if that flush fails.  Setting a value equal to the stored one
        does not schedule a write.
        """
        self._check_key(key)
        stored = self._probe(key, value)

        def _set() -> asyncio.Future[None] | None:
            data = self._mapping()
            if key in data and self._same(key, data[key], stored):
                return None
            data[key] = stored
            return self._touch(wait)

        waiter = await self._call("set", _set)
        if waiter is not None:
            await waiter

    async def remove(self, key: str, *, wait: bool = False) -> None:
        """Delete *key*.  No error if it is absent."""
        self._check_key(key)

        def _remove() -> asyncio.Future[None] | None:
            self._mapping().pop(key, None)
            return self._touch(wait)

        waiter = await self._call("remove", _remove)
        if waiter is not None:
            await waiter

    async def remove_all(self, *, wait: bool = False) -> None:
        """Delete every key."""

        def _remove_all() -> asyncio.Future[None] | None:
            self._data = {}
            return self._touch(wait)

        waiter = await self._call("remove_all", _remove_all)
        if waiter is not None:
            await waiter

    async def save(self) -> None:
        """Write to disk now, cancelling the pending flush timer."""
        if self._state in (StoreState.UNOPENED, StoreState.CLOSED) or self._closing:
            raise IllegalStateError("save", "closing" if self._closing else self._state.value)
        if self._data is None:
            raise NotLoadedError()
        await self._scheduler.flush()
