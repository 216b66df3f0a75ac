"""VersionManager — timestamped backups of the data file taken before each flush."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from lazykv._internal import files
from lazykv._internal.clock import Clock, StampSequence, SystemClock
from lazykv.exceptions import StoreIOError

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


def backup_dir_for(path: Path) -> Path:
    """Return the hidden backup directory that sits next to *path*."""
    return path.parent / f".{path.name}"


class VersionManager:
    """Keeps the newest ``retained`` copies of a store file.

    Backups are named ``<epoch-milliseconds>.bak``.  Names are ordered by
    their integer value, never as strings, so pruning stays correct when the
    timestamp gains a digit.

    Stamps only ever increase, including across managers created for the
    same file, so an existing backup is never overwritten.

    Parameters:
        path:     The store's data file.
        retained: How many backups to keep.  ``0`` disables backups.
        clock:    Injectable clock for testing.
        on_error: Receives pruning failures, which never fail a flush.
    """

    def __init__(
        self,
        path: Path,
        retained: int,
        *,
        clock: Clock | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.path = path
        self.retained = retained
        self.directory = backup_dir_for(path)
        self._on_error = on_error
        self._stamps = StampSequence(clock or SystemClock())

    @property
    def enabled(self) -> bool:
        return self.retained > 0

    async def _next_stamp(self) -> int:
        if not self._stamps.seeded:
            # Continue after backups left by earlier runs against the same file.
            backups = await self.list_backups()
            self._stamps.seed(int(backups[0].stem) if backups else 0)
        return self._stamps.next()

    async def snapshot(self) -> Path | None:
        """Copy the current data file into the backup directory, then prune.

        Returns the backup path, or ``None`` when backups are disabled or
        there is no file yet.  A failed copy raises ``StoreIOError``.
        """
        if not self.enabled:
            return None
        backup = self.directory / f"{await self._next_stamp()}{BACKUP_SUFFIX}"
        if not await files.copy_file(self.path, backup):
            return None
        logger.debug("Backed up %s to %s", self.path, backup)
        try:
            await self.prune()
        except StoreIOError as exc:
            if self._on_error is None:
                raise
            self._on_error(exc)
        return backup

    async def list_backups(self) -> list[Path]:
        """Return backups ordered newest first."""
        stamped: list[tuple[int, str]] = []
        for name in await files.list_dir(self.directory):
            stem, _, suffix = name.rpartition(".")
            if f".{suffix}" != BACKUP_SUFFIX or not stem.isdigit():
                continue
            stamped.append((int(stem), name))
        stamped.sort(reverse=True)
        return [self.directory / name for _, name in stamped]

    async def prune(self) -> list[Path]:
        """Delete every backup beyond the newest ``retained``; return the deleted paths."""
        expired = (await self.list_backups())[self.retained :]
        for backup in expired:
            await files.delete_file(backup)
        if expired:
            logger.debug("Pruned %d old backup(s) of %s", len(expired), self.path)
        return expired
