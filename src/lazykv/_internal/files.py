"""Filesystem primitives run off the event loop.

Every helper executes its blocking work in a worker thread via
``asyncio.to_thread`` and converts ``OSError`` into
:class:`~lazykv.exceptions.StoreIOError`.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

from lazykv.exceptions import StoreIOError


async def read_file(path: Path, *, create: bool) -> bytes:
    """Return the full contents of *path*, creating an empty file if allowed."""

    def _read() -> bytes:
        # "a+b" creates the file without truncating an existing one
        with open(path, "a+b" if create else "rb") as fh:
            fh.seek(0)
            return fh.read()

    try:
        return await asyncio.to_thread(_read)
    except FileNotFoundError as exc:
        raise StoreIOError("open", str(path), "file does not exist") from exc
    except OSError as exc:
        raise StoreIOError("open", str(path), str(exc)) from exc


async def write_file(path: Path, data: bytes) -> None:
    """Replace *path* with *data* through a temporary sibling and ``os.replace``."""

    def _write() -> None:
        tmp = path.with_name(f".{path.name}.tmp")
        with open(tmp, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)

    try:
        await asyncio.to_thread(_write)
    except OSError as exc:
        raise StoreIOError("write", str(path), str(exc)) from exc


async def copy_file(src: Path, dst: Path) -> bool:
    """Copy *src* to *dst*, creating the destination directory.

    Returns ``False`` without copying when *src* does not exist.
    """

    def _copy() -> bool:
        if not src.exists():
            return False
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        return True

    try:
        return await asyncio.to_thread(_copy)
    except OSError as exc:
        raise StoreIOError("copy", str(src), str(exc)) from exc


async def list_dir(path: Path) -> list[str]:
    """Return the entry names in *path*; an absent directory is empty."""

    def _list() -> list[str]:
        if not path.is_dir():
            return []
        return os.listdir(path)

    try:
        return await asyncio.to_thread(_list)
    except OSError as exc:
        raise StoreIOError("list", str(path), str(exc)) from exc


async def delete_file(path: Path) -> None:
    """Delete *path*.  No-op if it is already gone."""
    try:
        await asyncio.to_thread(path.unlink, missing_ok=True)
    except OSError as exc:
        raise StoreIOError("delete", str(path), str(exc)) from exc
