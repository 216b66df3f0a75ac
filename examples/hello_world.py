"""
lazykv — Hello World

Reads come from memory. Writes are coalesced and land on disk after the
quiescence window, with the last few file versions kept as backups.
"""

import asyncio
import logging
import tempfile
from pathlib import Path

from lazykv import Store, StoreOptions


def on_error(exc: Exception) -> None:
    print(f"  [ERROR] {exc}")


async def main():
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    workdir = Path(tempfile.mkdtemp())
    path = workdir / "settings.json"

    # ──────────────────────────────────────
    #  1. Configure and open the store
    # ──────────────────────────────────────
    options = StoreOptions(
        quiescence_window=0.2,
        retained_versions=2,
        create_if_missing=True,
    )
    store = Store(options).on("error", on_error)
    store.open(path)

    # Issued before the file has loaded: queued, then replayed in order.
    await store.set("theme", "dark")

    # ──────────────────────────────────────
    #  2. A burst of writes becomes one flush
    # ──────────────────────────────────────
    for volume in range(5):
        await store.set("volume", volume)
    print(f"dirty after burst: {store.dirty}")

    await store.set("window", {"width": 800, "height": 600}, wait=True)
    print(f"on disk: {path.read_text()!r}")

    # ──────────────────────────────────────
    #  3. Stream the keys that match a pattern
    # ──────────────────────────────────────
    stream = await store.stream("^(theme|volume)$")
    async for key, value in stream:
        print(f"  {key} = {value}")

    # ──────────────────────────────────────
    #  4. Close (forces a final flush)
    # ──────────────────────────────────────
    await store.remove("volume")
    await store.close()

    backups = sorted(p.name for p in (workdir / ".settings.json").iterdir())
    print(f"backups: {backups}")


if __name__ == "__main__":
    asyncio.run(main())
