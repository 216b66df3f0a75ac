"""Construction options for :class:`~lazykv.store.Store`.

These Pydantic models define every setting a store recognises.  Unknown
fields are rejected so that a misspelt option fails loudly instead of
silently falling back to a default.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StoreOptions(BaseModel):
    """Store configuration.

    Attributes:
        quiescence_window: Seconds to wait after the first unflushed mutation
                           before writing to disk.
        retained_versions: Number of backup snapshots to keep.  ``0`` disables
                           backups entirely (no backup directory is created).
        format: Codec name, resolved through the codec registry.
        create_if_missing: Create an empty data file on ``open`` instead of
                           failing when it does not exist.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    quiescence_window: float = Field(default=1.0, ge=0)
    retained_versions: int = Field(default=0, ge=0)
    format: str = "json"
    create_if_missing: bool = False
