"""Codec protocol — translates the in-memory mapping to and from file bytes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from lazykv.exceptions import CodecError

BOM = "\ufeff"


class Codec(ABC):
    """Abstract base for all on-disk formats.

    A codec only ever sees whole mappings.  The store never inspects the
    bytes it produces, so any format that can round-trip a
    ``dict[str, Any]`` works.

    Subclasses implement :meth:`dumps` and :meth:`loads` on text; the base
    class handles UTF-8, the byte-order-mark and empty files.
    """

    format_name: ClassVar[str] = "base"

    def encode(self, mapping: dict[str, Any]) -> bytes:
        """Return the file contents for *mapping*."""
        return self.dumps(mapping).encode("utf-8")

    def decode(self, data: bytes) -> dict[str, Any]:
        """Return the mapping stored in *data*.

        Raises:
            CodecError: If *data* is not valid for this format.
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CodecError(f"not valid UTF-8: {exc}") from exc
        # files saved by some editors start with a BOM
        if text.startswith(BOM):
            text = text[1:]
        if not text.strip():
            return {}
        return self.loads(text)

    def validate_key(self, key: str) -> None:
        """Raise ``CodecError`` if *key* cannot be written in this format."""

    def copy(self, mapping: dict[str, Any]) -> dict[str, Any]:
        """Return an independent deep copy of *mapping* via encode then decode."""
        return self.loads(self.dumps(mapping))

    @abstractmethod
    def dumps(self, mapping: dict[str, Any]) -> str:
        """Serialize *mapping* to text."""
        ...

    @abstractmethod
    def loads(self, text: str) -> dict[str, Any]:
        """Parse *text* (BOM already removed) into a mapping."""
        ...
