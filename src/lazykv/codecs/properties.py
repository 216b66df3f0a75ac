"""PropertiesCodec — flat ``key=value`` lines, one entry per line."""

from __future__ import annotations

from typing import Any

from lazykv.codecs.base import Codec
from lazykv.exceptions import CodecError

_COMMENT_PREFIXES = ("#", "!")


class PropertiesCodec(Codec):
    """Flat string-to-string format used for message bundles and simple settings.

    Each line is split on its first ``=``; everything after it, including
    further ``=`` signs, is the value.  Lines without ``=`` are ignored.
    Only string values are representable.
    """

    format_name = "properties"

    def validate_key(self, key: str) -> None:
        if "=" in key or _has_line_break(key):
            raise CodecError(f"key {key!r} may not contain '=' or line breaks")
        if key.startswith(_COMMENT_PREFIXES):
            raise CodecError(f"key {key!r} would be read back as a comment")

    def dumps(self, mapping: dict[str, Any]) -> str:
        lines = []
        for key, value in mapping.items():
            self.validate_key(key)
            if not isinstance(value, str):
                raise CodecError(f"value for {key!r} must be a string, got {type(value).__name__}")
            if _has_line_break(value):
                raise CodecError(f"value for {key!r} may not contain line breaks")
            lines.append(f"{key}={value}\n")
        return "".join(lines)

    def loads(self, text: str) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for line in text.split("\n"):
            line = line.removesuffix("\r")
            if not line or line.startswith(_COMMENT_PREFIXES):
                continue
            key, sep, value = line.partition("=")
            if not sep:
                continue
            result[key] = value
        return result


def _has_line_break(text: str) -> bool:
    return "\n" in text or "\r" in text
