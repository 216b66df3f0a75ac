"""JsonCodec — indented JSON that tolerates ``//`` and ``/* */`` comments."""

from __future__ import annotations

import json
import re
from typing import Any

from lazykv.codecs.base import Codec
from lazykv.exceptions import CodecError

# string literals are matched first so comment markers inside them survive
_TOKENS = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/', re.DOTALL)


def strip_comments(text: str) -> str:
    """Remove JavaScript-style comments that sit outside string literals."""

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token.startswith('"'):
            return token
        return " " if token.startswith("/*") else ""

    return _TOKENS.sub(_replace, text)


class JsonCodec(Codec):
    """Default codec.  Hand-edited files may carry comments; they are dropped on save."""

    format_name = "json"

    def __init__(self, indent: int = 4) -> None:
        self._indent = indent

    def dumps(self, mapping: dict[str, Any]) -> str:
        try:
            return json.dumps(mapping, indent=self._indent, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise CodecError(str(exc)) from exc

    def loads(self, text: str) -> dict[str, Any]:
        try:
            data = json.loads(strip_comments(text))
        except json.JSONDecodeError as exc:
            raise CodecError(str(exc)) from exc
        if not isinstance(data, dict):
            raise CodecError(f"expected a JSON object at the top level, got {type(data).__name__}")
        return data
