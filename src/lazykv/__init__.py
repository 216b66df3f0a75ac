"""lazykv — a single-file key-value store with an in-memory mirror.

Reads come from memory.  Writes are coalesced and flushed to disk after a
quiescence window, optionally keeping a bounded history of previous file
versions.
"""

from lazykv.codecs import Codec, CodecRegistry, JsonCodec, PropertiesCodec
from lazykv.exceptions import (
    CodecError,
    IllegalStateError,
    InvalidKeyError,
    InvalidPathError,
    InvalidValueError,
    NotLoadedError,
    ParseError,
    StoreError,
    StoreIOError,
    UnknownFormatError,
)
from lazykv.options import StoreOptions
from lazykv.store import Store, StoreState
from lazykv.stream import KeyStream
from lazykv.versions import VersionManager

__all__ = [
    "Codec",
    "CodecError",
    "CodecRegistry",
    "IllegalStateError",
    "InvalidKeyError",
    "InvalidPathError",
    "InvalidValueError",
    "JsonCodec",
    "KeyStream",
    "NotLoadedError",
    "ParseError",
    "PropertiesCodec",
    "Store",
    "StoreError",
    "StoreIOError",
    "StoreOptions",
    "StoreState",
    "UnknownFormatError",
    "VersionManager",
]
