"""Custom exceptions for the lazykv package."""

from __future__ import annotations

from typing import Any


class StoreError(Exception):
    """Base exception for all store-related errors."""


class InvalidPathError(StoreError):
    """Raised when ``open`` is called without a usable file path."""

    def __init__(self, path: Any) -> None:
        self.path = path
        super().__init__(f"A file path must be provided, got {path!r}")


class InvalidKeyError(StoreError):
    """Raised when a key argument is empty, not a string, or unrepresentable."""

    def __init__(self, key: Any, detail: str = "") -> None:
        self.key = key
        msg = f"Invalid key {key!r}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class InvalidValueError(StoreError):
    """Raised when a value cannot round-trip through the store's codec."""

    def __init__(self, key: str, detail: str = "") -> None:
        self.key = key
        msg = f"Unable to store value for key {key!r}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class IllegalStateError(StoreError):
    """Raised when an operation is not allowed in the store's current state."""

    def __init__(self, operation: str, state: Any) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot '{operation}' while the store is {state}")


class NotLoadedError(StoreError):
    """Raised by a forced save when no mapping has been loaded yet."""

    def __init__(self) -> None:
        super().__init__("Store isn't loaded")


class ParseError(StoreError):
    """Raised when the data file cannot be decoded."""

    def __init__(self, path: str, detail: str = "") -> None:
        self.path = path
        msg = f"Error parsing your data file: [{path}]"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class StoreIOError(StoreError):
    """Raised when an underlying filesystem operation fails."""

    def __init__(self, operation: str, path: str, detail: str = "") -> None:
        self.operation = operation
        self.path = path
        msg = f"I/O error during '{operation}' on [{path}]"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class CodecError(StoreError):
    """Raised by a codec that cannot encode or decode its input."""


class UnknownFormatError(StoreError):
    """Raised when a codec format name is not registered."""

    def __init__(self, name: str, known: list[str]) -> None:
        self.name = name
        super().__init__(f"Unknown format '{name}'. Registered formats: {', '.join(known)}")
