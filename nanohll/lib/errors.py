from __future__ import annotations
from typing import Any


class NanoHLLError(Exception):
    """Base class for all nanohll errors."""


class InvalidPrecisionError(NanoHLLError, ValueError):
    """Raised when a sketch is constructed with an unsupported precision."""

    def __init__(self, precision: Any):
        self.precision = precision
        super().__init__(f"Invalid precision: {precision!r} (must be an integer in 4..16)")


class PrecisionMismatchError(NanoHLLError, ValueError):
    """Raised when merging sketches built with different precisions."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Cannot merge HyperLogLog sketches with different precisions: {expected} vs {actual}")


class SerializationError(NanoHLLError, ValueError):
    """Raised when bytes cannot be decoded into a sketch."""


class InvalidKeyError(NanoHLLError, ValueError):
    """Raised for keys the storage layer cannot address."""

    def __init__(self, key: Any, reason: str = "invalid key"):
        self.key = key
        super().__init__(f"Invalid key: {key!r} ({reason})")


class KeyNotFoundError(NanoHLLError, KeyError):
    """Raised when loading a key that was never stored."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"HyperLogLog not found: {self.key}"


class StorageError(NanoHLLError):
    """Raised when a storage backend fails to read or write."""
