from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Iterable
import struct
import numpy as np # type: ignore
import xxhash # type: ignore

# Seed shared by every sketch; register contents are only comparable
# between sketches hashed with the same seed.
HASH_SEED = 0

_UINT64_LIMIT = 1 << 64


class AbstractSketch(ABC):
    """Base class for cardinality sketches."""

    @abstractmethod
    def add(self, value: Any) -> None:
        """Add a single value to the sketch."""
        pass

    @abstractmethod
    def add_batch(self, values: Iterable[Any]) -> None:
        """Add multiple values to the sketch.

        Args:
            values: Iterable of values to add to the sketch
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Estimate the number of distinct values added."""
        pass

    @abstractmethod
    def merge(self, other: 'AbstractSketch') -> None:
        """Merge another sketch into this one."""
        pass

    # Hash functions - static methods for use by all sketch implementations
    @staticmethod
    def _hash_bytes(data: bytes, seed: int = HASH_SEED) -> int:
        """64-bit hash of raw bytes.

        Every other hash helper reduces its input to bytes and calls this.

        Args:
            data: Bytes to hash
            seed: Seed for xxhash

        Returns:
            64-bit hash value as integer
        """
        return xxhash.xxh64_intdigest(data, seed=seed)

    @staticmethod
    def _int_to_bytes(x: int) -> bytes:
        """Encode an integer as bytes, injectively over all Python ints.

        Values in [0, 2**64) use 8 bytes little-endian. Everything else uses
        signed little-endian two's complement of at least 9 bytes.
        """
        if 0 <= x < _UINT64_LIMIT:
            return x.to_bytes(8, byteorder='little')
        length = max(9, (x.bit_length() + 8) // 8)
        return x.to_bytes(length, byteorder='little', signed=True)

    @staticmethod
    def canonical_bytes(value: Any) -> bytes:
        """Reduce a value to the bytes that get hashed.

        Args:
            value: bytes-like, str, int, float, or any other object

        Returns:
            Canonical byte representation of ``value``
        """
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if isinstance(value, str):
            return value.encode('utf-8')
        if isinstance(value, np.integer):
            value = int(value)
        elif isinstance(value, np.floating):
            value = float(value)
        if isinstance(value, int):
            return AbstractSketch._int_to_bytes(value)
        if isinstance(value, float):
            return struct.pack('<d', value)
        return repr(value).encode('utf-8')

    @staticmethod
    def _hash_str(s: str, seed: int = HASH_SEED) -> int:
        """Hash a string's UTF-8 bytes.

        Args:
            s: String to hash
            seed: Seed for xxhash

        Returns:
            64-bit hash value as integer
        """
        return AbstractSketch._hash_bytes(s.encode('utf-8'), seed=seed)

    @staticmethod
    def _hash64_int(x: int, seed: int = HASH_SEED) -> int:
        """64-bit hash function for integers.

        Args:
            x: Integer value to hash
            seed: Seed for xxhash

        Returns:
            64-bit hash value as integer
        """
        return AbstractSketch._hash_bytes(AbstractSketch._int_to_bytes(x), seed=seed)

    # Instance methods that use the sketch's seed
    def hash_bytes(self, data: bytes) -> int:
        """Hash raw bytes with the instance's seed."""
        return self._hash_bytes(data, seed=getattr(self, 'seed', HASH_SEED))

    def hash_str(self, s: str) -> int:
        """Hash a string with the instance's seed."""
        return self._hash_str(s, seed=getattr(self, 'seed', HASH_SEED))

    def hash_int(self, x: int) -> int:
        """Hash an integer with the instance's seed."""
        return self._hash64_int(x, seed=getattr(self, 'seed', HASH_SEED))

    def hash_value(self, value: Any) -> int:
        """Hash any value through its canonical byte representation."""
        return self.hash_bytes(self.canonical_bytes(value))
