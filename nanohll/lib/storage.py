from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List
import os
import tempfile
import warnings
from nanohll.lib.hyperloglog import HyperLogLog
from nanohll.lib.errors import InvalidKeyError, KeyNotFoundError, StorageError

FILE_EXTENSION = ".hll"

_FORBIDDEN_KEY_CHARS = ("/", "\\", "\x00")


def validate_key(key: str) -> str:
    """Check that a key can be stored by any backend.

    Args:
        key: Key to check

    Returns:
        The key, unchanged

    Raises:
        InvalidKeyError: If the key is empty, not a string, starts with '.',
            or contains a path separator or NUL
    """
    if not isinstance(key, str):
        raise InvalidKeyError(key, "keys must be strings")
    if not key:
        raise InvalidKeyError(key, "keys must not be empty")
    if key.startswith("."):
        raise InvalidKeyError(key, "keys must not start with '.'")
    if any(c in key for c in _FORBIDDEN_KEY_CHARS):
        raise InvalidKeyError(key, "keys must not contain path separators or NUL")
    return key


class Storage(ABC):
    """Key-value store for serialized HyperLogLog sketches."""

    @abstractmethod
    def store(self, key: str, hll: HyperLogLog) -> None:
        """Store a sketch under key, replacing any existing value."""
        pass

    @abstractmethod
    def load(self, key: str) -> HyperLogLog:
        """Load the sketch stored under key.

        Raises:
            KeyNotFoundError: If nothing is stored under key
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key; deleting a missing key does nothing."""
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether key is stored."""
        pass

    @abstractmethod
    def list_keys(self) -> List[str]:
        """List all stored keys in sorted order."""
        pass


class MemoryStorage(Storage):
    """In-process storage keeping serialized sketches in a dict."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def store(self, key: str, hll: HyperLogLog) -> None:
        self._data[validate_key(key)] = hll.to_bytes()

    def load(self, key: str) -> HyperLogLog:
        validate_key(key)
        if key not in self._data:
            raise KeyNotFoundError(key)
        return HyperLogLog.from_bytes(self._data[key])

    def delete(self, key: str) -> None:
        self._data.pop(validate_key(key), None)

    def exists(self, key: str) -> bool:
        return validate_key(key) in self._data

    def list_keys(self) -> List[str]:
        return sorted(self._data)


class FileStorage(Storage):
    """File-based storage: one ``<key>.hll`` file per sketch in a directory.

    Files hold ``HyperLogLog.to_bytes()`` output. Writes go to a temporary
    file in the same directory and are moved into place, so readers never
    see a partially written sketch.
    """

    def __init__(self, base_path: str, debug: bool = False):
        """Initialize file storage, creating base_path if needed.

        Args:
            base_path: Directory holding the sketch files
            debug: Whether to print debug information

        Raises:
            StorageError: If the directory cannot be created
        """
        self.base_path = os.path.abspath(base_path)
        self.debug = debug
        try:
            os.makedirs(self.base_path, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create storage directory {self.base_path}: {e}") from e

    def __repr__(self) -> str:
        return f"FileStorage({self.base_path!r})"

    def key_to_path(self, key: str) -> str:
        """Path of the file holding key."""
        return os.path.join(self.base_path, validate_key(key) + FILE_EXTENSION)

    def store(self, key: str, hll: HyperLogLog) -> None:
        path = self.key_to_path(key)
        data = hll.to_bytes()
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=FILE_EXTENSION, dir=self.base_path)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Failed to store {key}: {e}") from e
        if self.debug:
            print(f"DEBUG: stored {key} ({len(data)} bytes, precision={hll.precision}) at {path}")

    def load(self, key: str) -> HyperLogLog:
        path = self.key_to_path(key)
        if not os.path.isfile(path):
            raise KeyNotFoundError(key)
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except FileNotFoundError:
            raise KeyNotFoundError(key) from None
        except OSError as e:
            raise StorageError(f"Failed to load {key}: {e}") from e
        if self.debug:
            print(f"DEBUG: loaded {key} ({len(data)} bytes) from {path}")
        return HyperLogLog.from_bytes(data)

    def delete(self, key: str) -> None:
        path = self.key_to_path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e
        if self.debug:
            print(f"DEBUG: deleted {key}")

    def exists(self, key: str) -> bool:
        return os.path.isfile(self.key_to_path(key))

    def list_keys(self) -> List[str]:
        try:
            entries = os.listdir(self.base_path)
        except OSError as e:
            raise StorageError(f"Failed to list {self.base_path}: {e}") from e

        keys = []
        for name in entries:
            stem, ext = os.path.splitext(name)
            if ext != FILE_EXTENSION or not stem or stem.startswith("."):
                continue
            if not os.path.isfile(os.path.join(self.base_path, name)):
                warnings.warn(f"Skipping {name}: not a regular file", RuntimeWarning)
                continue
            keys.append(stem)
        return sorted(keys)
