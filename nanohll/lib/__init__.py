from .hyperloglog import HyperLogLog
from .storage import Storage, FileStorage, MemoryStorage
from .commands import Commands
from .errors import (
    NanoHLLError,
    InvalidPrecisionError,
    PrecisionMismatchError,
    SerializationError,
    InvalidKeyError,
    KeyNotFoundError,
    StorageError,
)

__all__ = [
    'HyperLogLog',
    'Storage',
    'FileStorage',
    'MemoryStorage',
    'Commands',
    'NanoHLLError',
    'InvalidPrecisionError',
    'PrecisionMismatchError',
    'SerializationError',
    'InvalidKeyError',
    'KeyNotFoundError',
    'StorageError',
]
