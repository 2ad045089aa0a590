"""
nanohll - HyperLogLog cardinality estimation with pluggable storage
"""

from nanohll.lib.hyperloglog import HyperLogLog
from nanohll.lib.storage import Storage, FileStorage, MemoryStorage
from nanohll.lib.commands import Commands
from nanohll.lib.errors import (
    NanoHLLError,
    InvalidPrecisionError,
    PrecisionMismatchError,
    SerializationError,
    InvalidKeyError,
    KeyNotFoundError,
    StorageError,
)

__version__ = '0.1.0'

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
