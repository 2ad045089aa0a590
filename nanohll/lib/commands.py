from __future__ import annotations
from typing import Any, Iterable, List, Optional
import warnings
from nanohll.lib.hyperloglog import HyperLogLog, DEFAULT_PRECISION
from nanohll.lib.storage import Storage
from nanohll.lib.errors import InvalidKeyError, KeyNotFoundError


class Commands:
    """Redis-style HyperLogLog commands over a storage backend.

    Maps PFADD, PFCOUNT and PFMERGE, plus delete/exists/keys, onto sketch
    operations and the backend's load/store. Keys are not locked; callers
    sharing a backend between writers must serialize access per key.
    """

    def __init__(self, storage: Storage, default_precision: int = DEFAULT_PRECISION,
                 debug: bool = False):
        """Initialize the command layer.

        Args:
            storage: Backend holding the sketches
            default_precision: Precision for sketches created by pfadd
            debug: Whether to print debug information
        """
        # Raises InvalidPrecisionError for an unusable default
        HyperLogLog(default_precision)
        self.storage = storage
        self.default_precision = default_precision
        self.debug = debug

    def pfadd(self, key: str, elements: Iterable[Any], precision: Optional[int] = None) -> int:
        """Add elements to the sketch at key, creating it when missing.

        Args:
            key: Sketch to update
            elements: Values to add; strings hash as their UTF-8 bytes
            precision: Precision for a newly created sketch; defaults to
                default_precision. Ignored (with a warning) if key exists
                with a different precision.

        Returns:
            Number of elements processed
        """
        try:
            hll = self.storage.load(key)
            if precision is not None and precision != hll.precision:
                warnings.warn(
                    f"Key {key} uses precision {hll.precision}; ignoring requested precision {precision}",
                    RuntimeWarning)
        except KeyNotFoundError:
            hll = HyperLogLog(precision if precision is not None else self.default_precision)
            if self.debug:
                print(f"DEBUG: creating {key} with precision {hll.precision}")

        added = 0
        for element in elements:
            hll.add(element)
            added += 1

        self.storage.store(key, hll)
        if self.debug:
            print(f"DEBUG: pfadd {key}: {added} elements")
        return added

    def _load_merged(self, keys: List[str]) -> HyperLogLog:
        merged = self.storage.load(keys[0])
        for key in keys[1:]:
            merged.merge(self.storage.load(key))
        return merged

    def pfcount(self, keys: Iterable[str]) -> int:
        """Estimate the cardinality of the union of the sketches at keys.

        Stored sketches are not modified.

        Args:
            keys: One or more keys; an empty list counts as 0

        Returns:
            Cardinality estimate
        """
        keys = list(keys)
        if not keys:
            return 0
        count = self._load_merged(keys).count()
        if self.debug:
            print(f"DEBUG: pfcount {','.join(keys)} = {count}")
        return count

    def pfmerge(self, dest_key: str, source_keys: Iterable[str]) -> int:
        """Merge the sketches at source_keys into dest_key.

        Any existing value at dest_key is replaced, not merged into.

        Args:
            dest_key: Key to write the union to
            source_keys: Keys to merge

        Returns:
            Number of source keys merged

        Raises:
            InvalidKeyError: If source_keys is empty
        """
        source_keys = list(source_keys)
        if not source_keys:
            raise InvalidKeyError(dest_key, "no source keys provided")
        merged = self._load_merged(source_keys)
        self.storage.store(dest_key, merged)
        if self.debug:
            print(f"DEBUG: pfmerge {','.join(source_keys)} -> {dest_key}")
        return len(source_keys)

    def delete(self, key: str) -> None:
        self.storage.delete(key)

    def exists(self, key: str) -> bool:
        return self.storage.exists(key)

    def keys(self) -> List[str]:
        return self.storage.list_keys()
