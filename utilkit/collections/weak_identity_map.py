"""
WeakIdentityMap - Identity-keyed map holding its keys weakly.

Keys are compared by identity, never by __eq__, and need not be hashable.
Entries whose key has been reclaimed stay stored (and counted) until
scavenge() runs; lookups and iteration simply skip them.

Usage:
    from utilkit.collections import WeakIdentityMap

    owners = WeakIdentityMap()
    owners.set(widget, "panel-1")
    owners.get(widget)          # "panel-1"
    del widget                  # key reclaimed by the host
    owners.count                # still 1
    owners.scavenge()           # 1 removed
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from utilkit.common.logging import get_logger
from utilkit.core.config import get_memory_manager
from utilkit.core.errors import InvalidArgumentError
from utilkit.core.interfaces import MemoryManagerProtocol
from .interfaces import WeakCacheStatusProvider
from .weak_handle import WeakHandle

logger = get_logger(__name__)


@dataclass
class _Entry:
    """One stored pair. slot_hash is copied from the handle at insertion."""
    handle: WeakHandle
    value: Any
    slot_hash: int


class WeakIdentityMap(WeakCacheStatusProvider):
    """
    Map from weakly-held keys (by identity) to strongly-held values.

    count is maintained in O(1) and includes dead entries; it only
    shrinks through scavenge(), remove() or clear(). Iterating the map
    yields live (key, value) pairs.

    Not thread-safe: callers synchronise sequences of mutating calls.
    """

    def __init__(self, memory: Optional[MemoryManagerProtocol] = None):
        self._memory = memory or get_memory_manager()
        self._buckets: Dict[int, List[_Entry]] = {}
        self._count = 0

    # ============== Mutation ==============

    def set(self, key: Any, value: Any) -> None:
        """Store value for key, replacing the value of a live entry for the same key."""
        if key is None:
            raise InvalidArgumentError("WeakIdentityMap key must not be None")

        bucket = self._buckets.get(self._memory.identity_hash(key))
        if bucket:
            for entry in bucket:
                if entry.handle.target() is key:
                    entry.value = value
                    return

        handle = WeakHandle(key, self._memory)
        entry = _Entry(handle=handle, value=value, slot_hash=handle.stored_hash)
        self._buckets.setdefault(entry.slot_hash, []).append(entry)
        self._count += 1

    def remove(self, key: Any) -> bool:
        """
        Delete the live entry for key.

        Returns:
            False if key was not stored
        """
        if key is None:
            return False
        slot_hash = self._memory.identity_hash(key)
        bucket = self._buckets.get(slot_hash)
        if not bucket:
            return False
        for index, entry in enumerate(bucket):
            if entry.handle.target() is key:
                del bucket[index]
                if not bucket:
                    del self._buckets[slot_hash]
                self._count -= 1
                return True
        return False

    def scavenge(self) -> int:
        """
        Remove every entry whose key has been reclaimed.

        Returns:
            Number of entries removed
        """
        removed = 0
        for slot_hash, bucket in list(self._buckets.items()):
            survivors = [entry for entry in bucket if entry.handle.is_alive()]
            if len(survivors) == len(bucket):
                continue
            removed += len(bucket) - len(survivors)
            if survivors:
                self._buckets[slot_hash] = survivors
            else:
                del self._buckets[slot_hash]

        self._count -= removed
        if removed:
            logger.debug("Scavenged weak identity map", data={
                "removed": removed,
                "remaining": self._count,
            })
        return removed

    def clear(self) -> None:
        """Drop every entry."""
        self._buckets.clear()
        self._count = 0

    # ============== Lookup ==============

    def get(self, key: Any, default: Any = None) -> Any:
        """Value of the live entry for key, or default."""
        if key is None:
            return default
        bucket = self._buckets.get(self._memory.identity_hash(key))
        if bucket:
            for entry in bucket:
                if entry.handle.target() is key:
                    return entry.value
        return default

    def __contains__(self, key: Any) -> bool:
        if key is None:
            return False
        bucket = self._buckets.get(self._memory.identity_hash(key))
        return bool(bucket) and any(entry.handle.target() is key for entry in bucket)

    def __delitem__(self, key: Any) -> None:
        if not self.remove(key):
            raise KeyError(key)

    # ============== Enumeration ==============

    def items(self) -> Iterator[Tuple[Any, Any]]:
        """Live (key, value) pairs, evaluated lazily."""
        for bucket in list(self._buckets.values()):
            for entry in list(bucket):
                key = entry.handle.target()
                if key is not None:
                    yield key, entry.value

    def keys(self) -> Iterator[Any]:
        for key, _ in self.items():
            yield key

    def values(self) -> Iterator[Any]:
        for _, value in self.items():
            yield value

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        return self.items()

    # ============== Status ==============

    @property
    def count(self) -> int:
        return self._count

    @property
    def active_count(self) -> int:
        return sum(1 for _ in self.items())

    def __len__(self) -> int:
        return self._count

    # ============== Serialization ==============

    def __getstate__(self) -> Dict[str, Any]:
        entries = []
        placeholders = 0
        for bucket in self._buckets.values():
            for entry in bucket:
                key = entry.handle.target()
                if key is None:
                    placeholders += 1
                entries.append((key, entry.value, entry.slot_hash))
        if placeholders and logger.isEnabledFor(logging.DEBUG):
            logger.debug("Writing placeholders for reclaimed keys", data={
                "placeholders": placeholders,
                "count": self._count,
            })
        return {'entries': entries}

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self._memory = get_memory_manager()
        self._buckets = {}
        self._count = 0
        for key, value, slot_hash in state['entries']:
            if key is None:
                handle = WeakHandle.dead(slot_hash, self._memory)
            else:
                handle = WeakHandle(key, self._memory)
            entry = _Entry(handle=handle, value=value, slot_hash=handle.stored_hash)
            self._buckets.setdefault(entry.slot_hash, []).append(entry)
            self._count += 1

    def __repr__(self) -> str:
        return f"WeakIdentityMap(count={self._count})"
