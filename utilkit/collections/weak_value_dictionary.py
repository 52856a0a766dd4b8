"""
WeakValueDictionary - Strong keys mapped to weakly-retained values.

Unlike weakref.WeakValueDictionary, a key slot is not deleted when its
value is reclaimed. The slot stays, reports itself dead (generation -1),
and can be refilled with add(). count therefore tracks slots, while
active_count tracks live values.

Slot lifecycle:
    Empty -> Added(g0) -> Dead(-1) | Added(g1) -> ... -> Removed

Removed is reached only through remove(), clear() or scavenge().
"""

import logging
from typing import Any, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from utilkit.common.logging import get_logger
from utilkit.core.config import get_memory_manager
from utilkit.core.errors import InvalidArgumentError
from utilkit.core.interfaces import MemoryManagerProtocol
from .interfaces import WeakCacheStatusProvider
from .weak_handle import DEAD_GENERATION, WeakHandle

logger = get_logger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class WeakValueDictionary(WeakCacheStatusProvider, Generic[K, V]):
    """
    Dictionary whose values may be reclaimed by the host at any time.

    Every query on an unknown key answers "not found" (None, False, -1)
    instead of raising. Each liveness query probes the memory manager once
    and derives its whole answer from that probe.

    Not thread-safe: callers synchronise sequences of mutating calls.

    Usage:
        cache = WeakValueDictionary[str, Report]()
        cache.add("ID1", report)
        if cache.is_alive("ID1"):
            report = cache.get_value("ID1")
        else:
            cache.add("ID1", load_report("ID1"))
    """

    def __init__(self, memory: Optional[MemoryManagerProtocol] = None):
        self._memory = memory or get_memory_manager()
        self._slots: Dict[K, WeakHandle] = {}

    # ============== Mutation ==============

    def add(self, key: K, value: V) -> None:
        """
        Point key at value through a brand-new handle.

        Any previous handle for key is discarded, dead or alive. This is
        the only way a dead slot becomes alive again.
        """
        if key is None:
            raise InvalidArgumentError("WeakValueDictionary key must not be None")
        if value is None:
            raise InvalidArgumentError(
                "WeakValueDictionary value must not be None",
                data={"key": str(key)},
            )

        previous = self._slots.get(key)
        self._slots[key] = WeakHandle(value, self._memory)

        if previous is not None and logger.isEnabledFor(logging.DEBUG):
            logger.debug("Replaced weak value handle", data={
                "key": str(key),
                "previous_alive": previous.is_alive(),
            })

    def remove(self, key: K) -> bool:
        """
        Delete the slot for key.

        Returns:
            False if key had no slot
        """
        if key is None:
            return False
        return self._slots.pop(key, None) is not None

    def clear(self) -> None:
        """Remove every slot."""
        removed = len(self._slots)
        self._slots.clear()
        if removed:
            logger.debug("Cleared weak value dictionary", data={"removed": removed})

    def scavenge(self) -> int:
        """
        Remove the slots whose value has been reclaimed.

        Returns:
            Number of slots removed
        """
        dead = [key for key, handle in list(self._slots.items()) if not handle.is_alive()]
        for key in dead:
            del self._slots[key]
        if dead:
            logger.debug("Scavenged weak value dictionary", data={
                "removed": len(dead),
                "remaining": len(self._slots),
            })
        return len(dead)

    # ============== Lookup ==============

    def get_value(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """The live value for key, or default."""
        handle = self._handle(key)
        if handle is None:
            return default
        value = handle.target()
        return default if value is None else value

    def is_alive(self, key: K) -> bool:
        handle = self._handle(key)
        return handle is not None and handle.is_alive()

    def get_generation(self, key: K) -> int:
        """
        Host generation of the live value for key.

        Returns:
            -1 if key is unknown or its value was reclaimed. Otherwise a
            non-negative, host-specific number; only the -1 sentinel is
            meaningful across hosts.
        """
        handle = self._handle(key)
        if handle is None:
            return DEAD_GENERATION
        return handle.generation()

    def __contains__(self, key: object) -> bool:
        """True if key has a slot, alive or dead."""
        return key is not None and key in self._slots

    def _handle(self, key: K) -> Optional[WeakHandle]:
        if key is None:
            return None
        return self._slots.get(key)

    # ============== Enumeration ==============

    def keys(self) -> List[K]:
        """Every slot key, alive or dead."""
        return list(self._slots)

    def alive_items(self) -> Iterator[Tuple[K, V]]:
        """Live (key, value) pairs, evaluated lazily."""
        for key, handle in list(self._slots.items()):
            value = handle.target()
            if value is not None:
                yield key, value

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    # ============== Status ==============

    @property
    def count(self) -> int:
        return len(self._slots)

    @property
    def active_count(self) -> int:
        return sum(1 for handle in list(self._slots.values()) if handle.is_alive())

    def __len__(self) -> int:
        return len(self._slots)

    # ============== Serialization ==============

    def __getstate__(self) -> Dict[str, Any]:
        slots = []
        for key, handle in self._slots.items():
            slots.append((key, handle.target(), handle.stored_hash))
        if logger.isEnabledFor(logging.DEBUG):
            placeholders = sum(1 for _, value, _ in slots if value is None)
            if placeholders:
                logger.debug("Writing placeholders for reclaimed values", data={
                    "placeholders": placeholders,
                    "count": len(slots),
                })
        return {'slots': slots}

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self._memory = get_memory_manager()
        self._slots = {}
        for key, value, stored_hash in state['slots']:
            if value is None:
                self._slots[key] = WeakHandle.dead(stored_hash, self._memory)
            else:
                self._slots[key] = WeakHandle(value, self._memory)

    def __repr__(self) -> str:
        return f"WeakValueDictionary(count={len(self._slots)})"
