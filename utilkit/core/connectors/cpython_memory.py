"""
CPythonMemoryManager - Host memory manager backed by the interpreter.

Uses weakref.ref for liveness, id() for identity and the cyclic
collector's per-generation collection counters for generation numbers.
"""

import gc
import weakref
from typing import Any, Optional, Tuple


def _collection_counts() -> Tuple[int, ...]:
    return tuple(stats["collections"] for stats in gc.get_stats())


class GenerationRef(weakref.ref):
    """weakref.ref that remembers the collector counters at creation."""

    def __init__(self, target: Any, callback=None, collections: Tuple[int, ...] = ()):
        super().__init__(target, callback)
        self.collections = collections


class CPythonMemoryManager:
    """
    Memory manager for the running CPython interpreter.

    Implements MemoryManagerProtocol.

    Objects that do not support weak references (int, str, tuple, ...)
    make create_weak() raise TypeError, straight from the weakref module.
    """

    def create_weak(self, target: Any) -> GenerationRef:
        """Create a weak reference to target."""
        return GenerationRef(target, collections=_collection_counts())

    def is_alive(self, ref: weakref.ref) -> bool:
        """Probe once."""
        return ref() is not None

    def dereference(self, ref: weakref.ref) -> Optional[Any]:
        """Probe once."""
        return ref()

    def identity_hash(self, obj: Any) -> int:
        """id() is stable while obj lives; it may be reused afterwards."""
        return id(obj)

    def generation_of(self, ref: GenerationRef) -> int:
        """
        Number of collector passes the referent has survived since ref was
        created, capped at the oldest generation.

        Reads the collector's counters only and never walks the heap. Any
        pass counts, so this is an upper bound on the real generation.
        Objects the cyclic collector does not track report 0.
        """
        target = ref()
        if target is None or not gc.is_tracked(target):
            return 0
        current = _collection_counts()
        survived = sum(now - then for now, then in zip(current, ref.collections))
        return min(survived, len(current) - 1)

    def __repr__(self) -> str:
        return "CPythonMemoryManager()"
