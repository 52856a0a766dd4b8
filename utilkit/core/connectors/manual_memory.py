"""
ManualMemoryManager - Deterministic memory manager for tests and hosts
without a tracing collector.

Emulates reclamation with explicit reference counting plus expiration
callbacks. Targets are held strongly until collect() or expire() decides
otherwise, so nothing is ever reclaimed under memory pressure. Use it
when liveness must be controlled step by step.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from utilkit.common.logging import get_logger
from ..errors import InvalidArgumentError

logger = get_logger(__name__)

ExpireCallback = Callable[[Any], None]


class ManualRef:
    """Weak reference token issued by ManualMemoryManager."""

    __slots__ = ("_target",)

    def __init__(self, target: Any):
        self._target = target

    def __call__(self) -> Optional[Any]:
        return self._target

    def _clear(self) -> None:
        self._target = None

    def __repr__(self) -> str:
        state = "dead" if self._target is None else "alive"
        return f"<ManualRef {state}>"


@dataclass
class _Tracked:
    """Bookkeeping for one target known to the manager."""
    target: Any
    generation: int = 0
    retains: int = 0
    refs: List[ManualRef] = field(default_factory=list)


class ManualMemoryManager:
    """
    Reference-counting memory manager with explicit collection cycles.

    Implements MemoryManagerProtocol.

    - retain(obj) / release(obj) model external strong references.
    - collect() expires every target with no retains and ages survivors
      by one generation, up to max_generation.
    - expire(obj) reclaims one target immediately, retained or not.

    Usage:
        memory = ManualMemoryManager()
        cache = WeakValueDictionary(memory=memory)
        cache.add("ID1", obj)
        memory.collect()          # obj was never retained -> reclaimed
        cache.is_alive("ID1")     # False
    """

    def __init__(self, max_generation: int = 2):
        if max_generation < 0:
            raise InvalidArgumentError(
                "max_generation must be non-negative",
                data={"max_generation": max_generation},
            )
        self.max_generation = max_generation
        self._tracked: Dict[int, _Tracked] = {}
        self._callbacks: List[ExpireCallback] = []
        self.collections = 0

    # ============== MemoryManagerProtocol ==============

    def create_weak(self, target: Any) -> ManualRef:
        """Issue a ref to target, starting to track it if needed."""
        ref = ManualRef(target)
        self._track(target).refs.append(ref)
        return ref

    def is_alive(self, ref: ManualRef) -> bool:
        return ref() is not None

    def dereference(self, ref: ManualRef) -> Optional[Any]:
        return ref()

    def identity_hash(self, obj: Any) -> int:
        return id(obj)

    def generation_of(self, ref: ManualRef) -> int:
        target = ref()
        if target is None:
            return 0
        tracked = self._tracked.get(id(target))
        if tracked is None or tracked.target is not target:
            return 0
        return tracked.generation

    # ============== External references ==============

    def retain(self, obj: Any) -> Any:
        """Record one external strong reference to obj. Returns obj."""
        self._track(obj).retains += 1
        return obj

    def release(self, obj: Any) -> None:
        """Drop one external strong reference recorded by retain()."""
        tracked = self._tracked.get(id(obj))
        if tracked is None or tracked.target is not obj or tracked.retains == 0:
            raise InvalidArgumentError(
                "release() without a matching retain()",
                data={"type": type(obj).__name__},
            )
        tracked.retains -= 1

    def release_all(self) -> None:
        """Forget every external reference."""
        for tracked in self._tracked.values():
            tracked.retains = 0

    def on_expire(self, callback: ExpireCallback) -> None:
        """Register callback(target), fired once per reclaimed target."""
        self._callbacks.append(callback)

    # ============== Collection ==============

    def collect(self) -> int:
        """
        Run one collection cycle.

        Every unretained target is reclaimed and every survivor aged before
        any on_expire callback runs, so a raising callback leaves the
        manager consistent.

        Returns:
            Number of targets reclaimed
        """
        self.collections += 1
        doomed = [t for t in self._tracked.values() if t.retains == 0]
        reclaimed = [self._reclaim(tracked) for tracked in doomed]

        for tracked in self._tracked.values():
            tracked.generation = min(tracked.generation + 1, self.max_generation)

        logger.debug("Manual collection finished", data={
            "cycle": self.collections,
            "reclaimed": len(reclaimed),
            "survivors": len(self._tracked),
        })
        self._notify(reclaimed)
        return len(reclaimed)

    def expire(self, obj: Any) -> bool:
        """
        Reclaim obj now regardless of retains.

        Returns:
            False if obj was not tracked
        """
        tracked = self._tracked.get(id(obj))
        if tracked is None or tracked.target is not obj:
            return False
        self._notify([self._reclaim(tracked)])
        return True

    @property
    def tracked_count(self) -> int:
        """Number of targets currently held alive by the manager."""
        return len(self._tracked)

    def _track(self, obj: Any) -> _Tracked:
        if obj is None:
            raise InvalidArgumentError("Cannot track None")
        tracked = self._tracked.get(id(obj))
        if tracked is None or tracked.target is not obj:
            tracked = _Tracked(target=obj)
            self._tracked[id(obj)] = tracked
        return tracked

    def _reclaim(self, tracked: _Tracked) -> Any:
        del self._tracked[id(tracked.target)]
        target = tracked.target
        for ref in tracked.refs:
            ref._clear()
        tracked.refs.clear()
        tracked.target = None
        return target

    def _notify(self, targets: List[Any]) -> None:
        for target in targets:
            for callback in self._callbacks:
                callback(target)

    def __repr__(self) -> str:
        return (
            f"ManualMemoryManager(tracked={len(self._tracked)}, "
            f"collections={self.collections})"
        )
