"""
WeakHandle - One weakly-held reference with collection-invariant identity.

The identity hash is computed once, while the target is known to be alive,
and never recomputed. A handle keeps hashing the same way after its target
is reclaimed, so it can stay inside a hash bucket until it is scavenged.
"""

from typing import Any, Optional

from utilkit.core.config import get_memory_manager
from utilkit.core.errors import InvalidArgumentError
from utilkit.core.interfaces import MemoryManagerProtocol

DEAD_GENERATION = -1


class WeakHandle:
    """
    Weak reference to a single target.

    Equality:
        Two handles are equal if they are the same instance, or if both
        are alive and point at the very same object. A dead handle equals
        only itself.

    Liveness:
        Every call probes the memory manager once. After a probe has seen
        the target gone, the handle drops its reference and stays dead.
    """

    __slots__ = ("stored_hash", "_ref", "_memory")

    def __init__(self, target: Any, memory: Optional[MemoryManagerProtocol] = None):
        if target is None:
            raise InvalidArgumentError("WeakHandle target must not be None")
        self._memory = memory or get_memory_manager()
        self.stored_hash: int = self._memory.identity_hash(target)
        self._ref = self._memory.create_weak(target)

    @classmethod
    def dead(
        cls,
        stored_hash: int,
        memory: Optional[MemoryManagerProtocol] = None,
    ) -> 'WeakHandle':
        """Build a handle whose target is already gone."""
        handle = cls.__new__(cls)
        handle._memory = memory or get_memory_manager()
        handle.stored_hash = stored_hash
        handle._ref = None
        return handle

    def target(self) -> Optional[Any]:
        """The live target, or None once reclaimed."""
        if self._ref is None:
            return None
        obj = self._memory.dereference(self._ref)
        if obj is None:
            self._ref = None
        return obj

    def is_alive(self) -> bool:
        if self._ref is None:
            return False
        if self._memory.is_alive(self._ref):
            return True
        self._ref = None
        return False

    def generation(self) -> int:
        """Host generation of the live target, or DEAD_GENERATION. One probe."""
        target = self.target()
        if target is None:
            return DEAD_GENERATION
        return self._memory.generation_of(self._ref)

    def __hash__(self) -> int:
        return self.stored_hash

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, WeakHandle):
            return False
        mine = self.target()
        if mine is None:
            return False
        return mine is other.target()

    def __reduce__(self):
        # Dead targets are written as a None placeholder.
        return (_restore_handle, (self.target(), self.stored_hash))

    def __repr__(self) -> str:
        state = "alive" if self.is_alive() else "dead"
        return f"<WeakHandle {state} hash={self.stored_hash:#x}>"


def _restore_handle(target: Any, stored_hash: int) -> WeakHandle:
    if target is None:
        return WeakHandle.dead(stored_hash)
    return WeakHandle(target)
