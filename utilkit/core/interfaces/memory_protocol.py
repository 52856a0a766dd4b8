"""
Memory Manager Protocol - Interface to the host memory manager.

Weak collections never decide when an object dies. They ask the host
memory manager through this capability and react to its answers.

Implementations:
- CPythonMemoryManager (utilkit.core.connectors.cpython_memory)
- ManualMemoryManager (utilkit.core.connectors.manual_memory)
"""

from typing import Protocol, Optional, Any, runtime_checkable


@runtime_checkable
class MemoryManagerProtocol(Protocol):
    """Protocol for host memory managers (DI interface)."""

    def create_weak(self, target: Any) -> Any:
        """Create an opaque weak reference to target."""
        ...

    def is_alive(self, ref: Any) -> bool:
        """Probe once: has the referent not been reclaimed yet?"""
        ...

    def dereference(self, ref: Any) -> Optional[Any]:
        """Probe once: return the referent, or None once reclaimed."""
        ...

    def identity_hash(self, obj: Any) -> int:
        """Hash derived from object identity, stable for its lifetime."""
        ...

    def generation_of(self, ref: Any) -> int:
        """Collector generation of the live referent of ref (0 without tiers).

        Must not scan the heap: cost is independent of the number of live
        objects.
        """
        ...
