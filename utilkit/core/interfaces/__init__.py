"""
Interfaces - Protocols for Dependency Injection.

These protocols define contracts that implementations must follow.

Example:
    def build_cache(memory: MemoryManagerProtocol) -> WeakValueDictionary:
        # Works with any memory manager
        return WeakValueDictionary(memory=memory)
"""

from .memory_protocol import MemoryManagerProtocol

__all__ = [
    'MemoryManagerProtocol',
]
