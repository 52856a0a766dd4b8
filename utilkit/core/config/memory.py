"""
Memory Factory - Create memory manager based on configuration.

Uses factory pattern for dependency injection.
"""

from typing import Optional
from ..errors import ConfigurationError
from ..interfaces import MemoryManagerProtocol
from .settings import MemoryBackend, get_settings


_default_manager: Optional[MemoryManagerProtocol] = None


def create_memory_manager(
    backend: Optional[MemoryBackend] = None,
    **kwargs
) -> MemoryManagerProtocol:
    """
    Factory for memory managers.

    Args:
        backend: Memory backend (default from settings)
        **kwargs: Backend-specific arguments

    Returns:
        MemoryManagerProtocol implementation

    Example:
        memory = create_memory_manager()  # Uses settings
        memory = create_memory_manager(MemoryBackend.MANUAL, max_generation=1)
    """
    settings = get_settings()
    backend = backend or settings.memory_backend

    if backend == MemoryBackend.CPYTHON:
        from ..connectors.cpython_memory import CPythonMemoryManager
        return CPythonMemoryManager()

    elif backend == MemoryBackend.MANUAL:
        from ..connectors.manual_memory import ManualMemoryManager
        max_generation = kwargs.get('max_generation', settings.manual_max_generation)
        return ManualMemoryManager(max_generation=max_generation)

    raise ConfigurationError(
        f"Unknown memory backend: {backend}",
        data={"backend": str(backend)},
    )


def get_memory_manager() -> MemoryManagerProtocol:
    """Process-wide default memory manager used by collections."""
    global _default_manager
    if _default_manager is None:
        _default_manager = create_memory_manager()
    return _default_manager


def set_memory_manager(manager: Optional[MemoryManagerProtocol]) -> None:
    """Replace the default memory manager (None resets to settings)."""
    global _default_manager
    _default_manager = manager
