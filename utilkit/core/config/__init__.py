"""
Config - Library configuration.

- settings.py: Settings from environment
- memory.py: Memory manager factory
"""

from .settings import Settings, MemoryBackend, get_settings, reset_settings
from .memory import create_memory_manager, get_memory_manager, set_memory_manager

__all__ = [
    # Settings
    "Settings",
    "MemoryBackend",
    "get_settings",
    "reset_settings",
    # Memory
    "create_memory_manager",
    "get_memory_manager",
    "set_memory_manager",
]
