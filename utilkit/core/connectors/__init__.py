"""
Connectors - Memory manager implementations.

- cpython_memory.py: weakref + gc (production)
- manual_memory.py: reference counting with explicit collection (tests, emulation)
"""

from .cpython_memory import CPythonMemoryManager, GenerationRef
from .manual_memory import ManualMemoryManager, ManualRef

__all__ = [
    "CPythonMemoryManager",
    "GenerationRef",
    "ManualMemoryManager",
    "ManualRef",
]
