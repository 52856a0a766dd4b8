"""
utilkit - General-purpose utility toolkit.

- collections/  - Weak-reference-backed caches
- core/         - Config, interfaces, memory manager connectors, errors
- common/       - Logging infrastructure
"""

from utilkit.collections import (
    WeakHandle,
    WeakIdentityMap,
    WeakValueDictionary,
    WeakCacheStats,
)
from utilkit.core.errors import ToolkitError, InvalidArgumentError

__version__ = "0.1.0"

__all__ = [
    "WeakHandle",
    "WeakIdentityMap",
    "WeakValueDictionary",
    "WeakCacheStats",
    "ToolkitError",
    "InvalidArgumentError",
]
