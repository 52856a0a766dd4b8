"""
Collections - Weak-reference-backed associative caches.

- weak_handle.py: WeakHandle (identity + liveness primitive)
- weak_identity_map.py: WeakIdentityMap (weak keys by identity)
- weak_value_dictionary.py: WeakValueDictionary (strong keys, weak values)
"""

from .interfaces import WeakCacheStats, WeakCacheStatusProvider
from .weak_handle import WeakHandle
from .weak_identity_map import WeakIdentityMap
from .weak_value_dictionary import WeakValueDictionary, DEAD_GENERATION

__all__ = [
    "WeakCacheStats",
    "WeakCacheStatusProvider",
    "WeakHandle",
    "WeakIdentityMap",
    "WeakValueDictionary",
    "DEAD_GENERATION",
]
