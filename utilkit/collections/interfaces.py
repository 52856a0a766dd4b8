"""
Weak Collection Interfaces - Read-only status contract shared by weak collections.

Separates diagnostics (counts, liveness totals) from mutation so callers
that only report on a cache do not need write access to it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class WeakCacheStats:
    """Point-in-time counters of a weak collection."""
    count: int
    active_count: int

    @property
    def dead_count(self) -> int:
        """Entries whose target is gone but not yet scavenged or removed."""
        return self.count - self.active_count

    def to_dict(self) -> Dict[str, int]:
        return {
            'count': self.count,
            'active_count': self.active_count,
            'dead_count': self.dead_count,
        }


class WeakCacheStatusProvider(ABC):
    """
    Read-only interface for querying weak collection status.

    Invariant: active_count <= count at all times.
    """

    @property
    @abstractmethod
    def count(self) -> int:
        """Stored entries, dead or alive."""
        pass

    @property
    @abstractmethod
    def active_count(self) -> int:
        """Entries whose target is alive right now."""
        pass

    def stats(self) -> WeakCacheStats:
        """Snapshot of count and active_count."""
        return WeakCacheStats(count=self.count, active_count=self.active_count)
