"""In-process cache statistics (per process, reset on restart)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CacheStatsSnapshot:
    """Point-in-time copy of the counters plus derived values."""

    hits: int
    misses: int
    sets: int
    deletes: int
    hit_rate: float
    is_available: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class CacheStats:
    """Monotonic hit/miss/set/delete counters."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0

    @property
    def hit_rate(self) -> float:
        """Percentage of lookups that were hits; 0.0 before any lookup."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total * 100

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0

    def snapshot(self, is_available: bool) -> CacheStatsSnapshot:
        return CacheStatsSnapshot(
            hits=self.hits,
            misses=self.misses,
            sets=self.sets,
            deletes=self.deletes,
            hit_rate=self.hit_rate,
            is_available=is_available,
        )
