"""Cache protocol for request handlers and dependencies (DIP)."""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from app.infrastructure.cache.stats import CacheStatsSnapshot


@runtime_checkable
class CacheProtocol(Protocol):
    """Public cache surface. Implementations never raise on backend failure."""

    def is_available(self) -> bool:
        """Return True if the backend is configured and usable."""
        ...

    async def get(self, key: str, default: Any = None) -> Any:
        """Return cached value or default."""
        ...

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
        tags: Iterable[str] | str | None = None,
    ) -> bool:
        """Store value with optional TTL in seconds."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Remove all keys matching a glob pattern; return the count."""
        ...

    async def invalidate_by_tags(self, tags: Iterable[str] | str) -> int:
        """Remove keys carrying any tag as a key segment; return the count."""
        ...

    async def exists(self, key: str) -> bool:
        """Return True if key is present."""
        ...

    def get_stats(self) -> CacheStatsSnapshot:
        """Return hit/miss/set/delete counters and availability."""
        ...

    def reset_stats(self) -> None:
        """Zero the counters."""
        ...

    async def clear_all(self) -> bool:
        """Flush the whole backend database."""
        ...
