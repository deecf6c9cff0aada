"""Cache entry envelope: the JSON object stored at every cache key.

Wraps the payload with its write time and TTL so that reads can reject
stale entries independently of the backend's own expiry.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from app.domain.exceptions import CacheError


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Stored wrapper around a cached value.

    Attributes:
        data: JSON-serializable payload.
        written_at: Seconds since the epoch when the entry was written.
        ttl_seconds: Lifetime in seconds; None relies on backend expiry only.
        tags: Advisory labels (not indexed; see CacheService.invalidate_by_tags).
    """

    data: Any
    written_at: float
    ttl_seconds: int | None = None
    tags: tuple[str, ...] | None = None

    def age(self, now: float) -> float:
        """Seconds elapsed since the entry was written."""
        return now - self.written_at

    def is_expired(self, now: float) -> bool:
        """True when a TTL is set and the entry is strictly older than it."""
        if self.ttl_seconds is None:
            return False
        return self.age(now) > self.ttl_seconds

    def to_json(self) -> str:
        """Serialize for storage. Raises TypeError/ValueError for non-JSON data."""
        return json.dumps(
            {
                "data": self.data,
                "written_at": self.written_at,
                "ttl": self.ttl_seconds,
                "tags": list(self.tags) if self.tags is not None else None,
            },
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, raw: str | bytes, key: str | None = None) -> CacheEntry:
        """Parse a stored envelope.

        Args:
            raw: Value returned by the backend.
            key: Key the value was read from (for error context).

        Returns:
            Decoded CacheEntry.

        Raises:
            CacheError: If raw is not a well-formed envelope.
        """
        try:
            obj = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise CacheError(f"Cache entry is not valid JSON: {e}", key=key) from e
        if not isinstance(obj, dict) or "data" not in obj or "written_at" not in obj:
            raise CacheError("Cache entry is missing data or written_at", key=key)

        written_at = obj["written_at"]
        ttl = obj.get("ttl")
        if isinstance(written_at, bool) or not isinstance(written_at, (int, float)):
            raise CacheError("Cache entry written_at is not a number", key=key)
        if ttl is not None and (isinstance(ttl, bool) or not isinstance(ttl, int)):
            raise CacheError("Cache entry ttl is not an integer", key=key)

        tags = obj.get("tags")
        return cls(
            data=obj["data"],
            written_at=float(written_at),
            ttl_seconds=ttl,
            tags=tuple(str(t) for t in tags) if isinstance(tags, list) else None,
        )
