"""Redis-based cache service fronting expensive read paths.

Caches course structure, enrollment trees, admin aggregates and grand
test questions. Every value is stored inside a CacheEntry envelope with
its write time and TTL, so expiry is enforced by Redis (EX) and again on
read. All operations are fail-open: an unconfigured or failing backend
turns reads into misses and writes into no-ops, never into exceptions.
Key format lives in app.infrastructure.cache.keys.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from functools import wraps
from typing import Any, NamedTuple

import redis.asyncio as redis

from app.core.constants import CACHE_DEFAULT_TTL, CACHE_DELETE_CHUNK_SIZE
from app.domain.exceptions import CacheError
from app.infrastructure.cache.connector import BackendConnector
from app.infrastructure.cache.envelope import CacheEntry
from app.infrastructure.cache.keys import tag_pattern
from app.infrastructure.cache.stats import CacheStats, CacheStatsSnapshot
from app.shared.telemetry.tracing import add_span_attributes, set_span_error, traced

logger = logging.getLogger(__name__)

# With decode_responses=True a reply that is not valid UTF-8 (another writer
# shares the keyspace) surfaces as UnicodeDecodeError, not RedisError.
BACKEND_ERRORS: tuple[type[Exception], ...] = (redis.RedisError, UnicodeDecodeError)


def _tag_list(tags: Iterable[str] | str | None) -> list[str]:
    """Normalize tags; a bare string is one tag, not a sequence of characters."""
    if tags is None:
        return []
    if isinstance(tags, str):
        return [tags]
    return list(tags)


class CacheLookup(NamedTuple):
    """Result of a cache read: hit flag and the cached value (None on miss)."""

    hit: bool
    value: Any = None


MISS = CacheLookup(hit=False)


class CacheService:
    """Async Redis cache service with envelope TTL checks, stats and invalidation.

    The Redis client comes from an injected BackendConnector, built at
    startup from BACKEND_URL / BACKEND_TOKEN. No method raises on backend
    failure.
    """

    def __init__(
        self,
        connector: BackendConnector,
        default_ttl: int = CACHE_DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
        ttl_resolver: Callable[[str], int] | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            connector: Provides the (lazily built) Redis client.
            default_ttl: TTL in seconds used when set() gets none.
            clock: Returns seconds since the epoch; injectable for tests.
            ttl_resolver: Optional callable(key) -> TTL used when set() gets
                none (per-domain TTLs, see keys.ttl_for_key).
        """
        self.connector = connector
        self.default_ttl = default_ttl
        self._clock = clock
        self._ttl_resolver = ttl_resolver
        self._stats = CacheStats()

    def is_available(self) -> bool:
        """Return True if a backend client exists or can be built."""
        return self.connector.is_available()

    def _miss(self) -> CacheLookup:
        self._stats.misses += 1
        add_span_attributes(cache_hit=False)
        return MISS

    @traced("cache.lookup")
    async def lookup(self, key: str) -> CacheLookup:
        """Read key and report whether it was a hit.

        Unlike get(), distinguishes a cached None from a miss. Stale
        entries (older than their TTL by the service clock) are deleted
        and reported as misses.

        Args:
            key: Cache key (use app.infrastructure.cache.keys builders).

        Returns:
            CacheLookup(hit, value).
        """
        add_span_attributes(cache_key=key)
        client = self.connector.get_handle()
        if client is None:
            return self._miss()
        try:
            raw = await client.get(key)
        except BACKEND_ERRORS as e:
            logger.exception("Cache get error for key %s", key)
            set_span_error(e)
            return self._miss()
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return self._miss()

        try:
            entry = CacheEntry.from_json(raw, key=key)
        except CacheError as e:
            logger.warning("Cache entry for key %s unreadable: %s", key, e.message)
            return self._miss()

        now = self._clock()
        if entry.is_expired(now):
            logger.debug(
                "Cache STALE: %s (age %.1fs > ttl %ss)", key, entry.age(now), entry.ttl_seconds
            )
            await self.delete(key)
            return self._miss()

        self._stats.hits += 1
        add_span_attributes(cache_hit=True)
        logger.debug("Cache HIT: %s", key)
        return CacheLookup(hit=True, value=entry.data)

    async def get(self, key: str, default: Any = None) -> Any:
        """Return cached value or default if missing, stale or unavailable.

        Args:
            key: Cache key.
            default: Returned on miss.

        Returns:
            Cached value or default.
        """
        found = await self.lookup(key)
        return found.value if found.hit else default

    @traced("cache.set")
    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
        tags: Iterable[str] | str | None = None,
    ) -> bool:
        """Store value with TTL. Returns True on success.

        Args:
            key: Cache key.
            value: Value to cache (JSON-serializable).
            ttl: Time-to-live in seconds (default: ttl_resolver(key), else default_ttl).
            tags: Advisory labels stored in the envelope; a bare string is one tag.

        Returns:
            True if stored, False otherwise.
        """
        add_span_attributes(cache_key=key)
        client = self.connector.get_handle()
        if client is None:
            return False
        if ttl is None:
            ttl = self._ttl_resolver(key) if self._ttl_resolver else self.default_ttl
        if ttl <= 0:
            logger.warning("Cache set refused for key %s: ttl must be positive, got %s", key, ttl)
            return False

        tag_list = _tag_list(tags)
        entry = CacheEntry(
            data=value,
            written_at=self._clock(),
            ttl_seconds=ttl,
            tags=tuple(tag_list) if tag_list else None,
        )
        try:
            payload = entry.to_json()
        except (TypeError, ValueError):
            logger.exception("Cache set error for key %s: value is not JSON-serializable", key)
            return False
        try:
            await client.set(key, payload, ex=ttl)
        except BACKEND_ERRORS as e:
            logger.exception("Cache set error for key %s", key)
            set_span_error(e)
            return False

        self._stats.sets += 1
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return True

    @traced("cache.delete")
    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns True if the backend removed it.

        Args:
            key: Cache key to delete.

        Returns:
            True if deleted, False if absent, unavailable or on error.
        """
        add_span_attributes(cache_key=key)
        client = self.connector.get_handle()
        if client is None:
            return False
        try:
            removed = int(await client.delete(key) or 0)
        except BACKEND_ERRORS as e:
            logger.exception("Cache delete error for key %s", key)
            set_span_error(e)
            return False
        self._stats.deletes += removed
        if removed:
            logger.debug("Cache DELETE: %s", key)
        return removed > 0

    @traced("cache.delete_pattern")
    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern using SCAN + batched UNLINK (non-blocking).

        Uses scan_iter to avoid KEYS blocking; collects keys in chunks and
        UNLINKs each chunk in one pipeline round trip.

        Args:
            pattern: Redis SCAN match pattern (e.g. enrollment:*:structure).

        Returns:
            Number of keys deleted.
        """
        add_span_attributes(cache_pattern=pattern)
        client = self.connector.get_handle()
        if client is None:
            return 0
        deleted = 0
        try:
            chunk: list[str] = []
            async for key in client.scan_iter(match=pattern):
                chunk.append(key)
                if len(chunk) >= CACHE_DELETE_CHUNK_SIZE:
                    deleted += await self._unlink(client, chunk)
                    chunk = []
            if chunk:
                deleted += await self._unlink(client, chunk)
        except BACKEND_ERRORS as e:
            logger.exception("Cache delete_pattern error for %s", pattern)
            set_span_error(e)
            # Keys already unlinked before the failure still count.
            self._stats.deletes += deleted
            return 0

        self._stats.deletes += deleted
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    @staticmethod
    async def _unlink(client: redis.Redis, keys: list[str]) -> int:
        async with client.pipeline(transaction=False) as pipe:
            pipe.unlink(*keys)
            results = await pipe.execute()
        return sum(int(r or 0) for r in results)

    @traced("cache.invalidate_by_tags")
    async def invalidate_by_tags(self, tags: Iterable[str] | str) -> int:
        """Delete keys containing any tag as an inner colon-delimited segment.

        Matches on key shape (*:tag:*) only; the tags stored in entry
        envelopes are not consulted.

        Args:
            tags: Tag strings (e.g. ["questions"]); a bare string is one tag.

        Returns:
            Total number of keys deleted.
        """
        tag_list = _tag_list(tags)
        add_span_attributes(cache_tag_count=len(tag_list))
        total = 0
        for tag in tag_list:
            total += await self.delete_pattern(tag_pattern(tag))
        return total

    @traced("cache.exists")
    async def exists(self, key: str) -> bool:
        """Return True if key is present in the backend."""
        add_span_attributes(cache_key=key)
        client = self.connector.get_handle()
        if client is None:
            return False
        try:
            return int(await client.exists(key) or 0) > 0
        except BACKEND_ERRORS as e:
            logger.exception("Cache exists error for key %s", key)
            set_span_error(e)
            return False

    def get_stats(self) -> CacheStatsSnapshot:
        """Return counters, hit rate (percent) and backend availability."""
        return self._stats.snapshot(is_available=self.is_available())

    def reset_stats(self) -> None:
        """Zero all counters. Stored entries are untouched."""
        self._stats.reset()

    @traced("cache.clear_all")
    async def clear_all(self) -> bool:
        """Clear entire cache database. Use with caution.

        Affects every process sharing the backend, not just this one.

        Returns:
            True if cleared, False otherwise.
        """
        client = self.connector.get_handle()
        if client is None:
            return False
        try:
            await client.flushdb()
        except BACKEND_ERRORS as e:
            logger.exception("Cache clear error")
            set_span_error(e)
            return False
        self._stats.deletes += 1
        logger.warning("Cache CLEARED: all keys deleted")
        return True

    async def get_or_set(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: int | None = None,
        tags: Iterable[str] | str | None = None,
    ) -> Any:
        """Read-through: return cached value, or await loader() and cache its result.

        Loader exceptions propagate; nothing is cached in that case.
        Concurrent misses for the same key each call loader.
        """
        found = await self.lookup(key)
        if found.hit:
            return found.value
        value = await loader()
        await self.set(key, value, ttl=ttl, tags=tags)
        return value


def _resolve_cache(
    args: tuple[Any, ...], kwargs: dict[str, Any]
) -> tuple[CacheService | None, tuple[Any, ...], dict[str, Any]]:
    """Resolve CacheService and args/kwargs for the wrapped function.

    Resolution order: keyword "cache", then args[0].cache, then args[0] if CacheService.
    """
    if "cache" in kwargs and isinstance(kwargs.get("cache"), CacheService):
        cache = kwargs["cache"]
        call_kwargs = {k: v for k, v in kwargs.items() if k != "cache"}
        return cache, args, call_kwargs
    if args:
        first = args[0]
        if isinstance(first, CacheService):
            return first, args[1:], kwargs
        cache_attr = getattr(first, "cache", None)
        if isinstance(cache_attr, CacheService):
            return cache_attr, args[1:], kwargs
    return None, args, kwargs


def cached(
    key_prefix: str,
    ttl: int | None = None,
    key_builder: Callable[..., str] | None = None,
    tags: Iterable[str] | str | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to cache async function results.

    The wrapped function must receive a CacheService in one of these ways:
    - keyword argument "cache" (recommended, e.g. from Depends),
    - first argument has a .cache attribute that is a CacheService,
    - or first argument is the CacheService instance.

    Args:
        key_prefix: Prefix for cache key (e.g. 'course').
        ttl: Time-to-live in seconds (service default when None).
        key_builder: Optional callable(*args, **kwargs) -> key; else built from args/kwargs.
        tags: Advisory tags stored with each entry.

    Returns:
        Decorator that caches return value when CacheService is resolved.
    """
    tag_list = _tag_list(tags) or None

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            cache, func_args, call_kwargs = _resolve_cache(args, kwargs)
            if cache is None:
                return await func(*args, **kwargs)
            if key_builder:
                cache_key = key_builder(*func_args, **call_kwargs)
            else:
                parts = [str(a) for a in func_args]
                parts.extend(f"{k}={v}" for k, v in sorted(call_kwargs.items()))
                cache_key = f"{key_prefix}:{':'.join(parts)}"
            return await cache.get_or_set(
                cache_key, lambda: func(*args, **kwargs), ttl=ttl, tags=tag_list
            )

        return wrapper

    return decorator
