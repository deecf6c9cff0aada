"""Backend connector: lazily builds and memoizes the Redis client.

The connector is constructed once at startup (see app.core.lifespan) and
injected into CacheService. Missing configuration is not an error: the
connector simply reports no handle and every cache operation becomes a
miss or no-op. A failed construction is not memoized, so the next call
tries again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from urllib.parse import urlsplit

import redis.asyncio as redis

from app.core.config import Settings
from app.core.constants import CACHE_TLS_PORT

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], redis.Redis]


def to_redis_url(url: str) -> str:
    """Map a REST-style http(s) endpoint to TLS Redis on the same host.

    redis://, rediss:// and unix:// URLs are returned unchanged.
    """
    parts = urlsplit(url)
    if parts.scheme in ("http", "https") and parts.hostname:
        return f"rediss://{parts.hostname}:{CACHE_TLS_PORT}"
    return url


def default_client_factory(url: str, token: str, socket_timeout: float = 5.0) -> redis.Redis:
    """Build a redis.asyncio client. Does not connect (no round trip)."""
    return redis.Redis.from_url(
        to_redis_url(url),
        password=token,
        decode_responses=True,
        socket_connect_timeout=socket_timeout,
        socket_timeout=socket_timeout,
    )


class BackendConnector:
    """Single shared handle to the remote key-value backend.

    Args:
        url: Backend URL (BACKEND_URL). Empty or None disables caching.
        token: Access token (BACKEND_TOKEN). Empty or None disables caching.
        client_factory: Optional callable(url, token) -> client, for tests or DI.
    """

    def __init__(
        self,
        url: str | None,
        token: str | None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._url = url or None
        self._token = token or None
        self._client_factory = client_factory or default_client_factory
        self._client: redis.Redis | None = None
        self._warned_unconfigured = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client_factory: ClientFactory | None = None,
    ) -> BackendConnector:
        """Build a connector from BACKEND_URL / BACKEND_TOKEN settings."""
        if client_factory is None:
            timeout = settings.backend_socket_timeout

            def client_factory(url: str, token: str) -> redis.Redis:
                return default_client_factory(url, token, socket_timeout=timeout)

        return cls(
            settings.backend_url,
            settings.backend_token.get_secret_value(),
            client_factory=client_factory,
        )

    @property
    def configured(self) -> bool:
        """True when both URL and token are present."""
        return self._url is not None and self._token is not None

    def get_handle(self) -> redis.Redis | None:
        """Return the memoized client, building it on first use.

        Returns:
            Redis client, or None when unconfigured or construction failed.
        """
        if self._client is not None:
            return self._client
        if self._url is None or self._token is None:
            if not self._warned_unconfigured:
                logger.warning(
                    "Cache backend not configured (BACKEND_URL/BACKEND_TOKEN missing). "
                    "Caching disabled."
                )
                self._warned_unconfigured = True
            return None
        try:
            client = self._client_factory(self._url, self._token)
        except (redis.RedisError, ValueError, TypeError) as e:
            logger.error("Failed to initialize cache backend client: %s", e)
            return None
        self._client = client
        logger.info("Cache backend client initialized")
        return client

    def is_available(self) -> bool:
        """Return True if a backend handle exists or can be built."""
        return self.get_handle() is not None

    def reset(self) -> None:
        """Forget the memoized client; the next get_handle() rebuilds it."""
        self._client = None

    async def close(self) -> None:
        """Close the client's connection pool (app shutdown) and forget it."""
        client = self._client
        self._client = None
        if client is None:
            return
        try:
            await client.aclose()
            logger.info("Cache backend client closed")
        except redis.RedisError as e:
            logger.warning("Error closing cache backend client: %s", e)
