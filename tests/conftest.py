"""Pytest configuration and fixtures for learnhub.

Cache tests run against FakeRedis, an in-memory async stand-in for the
redis.asyncio commands CacheService uses, injected through the
connector's client factory. FakeRedis never expires keys on its own, so
it also plays a backend whose TTL purge lags behind.
"""

import re
from collections.abc import AsyncIterator, Iterator

import pytest
import redis.asyncio as redis
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.api.v1.dependencies import CACHE_ADMIN_HEADER
from app.core.config import get_settings
from app.core.limiter import limiter
from app.infrastructure.cache import BackendConnector, CacheService
from app.main import create_app

_CACHE_ENV_VARS = (
    "BACKEND_URL",
    "BACKEND_TOKEN",
    "CACHE_ENABLED",
    "CACHE_ADMIN_TOKEN",
    "CACHE_DEFAULT_TTL",
    "CACHE_TTL_COURSE",
    "CACHE_TTL_ENROLLMENT_STRUCTURE",
    "CACHE_TTL_ADMIN_ENROLLMENTS",
    "CACHE_TTL_GRANDTEST_QUESTIONS",
    "TELEMETRY_ENABLED",
)

TEST_ADMIN_TOKEN = "test-cache-admin-token"


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a Redis MATCH glob (*, ?, [...], backslash escapes) to a regex."""
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "*":
            out.append(".*")
        elif ch == "?":
            out.append(".")
        elif ch == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(ch))
            else:
                out.append("[" + pattern[i + 1 : end].replace("\\", "\\\\") + "]")
                i = end + 1
                continue
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("".join(out), re.DOTALL)


class FakePipeline:
    """Buffers UNLINK calls and applies them on execute()."""

    def __init__(self, backend: "FakeRedis") -> None:
        self._backend = backend
        self._ops: list[tuple[str, ...]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc: object) -> None:
        self._ops = []

    def unlink(self, *keys: str) -> "FakePipeline":
        self._ops.append(keys)
        return self

    async def execute(self) -> list[int]:
        self._backend._check("execute")
        results = [self._backend._remove(keys) for keys in self._ops]
        self._ops = []
        return results


class FakeRedis:
    """In-memory async Redis subset: get/set/delete/exists/scan_iter/pipeline/flushdb.

    Args:
        fail: When True every command raises redis.ConnectionError.
    """

    def __init__(self, fail: bool = False) -> None:
        self.store: dict[str, str] = {}
        self.expirations: dict[str, int | None] = {}
        self.fail = fail
        self.closed = False

    def _check(self, op: str) -> None:
        if self.fail:
            raise redis.ConnectionError(f"fake backend down during {op}")

    def _remove(self, keys: tuple[str, ...]) -> int:
        removed = 0
        for key in keys:
            if key in self.store:
                del self.store[key]
                self.expirations.pop(key, None)
                removed += 1
        return removed

    async def get(self, key: str) -> str | None:
        self._check("get")
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check("set")
        self.store[key] = value
        self.expirations[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self._check("delete")
        return self._remove(keys)

    async def exists(self, *keys: str) -> int:
        self._check("exists")
        return sum(1 for key in keys if key in self.store)

    async def flushdb(self) -> bool:
        self._check("flushdb")
        self.store.clear()
        self.expirations.clear()
        return True

    async def scan_iter(self, match: str | None = None) -> AsyncIterator[str]:
        self._check("scan")
        regex = _glob_to_regex(match) if match else None
        for key in list(self.store):
            if regex is None or regex.fullmatch(key):
                yield key

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced clock returning seconds since the epoch."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test with cache-related env unset and fresh settings."""
    for name in _CACHE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    limiter.reset()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def connector(fake_redis: FakeRedis) -> BackendConnector:
    """Configured connector whose client is the in-memory fake."""
    return BackendConnector(
        "redis://cache.test:6379/0",
        "test-token",
        client_factory=lambda url, token: fake_redis,
    )


@pytest.fixture
def cache(connector: BackendConnector, clock: FakeClock) -> CacheService:
    return CacheService(connector, clock=clock)


@pytest.fixture
def unconfigured_cache() -> CacheService:
    """Cache service with neither BACKEND_URL nor BACKEND_TOKEN."""
    return CacheService(BackendConnector(url=None, token=None))


@pytest.fixture
def broken_cache(clock: FakeClock) -> CacheService:
    """Cache service whose backend raises ConnectionError on every command."""
    backend = FakeRedis(fail=True)
    connector = BackendConnector(
        "redis://cache.test:6379/0", "test-token", client_factory=lambda url, token: backend
    )
    return CacheService(connector, clock=clock)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client against a freshly built app with default (unconfigured) cache."""
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {CACHE_ADMIN_HEADER: TEST_ADMIN_TOKEN}


@pytest.fixture
def admin_app(monkeypatch: pytest.MonkeyPatch, cache: CacheService) -> FastAPI:
    """App with CACHE_ADMIN_TOKEN set and the fake-backed cache installed."""
    monkeypatch.setenv("CACHE_ADMIN_TOKEN", TEST_ADMIN_TOKEN)
    get_settings.cache_clear()
    app = create_app()
    app.state.cache = cache
    return app


@pytest.fixture
async def admin_client(admin_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=admin_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
