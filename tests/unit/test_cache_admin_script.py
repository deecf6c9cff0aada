"""Tests for scripts.cache_admin (operational invalidation and flush)."""

import pytest

from app.infrastructure.cache import CacheService
from scripts import cache_admin


@pytest.fixture
def script_cache(monkeypatch: pytest.MonkeyPatch, cache: CacheService) -> CacheService:
    monkeypatch.setattr(cache_admin, "build_cache_service", lambda settings: cache)
    return cache


async def test_invalidate_pattern(script_cache: CacheService, capsys: pytest.CaptureFixture) -> None:
    await script_cache.set("enrollment:e1:structure", 1, ttl=60)
    await script_cache.set("enrollment:e1:progress", 1, ttl=60)

    assert await cache_admin.main(["invalidate-pattern", "enrollment:*:structure"]) == 0
    assert "Total deleted: 1" in capsys.readouterr().out
    assert await script_cache.exists("enrollment:e1:progress") is True


async def test_invalidate_tags(script_cache: CacheService) -> None:
    await script_cache.set("grandtest:questions:c1", 1, ttl=60)
    assert await cache_admin.main(["invalidate-tags", "questions"]) == 0
    assert await script_cache.exists("grandtest:questions:c1") is False


async def test_clear_requires_confirmation(script_cache: CacheService, fake_redis) -> None:
    await script_cache.set("course:c1:full", 1, ttl=60)
    assert await cache_admin.main(["clear"]) == 2
    assert fake_redis.store != {}
    assert await cache_admin.main(["clear", "--yes"]) == 0
    assert fake_redis.store == {}


async def test_unconfigured_backend_fails(
    monkeypatch: pytest.MonkeyPatch, unconfigured_cache: CacheService
) -> None:
    monkeypatch.setattr(cache_admin, "build_cache_service", lambda settings: unconfigured_cache)
    assert await cache_admin.main(["exists", "course:c1:full"]) == 1


async def test_usage_errors(script_cache: CacheService) -> None:
    assert await cache_admin.main([]) == 2
    assert await cache_admin.main(["invalidate-pattern"]) == 2
