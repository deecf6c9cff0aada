"""Tests for cache wiring in app.core.lifespan."""

import pytest
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.lifespan import build_cache_service, create_lifespan


async def test_shutdown_closes_cache_client(admin_app: FastAPI, fake_redis) -> None:
    async with create_lifespan(admin_app):
        assert admin_app.state.cache.is_available() is True
    assert fake_redis.closed is True


def test_build_cache_service_uses_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BACKEND_URL", "redis://localhost:6399/0")
    monkeypatch.setenv("BACKEND_TOKEN", "tok")
    monkeypatch.setenv("CACHE_DEFAULT_TTL", "120")
    get_settings.cache_clear()

    service = build_cache_service(get_settings())
    assert service.default_ttl == 120
    assert service.connector.configured is True


def test_build_cache_service_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BACKEND_URL", "redis://localhost:6399/0")
    monkeypatch.setenv("BACKEND_TOKEN", "tok")
    monkeypatch.setenv("CACHE_ENABLED", "false")
    get_settings.cache_clear()

    service = build_cache_service(get_settings())
    assert service.connector.configured is False
    assert service.is_available() is False


def test_non_positive_ttl_setting_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CACHE_DEFAULT_TTL", "0")
    get_settings.cache_clear()
    with pytest.raises(ValueError):
        get_settings()


async def test_build_cache_service_applies_domain_ttls(
    monkeypatch: pytest.MonkeyPatch, connector, fake_redis
) -> None:
    monkeypatch.setenv("CACHE_TTL_ENROLLMENT_STRUCTURE", "120")
    monkeypatch.setenv("CACHE_TTL_GRANDTEST_QUESTIONS", "240")
    get_settings.cache_clear()

    service = build_cache_service(get_settings())
    service.connector = connector

    assert await service.set("enrollment:e1:structure", {"modules": []}) is True
    assert await service.set("grandtest:questions:c1", [1, 2]) is True
    assert fake_redis.expirations == {
        "enrollment:e1:structure": 120,
        "grandtest:questions:c1": 240,
    }
