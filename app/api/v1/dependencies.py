"""Presentation-layer dependency injection.

Provides FastAPI Depends() for the cache service (app.state.cache, built
in create_app) and the shared-secret guard for admin cache routes.
Routes depend only on these dependencies, not on infra directly.
"""

from __future__ import annotations

import secrets

from fastapi import HTTPException, Request

from app.core.config import get_settings
from app.domain.exceptions import AuthenticationException
from app.infrastructure.cache import CacheProtocol

CACHE_ADMIN_HEADER = "X-Cache-Admin-Token"


def get_cache(request: Request) -> CacheProtocol:
    """Return the application's cache service.

    Always present: with caching disabled it is a service over an
    unconfigured connector, so every call is a miss or no-op.
    """
    return request.app.state.cache


def require_cache_admin(request: Request) -> None:
    """Guard admin cache routes with the CACHE_ADMIN_TOKEN shared secret.

    Raises:
        HTTPException: 503 when CACHE_ADMIN_TOKEN is not set.
        AuthenticationException: When the header is missing or wrong.
    """
    settings = get_settings()
    if settings.cache_admin_token is None or not settings.cache_admin_token.get_secret_value():
        raise HTTPException(
            status_code=503,
            detail="Cache administration is not configured (CACHE_ADMIN_TOKEN is not set).",
        )
    provided = request.headers.get(CACHE_ADMIN_HEADER, "")
    expected = settings.cache_admin_token.get_secret_value()
    if not provided or not secrets.compare_digest(provided.encode(), expected.encode()):
        raise AuthenticationException("Invalid cache admin token")
