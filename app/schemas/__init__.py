"""Pydantic request/response schemas for the API."""

from app.schemas.cache import (
    CacheClearResponse,
    CacheInvalidateRequest,
    CacheInvalidateResponse,
    CacheStatsResponse,
)
from app.schemas.health import HealthResponse, ReadinessResponse

__all__ = [
    "CacheClearResponse",
    "CacheInvalidateRequest",
    "CacheInvalidateResponse",
    "CacheStatsResponse",
    "HealthResponse",
    "ReadinessResponse",
]
