"""Health check endpoints, used for liveness and readiness probes."""

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_cache
from app.core.config import get_settings
from app.infrastructure.cache import CacheProtocol
from app.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(cache: CacheProtocol = Depends(get_cache)) -> ReadinessResponse:
    """Return 200 with the cache state.

    The cache only affects latency, so "unavailable" is reported but
    never turns readiness into a failure.
    """
    settings = get_settings()
    if not settings.cache_enabled or not settings.cache_configured:
        return ReadinessResponse(cache="disabled")
    return ReadinessResponse(cache="available" if cache.is_available() else "unavailable")
