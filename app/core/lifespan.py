"""Application lifespan: startup and shutdown.

Single place for infrastructure wiring (cache, telemetry). No business
logic here. The cache service itself is built in create_app via
build_cache_service (construction does no I/O), so it exists even when
lifespan events are not run, e.g. under httpx ASGITransport.
"""

import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import Settings, get_settings
from app.infrastructure.cache import BackendConnector, CacheService, ttl_for_key

logger = logging.getLogger(__name__)


def build_cache_service(settings: Settings) -> CacheService:
    """Build the cache service and its backend connector from settings.

    With CACHE_ENABLED=false the connector gets no URL/token, so every
    cache call is a miss or no-op (same path as missing BACKEND_URL).
    set() without an explicit ttl uses the per-domain CACHE_TTL_* settings.
    """
    if settings.cache_enabled:
        connector = BackendConnector.from_settings(settings)
    else:
        logger.info("Cache disabled by configuration (CACHE_ENABLED=false)")
        connector = BackendConnector(url=None, token=None)
    return CacheService(
        connector,
        default_ttl=settings.cache_default_ttl,
        ttl_resolver=partial(ttl_for_key, settings=settings),
    )


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: telemetry (if enabled), then a first cache handle attempt so
    misconfiguration is logged at boot rather than on the first request.
    Shutdown: cache client close, telemetry shutdown.
    """
    settings = get_settings()

    # ---- Startup ----
    if settings.telemetry_enabled:
        from app.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        telemetry.instrument_redis()
        logger.info("Telemetry initialized")

    cache: CacheService = app.state.cache
    if cache.is_available():
        logger.info("Cache backend ready")

    yield

    # ---- Shutdown ----
    await cache.connector.close()
    logger.info("Cache disconnected")

    from app.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
