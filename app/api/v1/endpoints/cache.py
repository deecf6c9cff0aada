"""Admin cache API: stats, targeted invalidation and full flush.

Operational routes, not used by request paths. Guarded by the
X-Cache-Admin-Token shared secret and rate limited. The keyspace is
shared by every instance, so invalidation and flush are system-wide.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import get_cache, require_cache_admin
from app.core.limiter import limit_admin_cache_reads, limit_admin_cache_writes
from app.infrastructure.cache import CacheProtocol
from app.schemas.cache import (
    CacheClearResponse,
    CacheInvalidateRequest,
    CacheInvalidateResponse,
    CacheStatsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_cache_admin)])


@router.get("/stats", response_model=CacheStatsResponse)
@limit_admin_cache_reads
async def get_cache_stats(
    request: Request,
    cache: CacheProtocol = Depends(get_cache),
) -> CacheStatsResponse:
    """Return this process's hit/miss/set/delete counters and backend availability."""
    return CacheStatsResponse(**cache.get_stats().to_dict())


@router.post("/stats/reset", status_code=204)
@limit_admin_cache_writes
async def reset_cache_stats(
    request: Request,
    cache: CacheProtocol = Depends(get_cache),
) -> Response:
    """Zero this process's counters. Cached entries are untouched."""
    cache.reset_stats()
    return Response(status_code=204)


@router.post("/invalidate", response_model=CacheInvalidateResponse)
@limit_admin_cache_writes
async def invalidate_cache(
    request: Request,
    body: CacheInvalidateRequest,
    cache: CacheProtocol = Depends(get_cache),
) -> CacheInvalidateResponse:
    """Delete exact keys, glob patterns and tag-shaped keys; return how many went."""
    deleted = 0
    for key in body.keys:
        if await cache.delete(key):
            deleted += 1
    for pattern in body.patterns:
        deleted += await cache.delete_pattern(pattern)
    if body.tags:
        deleted += await cache.invalidate_by_tags(body.tags)
    logger.info(
        "Admin cache invalidation: keys=%d patterns=%d tags=%d deleted=%d",
        len(body.keys),
        len(body.patterns),
        len(body.tags),
        deleted,
    )
    return CacheInvalidateResponse(deleted=deleted)


@router.delete("", response_model=CacheClearResponse)
@limit_admin_cache_writes
async def clear_cache(
    request: Request,
    cache: CacheProtocol = Depends(get_cache),
) -> CacheClearResponse:
    """Flush the entire cache database (all domains, all instances)."""
    cleared = await cache.clear_all()
    return CacheClearResponse(cleared=cleared)
