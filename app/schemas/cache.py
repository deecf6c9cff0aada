"""Admin cache API schemas."""

from pydantic import BaseModel, Field


class CacheStatsResponse(BaseModel):
    """Response for GET /admin/cache/stats (per-process counters)."""

    hits: int = Field(..., ge=0)
    misses: int = Field(..., ge=0)
    sets: int = Field(..., ge=0)
    deletes: int = Field(..., ge=0)
    hit_rate: float = Field(..., ge=0, le=100, description="Hits as a percentage of lookups")
    is_available: bool = Field(..., description="Whether the cache backend is usable")


class CacheInvalidateRequest(BaseModel):
    """Body for POST /admin/cache/invalidate. All lists are optional."""

    keys: list[str] = Field(default_factory=list, description="Exact keys to delete")
    patterns: list[str] = Field(
        default_factory=list, description="Glob patterns (e.g. enrollment:*:structure)"
    )
    tags: list[str] = Field(
        default_factory=list, description="Tags matched as key segments (*:tag:*)"
    )


class CacheInvalidateResponse(BaseModel):
    """Number of keys removed by an invalidation request."""

    deleted: int = Field(..., ge=0)


class CacheClearResponse(BaseModel):
    """Result of flushing the cache database."""

    cleared: bool
