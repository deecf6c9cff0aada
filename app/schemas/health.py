"""Health check API schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready.

    The cache is optional, so an unavailable cache is reported but does
    not make the service not-ready.
    """

    status: str = Field(default="ok", description="Readiness status")
    cache: Literal["available", "unavailable", "disabled"] = Field(
        ..., description="Cache backend state"
    )
