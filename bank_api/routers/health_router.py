"""
Health check and monitoring router.

Provides endpoints for health checks, readiness probes, and cache statistics.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..container import ServiceContainer
from ..dependencies import get_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = "bank-api"
    version: str = __version__


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    Used by load balancers and orchestrators for liveness probes.
    """
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc).isoformat())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
    summary="Readiness check",
    description="Check if service is ready to accept traffic (dependencies available)",
)
async def readiness_check(container: ServiceContainer = Depends(get_container)):
    """
    Readiness check.

    Checks both relational stores and the branch document store.
    Returns 200 if ready, 503 if not ready.
    """
    checks = await container.check_health()
    all_ready = all(check in ("healthy", "fallback") for check in checks.values())

    response = ReadinessResponse(
        ready=all_ready, checks=checks, timestamp=datetime.now(timezone.utc).isoformat()
    )
    if not all_ready:
        logger.warning(f"Readiness check failed: {checks}")
        return JSONResponse(status_code=503, content=response.model_dump())
    return response


@router.get("/cache/stats", summary="Cache statistics")
async def cache_stats(container: ServiceContainer = Depends(get_container)):
    """Get statistics for the shared repository cache."""
    return container.cache.get_stats()
