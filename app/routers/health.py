# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers, plus the
# keep-alive probe that stops the hosted database from pausing when idle.
# =============================================================================

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.dependencies import ContextDep
from core.models.query import Query
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


class KeepAliveResponse(BaseModel):
    """Keep-alive probe response."""
    success: bool
    timestamp: str
    database: str | None = None
    message: str | None = None
    error: str | None = None


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(context: ContextDep):
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=context.settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(context: ContextDep):
    """
    Readiness check endpoint.

    Returns whether the service is ready to accept requests.
    Checks database connectivity through the data façade.
    """
    checks = ChecksResponse(database="unknown")

    try:
        await context.data.select(
            context.settings.KEEPALIVE_COLLECTION,
            Query().select("id").limit_to(1),
        )
        checks.database = "healthy"
    except ApplicationError as e:
        checks.database = f"unhealthy: {e.code}"

    return ReadinessResponse(
        status="ready" if checks.database == "healthy" else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return LivenessResponse(
        status="alive",
        timestamp=_now(),
    )


@router.get("/keepalive", response_model=KeepAliveResponse)
async def keepalive(context: ContextDep):
    """
    Run a one-row query so the hosted database does not go to sleep.

    Meant to be hit by an external scheduler.
    """
    logger.info(f"Keep-alive called at {_now()}")

    try:
        await context.data.select(
            context.settings.KEEPALIVE_COLLECTION,
            Query().select("id").limit_to(1),
        )
    except ApplicationError as e:
        logger.error(f"Keep-alive query failed: {e}")
        return JSONResponse(
            status_code=500,
            content=KeepAliveResponse(
                success=False,
                timestamp=_now(),
                error="Database connection failed",
            ).model_dump(exclude_none=True),
        )

    return KeepAliveResponse(
        success=True,
        message="Database keep-alive successful",
        timestamp=_now(),
        database="active",
    )
