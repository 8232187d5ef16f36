# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# Readiness probes the store and the storage gateway through the same
# service container the API uses.
# =============================================================================

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import ServicesDep
from app.exceptions import InfrastructureError

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"


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
    """Individual dependency checks."""
    database: str
    storage: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check(services: ServicesDep):
    """
    Readiness check endpoint.

    Checks database and storage connectivity. A failing dependency
    reports "degraded" rather than an error status.
    """
    checks = ChecksResponse(database="unknown", storage="unknown")

    try:
        services.store.ping()
        checks.database = "healthy"
    except InfrastructureError as e:
        logger.warning(f"Readiness: database unavailable: {e.message}")
        checks.database = f"unhealthy: {e.message[:50]}"

    try:
        services.storage.ping()
        checks.storage = "healthy"
    except InfrastructureError as e:
        logger.warning(f"Readiness: storage unavailable: {e.message}")
        checks.storage = f"unhealthy: {e.message[:50]}"

    all_healthy = checks.database == "healthy" and checks.storage == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """Whether the process is alive. Used by Docker/Kubernetes for restart decisions."""
    return LivenessResponse(status="alive", timestamp=_now())
