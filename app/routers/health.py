# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient, SupabaseClientError

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
    """Individual backend checks."""
    database: str
    storage: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health status for load balancers and monitoring."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Whether the Supabase project answers.

    Database: a one-row read of `cities`. Storage: listing buckets.
    """
    checks = ChecksResponse(database="unknown", storage="unknown")

    try:
        result = SupabaseClient.execute(
            SupabaseClient.table("cities").select("id").limit(1),
            description="readiness probe",
        )
        checks.database = "healthy" if result.ok else f"unhealthy: {(result.message or '')[:50]}"
    except SupabaseClientError as e:
        checks.database = f"unhealthy: {e.message[:50]}"

    try:
        SupabaseClient.get_client().storage.list_buckets()
        checks.storage = "healthy"
    except Exception as e:
        checks.storage = f"unhealthy: {str(e)[:50]}"

    all_healthy = checks.database == "healthy" and checks.storage == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live")
async def liveness_check():
    """Whether the process is alive (container restart decisions)."""
    return {"status": "alive", "timestamp": _now()}
