# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
#
# Readiness:
#   database / storage unhealthy -> "degraded" (listings can't be served)
#   AI in fallback mode          -> still "ready", with a warning, since
#                                   listings are created with default estimates
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.config import settings
from lib.food_analyzer import get_food_analyzer
from lib.supabase_client import SupabaseClient

router = APIRouter()

HEALTHY = "healthy"
AI_ENABLED = "enabled"
AI_FALLBACK = "fallback"


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
    storage: str
    ai: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    warnings: list[str] = Field(default_factory=list)
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Checks
# =============================================================================

def _check_database() -> str:
    try:
        SupabaseClient.get_client().table("users").select("id").limit(1).execute()
        return HEALTHY
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"


def _check_storage() -> str:
    try:
        SupabaseClient.get_client().storage.get_bucket(settings.IMAGE_BUCKET)
        return HEALTHY
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"


def _check_ai() -> str:
    """AI counts as enabled only when the shared analyzer actually has a client."""
    if not settings.ai_enabled:
        return AI_FALLBACK
    return AI_ENABLED if get_food_analyzer().client is not None else AI_FALLBACK


def _readiness(checks: ChecksResponse) -> tuple[str, list[str]]:
    warnings = []
    if checks.ai != AI_ENABLED:
        warnings.append("AI analysis unavailable: listings use default estimates")

    serving = checks.database == HEALTHY and checks.storage == HEALTHY
    return ("ready" if serving else "degraded"), warnings


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health status for load balancers and monitoring."""
    return HealthResponse(
        status=HEALTHY,
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check():
    """
    Readiness check endpoint.

    Checks database and image storage connectivity, and reports whether food
    analysis runs on the AI or on fallback values.
    """
    checks = ChecksResponse(
        database=_check_database(),
        storage=_check_storage(),
        ai=_check_ai(),
    )
    status, warnings = _readiness(checks)

    return ReadinessResponse(
        status=status,
        checks=checks,
        warnings=warnings,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """Whether the process is alive (used for restart decisions)."""
    return LivenessResponse(status="alive", timestamp=_now())
