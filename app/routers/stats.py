# =============================================================================
# app/routers/stats.py - Impact Statistics Endpoints
# =============================================================================

from typing import Any

from fastapi import APIRouter, Depends

from app.auth import get_current_user
from core.models.stats import PlatformStatsResponse, UserStatsResponse
from core.services.stats_service import StatsService

router = APIRouter(prefix="/stats")


@router.get("/platform", response_model=PlatformStatsResponse)
def get_platform_stats() -> PlatformStatsResponse:
    """
    Platform-wide totals. Public.

    Recomputed from per-user stats on every read.
    """
    return StatsService.refresh_platform_stats()


@router.get("/user", response_model=UserStatsResponse)
def get_user_stats(
    user: dict[str, Any] = Depends(get_current_user),
) -> UserStatsResponse:
    """The current user's impact totals."""
    return StatsService.get_user_stats(user["id"])
