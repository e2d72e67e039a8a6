# =============================================================================
# app/routers/pickups.py - Pickup Endpoints
# =============================================================================
# Endpoints:
#   POST  /pickups               - Reserve a listing
#   GET   /my-pickups            - Current user's reservations
#   PATCH /pickups/{id}/status   - Complete or expire a pickup
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user
from core.models.pickup import PickupCreate, PickupResponse, PickupStatusUpdate
from core.services.pickup_service import PickupService

router = APIRouter()


@router.post("/pickups", response_model=PickupResponse)
def create_pickup(
    request: PickupCreate,
    user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    """
    Reserve a listing.

    The listing must be active, still within its pickup window, and
    posted by someone else. The provider is notified.
    """
    return PickupService.create_pickup(user, request)


@router.get("/my-pickups", response_model=list[PickupResponse])
def list_my_pickups(
    user: dict[str, Any] = Depends(get_current_user),
) -> list[dict[str, Any]]:
    """List the current user's pickups, newest first."""
    return PickupService.list_for_recipient(user["id"])


@router.patch("/pickups/{pickup_id}/status", response_model=PickupResponse)
def update_pickup_status(
    pickup_id: Annotated[UUID, Path(description="Pickup UUID")],
    request: PickupStatusUpdate,
    user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    """
    Move a pickup to its next status.

    Allowed: available -> reserved | expired, reserved -> completed | expired.
    Anything else returns 409. Completing credits the provider's impact stats.
    """
    return PickupService.update_status(pickup_id, user["id"], request.status)
