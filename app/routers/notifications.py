# =============================================================================
# app/routers/notifications.py - Notification Endpoints
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user
from core.models.notification import NotificationResponse
from core.services.notification_service import NotificationService

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationResponse])
def list_notifications(
    user: dict[str, Any] = Depends(get_current_user),
) -> list[dict[str, Any]]:
    """List the current user's notifications, newest first."""
    return NotificationService.list_notifications(user["id"])


# Declared before /{notification_id}/read so "read-all" isn't parsed as an id
@router.post("/notifications/read-all")
def mark_all_notifications_read(
    user: dict[str, Any] = Depends(get_current_user),
) -> dict:
    """Mark every unread notification as read."""
    updated = NotificationService.mark_all_read(user["id"])
    return {"success": True, "updated": updated}


@router.post("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: Annotated[UUID, Path(description="Notification UUID")],
    user: dict[str, Any] = Depends(get_current_user),
) -> dict:
    """Mark one notification as read. 404 if it isn't yours."""
    NotificationService.mark_read(notification_id, user["id"])
    return {"success": True}
