# =============================================================================
# core/services/notification_service.py - In-App Notifications
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from core.models.notification import NotificationType
from app.exceptions import NotificationNotFoundError

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates and reads per-user notifications."""

    @staticmethod
    def create_notification(
        user_id: str | UUID,
        title: str,
        message: str,
        type: NotificationType | str,
        related_listing_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Create an unread notification for a user.

        Args:
            user_id: Recipient of the notification
            title: Short heading, e.g. "Food Reserved"
            message: Body text
            type: What triggered it
            related_listing_id: Listing it is about, if any

        Returns:
            Created notification row
        """
        data = {
            "user_id": normalize_uuid(user_id),
            "title": title,
            "message": message,
            "type": type.value if isinstance(type, NotificationType) else type,
            "related_listing_id": normalize_uuid(related_listing_id) if related_listing_id else None,
            "is_read": False,
        }
        notification = SupabaseClient.insert_row("notifications", data)
        logger.info(f"Notified user {data['user_id']}: {data['type']}")
        return notification

    @staticmethod
    def list_notifications(user_id: str | UUID) -> list[dict[str, Any]]:
        """Get a user's notifications, newest first."""
        return SupabaseClient.fetch_rows("notifications", user_id=normalize_uuid(user_id))

    @staticmethod
    def mark_read(notification_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Mark one notification as read.

        Raises:
            NotificationNotFoundError: If it doesn't exist or belongs to another user
        """
        notification = SupabaseClient.fetch_by_id("notifications", notification_id)

        # Don't reveal other users' notifications - report not found
        if not notification or str(notification.get("user_id")) != str(user_id):
            raise NotificationNotFoundError(str(notification_id))

        rows = SupabaseClient.update_rows("notifications", {"is_read": True}, id=notification["id"])
        return rows[0] if rows else {**notification, "is_read": True}

    @staticmethod
    def mark_all_read(user_id: str | UUID) -> int:
        """
        Mark all of a user's unread notifications as read.

        Returns:
            Number of notifications updated
        """
        rows = SupabaseClient.update_rows(
            "notifications",
            {"is_read": True},
            user_id=normalize_uuid(user_id),
            is_read=False,
        )
        logger.info(f"Marked {len(rows)} notifications read for user {user_id}")
        return len(rows)
