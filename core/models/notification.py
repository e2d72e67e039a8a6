# =============================================================================
# core/models/notification.py - Notification Schemas
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from .base import CamelModel


class NotificationType(str, Enum):
    """What triggered the notification."""
    PICKUP_RESERVED = "pickup_reserved"
    PICKUP_COMPLETED = "pickup_completed"
    PICKUP_EXPIRED = "pickup_expired"
    LISTING_EXPIRED = "listing_expired"


class NotificationResponse(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    message: str
    type: str
    related_listing_id: UUID | None = None
    is_read: bool = False
    created_at: datetime | None = None
