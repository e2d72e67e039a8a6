# =============================================================================
# core/models/pickup.py - Pickup Schemas
# =============================================================================
# A pickup is one recipient's reservation of one listing.
#
# State machine:
#   available -> reserved -> completed
#          \          \-> expired
#           \-> expired
#
# New reservations start in "reserved".
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import Field

from .base import CamelModel


class PickupStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    COMPLETED = "completed"
    EXPIRED = "expired"


# Allowed next states; terminal states map to an empty set
PICKUP_TRANSITIONS: dict[PickupStatus, set[PickupStatus]] = {
    PickupStatus.AVAILABLE: {PickupStatus.RESERVED, PickupStatus.EXPIRED},
    PickupStatus.RESERVED: {PickupStatus.COMPLETED, PickupStatus.EXPIRED},
    PickupStatus.COMPLETED: set(),
    PickupStatus.EXPIRED: set(),
}

OPEN_PICKUP_STATUSES = (PickupStatus.AVAILABLE, PickupStatus.RESERVED)


class PickupCreate(CamelModel):
    """
    Reservation request.

    Example:
        {"listingId": "550e8400-...", "scheduledTime": "2024-04-01T18:30:00Z"}
    """

    listing_id: UUID
    scheduled_time: datetime | None = None
    notes: str | None = Field(default=None, max_length=500)


class PickupStatusUpdate(CamelModel):
    """Move a pickup to its next status."""

    status: PickupStatus


class PickupResponse(CamelModel):
    id: UUID
    listing_id: UUID
    recipient_id: UUID
    status: PickupStatus
    scheduled_time: datetime | None = None
    completed_at: datetime | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
