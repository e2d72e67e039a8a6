# =============================================================================
# core/services/pickup_service.py - Pickup Business Logic
# =============================================================================
# Reservations of listings by recipients, and the pickup status machine:
#
#   available -> reserved | expired
#   reserved  -> completed | expired
#
# Completing a pickup credits the provider's impact stats.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import isoformat, normalize_uuid, parse_timestamp, utcnow
from core.models.notification import NotificationType
from core.models.pickup import PICKUP_TRANSITIONS, PickupCreate, PickupStatus
from core.services.notification_service import NotificationService
from core.services.stats_service import StatsService
from app.exceptions import (
    InvalidPickupError,
    InvalidStatusTransitionError,
    ListingNotFoundError,
    ListingUnavailableError,
    PickupNotFoundError,
)

logger = logging.getLogger(__name__)


class PickupService:
    """Service for reserving listings and moving pickups through their statuses."""

    @staticmethod
    def create_pickup(recipient: dict[str, Any], data: PickupCreate) -> dict[str, Any]:
        """
        Reserve a listing for the current user.

        Args:
            recipient: Current user row
            data: Validated reservation request

        Returns:
            Created pickup row (status "reserved")

        Raises:
            ListingNotFoundError: If the listing doesn't exist
            ListingUnavailableError: If it is inactive or past its pickup window
            InvalidPickupError: If the user posted the listing themselves
        """
        listing_id = normalize_uuid(data.listing_id)
        listing = SupabaseClient.fetch_by_id("food_listings", listing_id)
        if not listing:
            raise ListingNotFoundError(listing_id)

        if not listing.get("is_active"):
            raise ListingUnavailableError(listing_id, "listing is no longer active")

        if parse_timestamp(listing["available_until"]) < utcnow():
            raise ListingUnavailableError(listing_id, "pickup window has passed")

        if str(listing["provider_id"]) == str(recipient["id"]):
            raise InvalidPickupError("you cannot reserve your own listing", listing_id)

        pickup = SupabaseClient.insert_row("pickups", {
            "listing_id": listing_id,
            "recipient_id": normalize_uuid(recipient["id"]),
            "status": PickupStatus.RESERVED.value,
            "scheduled_time": isoformat(data.scheduled_time) if data.scheduled_time else None,
            "notes": data.notes,
        })

        StatsService.increment_user_stats(recipient["id"], pickups=1)

        NotificationService.create_notification(
            user_id=listing["provider_id"],
            title="Food Reserved",
            message=f"{recipient.get('name') or 'Someone'} reserved your {listing['title']}",
            type=NotificationType.PICKUP_RESERVED,
            related_listing_id=listing_id,
        )

        logger.info(f"User {recipient['id']} reserved listing {listing_id} (pickup {pickup['id']})")
        return pickup

    @staticmethod
    def list_for_recipient(recipient_id: str | UUID) -> list[dict[str, Any]]:
        """Get a user's pickups, newest first."""
        return SupabaseClient.fetch_rows("pickups", recipient_id=normalize_uuid(recipient_id))

    @staticmethod
    def update_status(
        pickup_id: str | UUID,
        user_id: str | UUID,
        status: PickupStatus,
    ) -> dict[str, Any]:
        """
        Move a pickup to its next status.

        Either the recipient or the listing's provider may change it.

        Args:
            pickup_id: Pickup UUID
            user_id: Current user
            status: Requested status

        Returns:
            Updated pickup row

        Raises:
            PickupNotFoundError: If the pickup doesn't exist or the user isn't a party to it
            InvalidStatusTransitionError: If the transition isn't allowed
        """
        pickup = SupabaseClient.fetch_by_id("pickups", pickup_id)
        if not pickup:
            raise PickupNotFoundError(str(pickup_id))

        listing = SupabaseClient.fetch_by_id("food_listings", pickup["listing_id"])
        provider_id = str(listing["provider_id"]) if listing else None
        recipient_id = str(pickup["recipient_id"])

        # Don't reveal pickups the user isn't part of - report not found
        if str(user_id) not in (recipient_id, provider_id):
            raise PickupNotFoundError(str(pickup_id))

        current = PickupStatus(pickup["status"])
        allowed = PICKUP_TRANSITIONS[current]
        if status not in allowed:
            raise InvalidStatusTransitionError(
                current.value,
                status.value,
                sorted(s.value for s in allowed),
            )

        now = isoformat()
        updates: dict[str, Any] = {"status": status.value, "updated_at": now}
        if status == PickupStatus.COMPLETED:
            updates["completed_at"] = now

        rows = SupabaseClient.update_rows("pickups", updates, id=pickup["id"])
        updated = rows[0] if rows else {**pickup, **updates}
        logger.info(f"Pickup {pickup['id']}: {current.value} -> {status.value}")

        title = listing["title"] if listing else "food"

        if status == PickupStatus.COMPLETED and listing:
            StatsService.credit_completed_pickup(provider_id, listing)
            NotificationService.create_notification(
                user_id=provider_id,
                title="Pickup Completed",
                message=f"Your {title} was picked up. Thanks for reducing food waste!",
                type=NotificationType.PICKUP_COMPLETED,
                related_listing_id=listing["id"],
            )

        elif status == PickupStatus.EXPIRED:
            other_party = provider_id if str(user_id) == recipient_id else recipient_id
            if other_party:
                NotificationService.create_notification(
                    user_id=other_party,
                    title="Pickup Expired",
                    message=f"The pickup for {title} has expired",
                    type=NotificationType.PICKUP_EXPIRED,
                    related_listing_id=pickup["listing_id"],
                )

        return updated
