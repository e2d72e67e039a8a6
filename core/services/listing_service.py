# =============================================================================
# core/services/listing_service.py - Food Listing Business Logic
# =============================================================================
# Handles listing CRUD, AI enrichment on create, and the expiry sweep.
#
# Create flow:
# 1. Parse the submitted draft (everything optional)
# 2. Analyze the photo, or the title/description when there is no photo
# 3. Fill blank fields from the analysis (user values always win)
# 4. Validate as ListingCreate, then upload the photo and insert
#    (the photo is removed again if the insert fails)
# 5. Count the listing in the provider's stats
# =============================================================================

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from lib.food_analyzer import FoodAnalyzer, get_food_analyzer
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import isoformat, normalize_uuid
from core.models.analysis import FoodAnalysis
from core.models.listing import ListingCreate, ListingDraft, ListingUpdate
from core.models.notification import NotificationType
from core.models.pickup import OPEN_PICKUP_STATUSES, PickupStatus
from core.services.notification_service import NotificationService
from core.services.stats_service import StatsService
from core.services.storage_service import StorageService
from app.exceptions import (
    InvalidListingDataError,
    ListingNotFoundError,
    ListingNotOwnedError,
)

logger = logging.getLogger(__name__)

# Fields the analysis may fill when the user left them blank
_ANALYSIS_FILLED_FIELDS = ("title", "description", "category", "freshness_level", "portions")


def _validation_errors(e: ValidationError) -> list[dict[str, Any]]:
    return e.errors(include_url=False, include_context=False, include_input=False)


class ListingService:
    """
    Service for food listing operations.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def list_active(limit: int = 20) -> list[dict[str, Any]]:
        """
        Get listings that are active and still within their pickup window.

        Args:
            limit: Maximum number of listings (newest first)

        Returns:
            List of listing rows
        """
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("food_listings")
                .select("*")
                .eq("is_active", True)
                .gte("available_until", isoformat())
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list active listings: {e}",
                code="FETCH_FAILED",
                details={"table": "food_listings"}
            )

    @staticmethod
    def get_listing(listing_id: str | UUID) -> dict[str, Any]:
        """
        Get a listing by ID.

        Raises:
            ListingNotFoundError: If listing doesn't exist
        """
        listing = SupabaseClient.fetch_by_id("food_listings", listing_id)
        if not listing:
            raise ListingNotFoundError(str(listing_id))
        return listing

    @staticmethod
    def list_for_provider(provider_id: str | UUID) -> list[dict[str, Any]]:
        """Get all of a provider's listings, including inactive ones, newest first."""
        return SupabaseClient.fetch_rows("food_listings", provider_id=normalize_uuid(provider_id))

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    @staticmethod
    def create_listing(
        provider_id: str | UUID,
        data: dict[str, Any],
        image: bytes | None = None,
        image_type: str | None = None,
        image_name: str | None = None,
        analyzer: FoodAnalyzer | None = None,
    ) -> dict[str, Any]:
        """
        Create a listing, enriching it with AI analysis.

        Args:
            provider_id: Current user, who offers the food
            data: Submitted listing fields (camelCase or snake_case)
            image: Optional photo bytes
            image_type: Photo MIME type
            image_name: Original photo filename
            analyzer: FoodAnalyzer to use (defaults to the shared one)

        Returns:
            Created listing row

        Raises:
            InvalidListingDataError: If the merged listing is invalid
            InvalidFileTypeError / FileTooLargeError: If the photo is rejected
            StorageUploadError: If the photo can't be stored
        """
        try:
            draft = ListingDraft.model_validate(data)
        except ValidationError as e:
            raise InvalidListingDataError(_validation_errors(e))

        analyzer = analyzer or get_food_analyzer()
        analysis: FoodAnalysis | None = None
        image_url = None
        mime = None

        if image:
            mime = StorageService.validate_image(image, image_type)
            analysis = analyzer.analyze_image(image, mime, category_hint=draft.category)
        elif draft.title:
            analysis = analyzer.analyze_text(draft.title, draft.description, category_hint=draft.category)

        values = ListingService._merge_analysis(draft, analysis)

        try:
            listing = ListingCreate.model_validate(values)
        except ValidationError as e:
            raise InvalidListingDataError(_validation_errors(e))

        row = listing.model_dump(mode="json")
        row["provider_id"] = normalize_uuid(provider_id)
        row["is_active"] = True

        # Upload only once the listing is known to be valid
        if image:
            image_url = StorageService.upload_image(provider_id, image, mime, image_name)
            row["image_url"] = image_url

        try:
            created = SupabaseClient.insert_row("food_listings", row)
        except Exception:
            if image_url:
                StorageService.delete_image(image_url)
            raise

        StatsService.increment_user_stats(provider_id, listings=1)

        source = analysis.source.value if analysis else "none"
        logger.info(f"Created listing {created['id']} for provider {provider_id} (analysis: {source})")
        return created

    @staticmethod
    def _merge_analysis(draft: ListingDraft, analysis: FoodAnalysis | None) -> dict[str, Any]:
        """User-provided values win; the analysis only fills the blanks."""
        values = draft.model_dump()
        if analysis is None:
            return values

        for field in _ANALYSIS_FILLED_FIELDS:
            if values.get(field) is None:
                values[field] = getattr(analysis, field)

        values["serves_count"] = analysis.serves_count
        values["carbon_savings"] = analysis.carbon_savings
        values["ai_analysis"] = analysis.model_dump(mode="json", by_alias=True)
        return values

    # -------------------------------------------------------------------------
    # Update / delete
    # -------------------------------------------------------------------------

    @staticmethod
    def get_owned_listing(listing_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get a listing and check the user posted it.

        Raises:
            ListingNotFoundError: If listing doesn't exist
            ListingNotOwnedError: If another user posted it
        """
        listing = ListingService.get_listing(listing_id)
        if str(listing.get("provider_id")) != str(user_id):
            raise ListingNotOwnedError(str(listing_id))
        return listing

    @staticmethod
    def update_listing(
        listing_id: str | UUID,
        user_id: str | UUID,
        update: ListingUpdate,
    ) -> dict[str, Any]:
        """
        Apply a partial update from the listing's provider.

        Only fields present in the request are changed.
        """
        listing = ListingService.get_owned_listing(listing_id, user_id)

        data = update.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if not data:
            return listing

        data["updated_at"] = isoformat()
        rows = SupabaseClient.update_rows("food_listings", data, id=listing["id"])

        logger.info(f"Updated listing {listing['id']}: {sorted(data)}")
        return rows[0] if rows else {**listing, **data}

    @staticmethod
    def delete_listing(listing_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Soft-delete a listing (is_active = false)."""
        listing = ListingService.get_owned_listing(listing_id, user_id)

        rows = SupabaseClient.update_rows(
            "food_listings",
            {"is_active": False, "updated_at": isoformat()},
            id=listing["id"],
        )

        logger.info(f"Deactivated listing {listing['id']}")
        return rows[0] if rows else {**listing, "is_active": False}

    # -------------------------------------------------------------------------
    # Expiry sweep
    # -------------------------------------------------------------------------

    @staticmethod
    def expire_listings(now: datetime | None = None) -> list[dict[str, Any]]:
        """
        Deactivate active listings whose pickup window has passed.

        Open pickups on those listings are expired and each provider is
        notified.

        Args:
            now: Reference time (defaults to the current UTC time)

        Returns:
            The listings that were expired
        """
        client = SupabaseClient.get_client()
        cutoff = isoformat(now)

        try:
            response = (
                client.table("food_listings")
                .select("*")
                .eq("is_active", True)
                .lt("available_until", cutoff)
                .execute()
            )
            stale = response.data or []
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to find expired listings: {e}",
                code="FETCH_FAILED",
                details={"table": "food_listings"}
            )

        expired = []
        for listing in stale:
            rows = SupabaseClient.update_rows(
                "food_listings",
                {"is_active": False, "updated_at": cutoff},
                id=listing["id"],
            )
            expired.append(rows[0] if rows else {**listing, "is_active": False})

            try:
                (
                    client.table("pickups")
                    .update({"status": PickupStatus.EXPIRED.value, "updated_at": cutoff})
                    .eq("listing_id", listing["id"])
                    .in_("status", [s.value for s in OPEN_PICKUP_STATUSES])
                    .execute()
                )
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to expire pickups for listing {listing['id']}: {e}",
                    code="UPDATE_FAILED",
                    details={"table": "pickups"}
                )

            NotificationService.create_notification(
                user_id=listing["provider_id"],
                title="Listing Expired",
                message=f"Your listing \"{listing['title']}\" has passed its pickup window",
                type=NotificationType.LISTING_EXPIRED,
                related_listing_id=listing["id"],
            )

        if expired:
            logger.info(f"Expired {len(expired)} listings")
        return expired
