# =============================================================================
# app/routers/listings.py - Food Listing Endpoints
# =============================================================================
# Browse, create (with AI enrichment), edit and withdraw food listings.
#
# Endpoints:
#   GET    /food-listings        - Active listings, newest first
#   GET    /food-listings/{id}   - One listing
#   POST   /food-listings        - Create (multipart: data JSON + optional image)
#   PATCH  /food-listings/{id}   - Edit own listing
#   DELETE /food-listings/{id}   - Withdraw own listing (soft delete)
#   GET    /my-listings          - Current user's listings
# =============================================================================

import json
import logging
from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.auth import get_current_user
from app.config import settings
from app.dependencies import AnalyzerDep
from app.exceptions import InvalidListingDataError
from core.models.listing import ListingResponse, ListingUpdate
from core.services.listing_service import ListingService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/food-listings", response_model=list[ListingResponse])
def list_food_listings(
    limit: Annotated[Optional[int], Query(ge=1, le=100, description="Max listings")] = None,
) -> list[dict[str, Any]]:
    """
    List active listings whose pickup window hasn't passed.

    Newest first. Public.
    """
    return ListingService.list_active(limit or settings.LISTINGS_DEFAULT_LIMIT)


@router.get("/food-listings/{listing_id}", response_model=ListingResponse)
def get_food_listing(
    listing_id: Annotated[UUID, Path(description="Listing UUID")],
) -> dict[str, Any]:
    """Get one listing by ID. Public."""
    return ListingService.get_listing(listing_id)


@router.post("/food-listings", response_model=ListingResponse)
async def create_food_listing(
    analyzer: AnalyzerDep,
    data: Annotated[str, Form(description="Listing fields as JSON")] = "{}",
    image: Annotated[Optional[UploadFile], File(description="Optional food photo")] = None,
    user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    """
    Create a food listing.

    This endpoint:
    1. Parses the listing JSON from the "data" form field
    2. Analyzes the photo (or the title/description) with AI
    3. Fills blank fields from the analysis; values you sent always win
    4. Stores the photo and inserts the listing

    If the AI is unavailable, the listing is still created with
    fallback estimates.
    """
    try:
        payload = json.loads(data or "{}")
    except json.JSONDecodeError as e:
        raise InvalidListingDataError(f"data is not valid JSON: {e}")

    if not isinstance(payload, dict):
        raise InvalidListingDataError("data must be a JSON object")

    content = None
    content_type = None
    filename = None
    if image is not None and image.filename:
        content = await image.read()
        content_type = image.content_type
        filename = image.filename

    return await run_in_threadpool(
        ListingService.create_listing,
        user["id"],
        payload,
        image=content or None,
        image_type=content_type,
        image_name=filename,
        analyzer=analyzer,
    )


@router.patch("/food-listings/{listing_id}", response_model=ListingResponse)
def update_food_listing(
    listing_id: Annotated[UUID, Path(description="Listing UUID")],
    update: ListingUpdate,
    user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    """Edit a listing. Only its provider may change it."""
    return ListingService.update_listing(listing_id, user["id"], update)


@router.delete("/food-listings/{listing_id}", response_model=ListingResponse)
def delete_food_listing(
    listing_id: Annotated[UUID, Path(description="Listing UUID")],
    user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    """
    Withdraw a listing.

    The row is kept with isActive=false so pickups and stats still refer to it.
    """
    return ListingService.delete_listing(listing_id, user["id"])


@router.get("/my-listings", response_model=list[ListingResponse])
def list_my_listings(
    user: dict[str, Any] = Depends(get_current_user),
) -> list[dict[str, Any]]:
    """List the current user's listings, including withdrawn and expired ones."""
    return ListingService.list_for_provider(user["id"])
