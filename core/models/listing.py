# =============================================================================
# core/models/listing.py - Food Listing Schemas
# =============================================================================
# These models define the API contract for food listings:
# - ListingDraft: Raw, partially-filled input from the create form
#   (AI analysis may fill the blanks)
# - ListingCreate: Validated listing ready to insert
# - ListingUpdate: Partial edit by the provider
# - ListingResponse: Output when returning listings to clients
#
# Flow:
# 1. Client posts multipart form: "data" (JSON) + optional "image"
# 2. Draft is parsed, analysis fills missing fields
# 3. Merged values are validated as ListingCreate and inserted
# =============================================================================

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator

from lib.utils import to_utc, utcnow
from .base import CamelModel


class FoodCategory(str, Enum):
    """Kinds of food a listing can offer."""
    MEAL = "meal"
    SNACK = "snack"
    BEVERAGE = "beverage"
    DESSERT = "dessert"
    PRODUCE = "produce"
    BAKED_GOODS = "baked_goods"


class FreshnessLevel(str, Enum):
    """
    How soon the food should be eaten.

    - fresh: excellent condition
    - good: safe to eat
    - consume_soon: eat within hours
    """
    FRESH = "fresh"
    GOOD = "good"
    CONSUME_SOON = "consume_soon"


def _future(value: datetime) -> datetime:
    value = to_utc(value)
    if value <= utcnow():
        raise ValueError("availableUntil must be in the future")
    return value


class ListingDraft(CamelModel):
    """
    Listing fields as submitted, before AI enrichment.

    Everything is optional here; ListingCreate enforces what is required.
    Unknown keys are ignored.
    """

    title: str | None = None
    description: str | None = None
    category: str | None = None
    portions: int | None = Field(default=None, ge=1)
    location: str | None = None
    available_until: datetime | None = None
    freshness_level: str | None = None

    @field_validator("title", "description", "category", "location", "freshness_level")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class ListingCreate(CamelModel):
    """
    Schema for creating a listing.

    Example:
        {
            "title": "Leftover Veggie Pizza",
            "description": "Two large pizzas from the club meeting",
            "category": "meal",
            "portions": 8,
            "location": "Student Union, Room 204",
            "availableUntil": "2024-04-01T20:00:00Z",
            "freshnessLevel": "fresh"
        }
    """

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    category: FoodCategory
    portions: int = Field(default=1, ge=1, le=500)
    location: str = Field(..., min_length=1, max_length=255)
    available_until: datetime
    freshness_level: FreshnessLevel
    image_url: str | None = None
    serves_count: int | None = Field(default=None, ge=1)
    carbon_savings: Decimal | None = Field(default=None, ge=0)
    ai_analysis: dict[str, Any] | None = None

    @field_validator("available_until")
    @classmethod
    def must_be_future(cls, value: datetime) -> datetime:
        return _future(value)


class ListingUpdate(CamelModel):
    """Partial update of a listing by its provider."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    category: FoodCategory | None = None
    portions: int | None = Field(default=None, ge=1, le=500)
    location: str | None = Field(default=None, min_length=1, max_length=255)
    available_until: datetime | None = None
    freshness_level: FreshnessLevel | None = None

    @field_validator("available_until")
    @classmethod
    def must_be_future(cls, value: datetime | None) -> datetime | None:
        return _future(value) if value is not None else None


class ListingResponse(CamelModel):
    """
    Listing as returned to clients.

    carbonSavings serializes as a decimal string (e.g. "2.50").
    """

    id: UUID
    provider_id: UUID
    title: str
    description: str | None = None
    category: str
    image_url: str | None = None
    portions: int | None = 1
    location: str
    available_until: datetime
    freshness_level: str
    is_active: bool = True
    serves_count: int | None = None
    carbon_savings: Decimal | None = None
    ai_analysis: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
