# =============================================================================
# core/models/analysis.py - Food Analysis Schemas
# =============================================================================
# Output of the AI food analysis (image or text) and the recommendation
# request/response pair.
#
# Every FoodAnalysis says where it came from:
# - ai: parsed and normalized model output
# - fallback: static defaults used when the AI call was skipped or failed
# =============================================================================

from decimal import Decimal
from enum import Enum

from pydantic import Field

from .base import CamelModel
from .listing import FoodCategory, FreshnessLevel


class AnalysisSource(str, Enum):
    AI = "ai"
    FALLBACK = "fallback"


class FoodAnalysis(CamelModel):
    """
    Normalized food analysis.

    Bounds are enforced by lib.food_analyzer before construction, so the
    constraints here only guard against programming errors.
    """

    title: str | None = None
    description: str | None = None
    category: FoodCategory = FoodCategory.MEAL
    freshness_level: FreshnessLevel = FreshnessLevel.GOOD
    portions: int = Field(default=1, ge=1, le=50)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    safety_assessment: str = ""
    serves_count: int = Field(default=1, ge=1, le=50)
    carbon_savings: Decimal = Field(default=Decimal("2.50"), ge=0)
    health_score: int = Field(default=6, ge=1, le=10)
    allergens: list[str] = Field(default_factory=list)
    nutritional_highlights: list[str] = Field(default_factory=list)
    storage_recommendations: str = ""
    source: AnalysisSource = AnalysisSource.FALLBACK

    @property
    def is_fallback(self) -> bool:
        return self.source == AnalysisSource.FALLBACK


class RecommendationRequest(CamelModel):
    """
    Example:
        {"preferences": ["vegetarian", "spicy", "quick snacks"]}
    """

    preferences: list[str] = Field(..., min_length=1, max_length=20)


class RecommendationResponse(CamelModel):
    recommendations: list[str] = Field(default_factory=list)
