# =============================================================================
# lib/food_analyzer.py - AI Food Analysis
# =============================================================================
# Categorizes shared food and estimates its environmental impact by asking an
# OpenAI vision-capable model for a JSON assessment of a photo or a text
# description.
#
# The analyzer never raises to its caller. If the model is not configured,
# the request fails, or the reply can't be parsed, a static fallback analysis
# is returned instead (source="fallback") and a warning is logged.
#
# Usage:
#   from lib.food_analyzer import get_food_analyzer
#   analysis = get_food_analyzer().analyze_image(image_bytes, "image/jpeg")
#   print(analysis.category, analysis.carbon_savings)
# =============================================================================

from __future__ import annotations

import base64
import json
import logging
import math
from decimal import Decimal
from typing import Any

from openai import OpenAI

from app.config import settings
from core.models.analysis import AnalysisSource, FoodAnalysis
from core.models.listing import FoodCategory, FreshnessLevel
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


# kg CO2 avoided per kg of food that isn't thrown away
CARBON_PER_KG_FOOD = Decimal("2.5")

DEFAULT_CARBON_SAVINGS = Decimal("2.50")
MAX_RECOMMENDATIONS = 5


# =============================================================================
# Exceptions
# =============================================================================

class AnalysisError(ApplicationError):
    """Raised internally when an AI call fails; converted to a fallback."""

    def __init__(self, message: str, code: str = "ANALYSIS_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


# =============================================================================
# Prompts
# =============================================================================

ANALYSIS_SYSTEM_PROMPT = """You are a food safety and food waste reduction expert for a campus food sharing platform.
Analyze the food you are given and respond with JSON only, in exactly this shape:
{
  "title": "concise, appetizing title, e.g. Fresh Garden Salad",
  "description": "one or two sentences on key ingredients and characteristics",
  "category": "meal|snack|beverage|dessert|produce|baked_goods",
  "freshnessLevel": "fresh|good|consume_soon",
  "portions": number,
  "confidence": number between 0 and 1,
  "safetyAssessment": "any concerns, or 'Safe for consumption'",
  "servesCount": number,
  "carbonSavings": number,
  "healthScore": number between 1 and 10,
  "allergens": ["allergen"],
  "nutritionalHighlights": ["highlight"],
  "storageRecommendations": "storage advice"
}

freshnessLevel: "fresh" = excellent condition, "good" = safe to eat, "consume_soon" = eat within hours.
carbonSavings is kg CO2 saved by not wasting this food: use 2.5 kg CO2 per kg of food, estimate the
weight from the servings and description, and weigh meat higher and vegetables lower.
If you are unsure, lower the confidence instead of inventing details."""

IMAGE_PROMPT = "Analyze this food photo."

RECOMMENDATION_SYSTEM_PROMPT = """You suggest foods that students might share on a campus food sharing platform.
Respond with JSON only: {"recommendations": ["food name", ...]} with at most 5 specific items."""


# =============================================================================
# Normalization
# =============================================================================

_CATEGORY_ALIASES = {
    "meals": FoodCategory.MEAL,
    "snacks": FoodCategory.SNACK,
    "beverages": FoodCategory.BEVERAGE,
    "drink": FoodCategory.BEVERAGE,
    "drinks": FoodCategory.BEVERAGE,
    "desserts": FoodCategory.DESSERT,
    "fruits_vegetables": FoodCategory.PRODUCE,
    "fruit": FoodCategory.PRODUCE,
    "vegetables": FoodCategory.PRODUCE,
    "baked": FoodCategory.BAKED_GOODS,
    "bakery": FoodCategory.BAKED_GOODS,
}

_FRESHNESS_ALIASES = {
    "moderate": FreshnessLevel.GOOD,
    "urgent": FreshnessLevel.CONSUME_SOON,
}


def _first(parsed: dict[str, Any], *keys: str) -> Any:
    """Return the first present, non-null value among alternative keys."""
    for key in keys:
        if parsed.get(key) is not None:
            return parsed[key]
    return None


def _slug(value: Any) -> str:
    return str(value).strip().lower().replace("-", "_").replace(" ", "_")


def coerce_category(value: Any, hint: str | None = None) -> FoodCategory:
    """Map a model/user category onto FoodCategory, falling back to the hint, then meal."""
    for candidate in (value, hint):
        if candidate is None:
            continue
        slug = _slug(candidate)
        try:
            return FoodCategory(slug)
        except ValueError:
            if slug in _CATEGORY_ALIASES:
                return _CATEGORY_ALIASES[slug]
    return FoodCategory.MEAL


def coerce_freshness(value: Any) -> FreshnessLevel:
    if value is None:
        return FreshnessLevel.GOOD
    slug = _slug(value)
    try:
        return FreshnessLevel(slug)
    except ValueError:
        return _FRESHNESS_ALIASES.get(slug, FreshnessLevel.GOOD)


def _clamp_int(value: Any, low: int, high: int, default: int) -> int:
    try:
        number = int(round(float(value)))
    except (OverflowError, TypeError, ValueError):
        return default
    return max(low, min(high, number))


def _clamp_decimal(value: Any, low: Decimal, high: Decimal, default: Decimal) -> Decimal:
    try:
        number = Decimal(str(value))
    except (ArithmeticError, TypeError, ValueError):
        return default
    if not number.is_finite() or number <= 0:
        return default
    return max(low, min(high, number)).quantize(Decimal("0.01"))


def _confidence(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    if number > 1.0:
        # Percent values (e.g. 85) -> 0.85
        number = number / 100.0
    return max(0.0, min(1.0, number))


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return [str(value)]


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_analysis(parsed: dict[str, Any], category_hint: str | None = None) -> FoodAnalysis:
    """
    Turn a raw model reply into a bounded FoodAnalysis.

    Accepts camelCase or snake_case keys, and the older field names
    (freshnessStatus, plural categories) some prompts produce.

    Bounds:
        portions / servesCount: 1..50
        carbonSavings: 0.1..20 kg (default 2.5)
        healthScore: 1..10
        confidence: 0..1
    """
    portions = _clamp_int(_first(parsed, "portions", "servings"), 1, 50, 1)

    return FoodAnalysis(
        title=_as_text(parsed.get("title")),
        description=_as_text(parsed.get("description")),
        category=coerce_category(parsed.get("category"), category_hint),
        freshness_level=coerce_freshness(
            _first(parsed, "freshnessLevel", "freshness_level", "freshnessStatus", "freshness")
        ),
        portions=portions,
        confidence=_confidence(parsed.get("confidence")),
        safety_assessment=_as_text(_first(parsed, "safetyAssessment", "safety_assessment")) or "",
        serves_count=_clamp_int(_first(parsed, "servesCount", "serves_count"), 1, 50, portions),
        carbon_savings=_clamp_decimal(
            _first(parsed, "carbonSavings", "carbon_savings"),
            Decimal("0.1"), Decimal("20"), DEFAULT_CARBON_SAVINGS,
        ),
        health_score=_clamp_int(_first(parsed, "healthScore", "health_score"), 1, 10, 6),
        allergens=_as_str_list(parsed.get("allergens")),
        nutritional_highlights=_as_str_list(
            _first(parsed, "nutritionalHighlights", "nutritional_highlights")
        ),
        storage_recommendations=_as_text(
            _first(parsed, "storageRecommendations", "storage_recommendations")
        ) or "",
        source=AnalysisSource.AI,
    )


def fallback_analysis(category_hint: str | None = None) -> FoodAnalysis:
    """Static analysis used whenever the AI call is unavailable."""
    return FoodAnalysis(
        category=coerce_category(None, category_hint),
        freshness_level=FreshnessLevel.GOOD,
        portions=1,
        confidence=0.0,
        safety_assessment="Not assessed automatically; check the food before eating",
        serves_count=1,
        carbon_savings=DEFAULT_CARBON_SAVINGS,
        health_score=6,
        allergens=[],
        nutritional_highlights=["Contains nutrients"],
        storage_recommendations="Store in refrigerator and consume within 24 hours",
        source=AnalysisSource.FALLBACK,
    )


def food_saved_kg(carbon_savings: Decimal) -> Decimal:
    """Convert kg CO2 saved back to kg of food saved."""
    return (carbon_savings / CARBON_PER_KG_FOOD).quantize(Decimal("0.01"))


def _data_url(mime: str, image_bytes: bytes) -> str:
    b64 = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime};base64,{b64}"


# =============================================================================
# Analyzer
# =============================================================================

class FoodAnalyzer:
    """
    OpenAI-backed food analysis.

    Example:
        analyzer = FoodAnalyzer()
        analysis = analyzer.analyze_text("Veggie Pizza", "Two large pizzas", "meal")
        if analysis.is_fallback:
            ...  # defaults were used

    Attributes:
        model: OpenAI model to use (default from settings)
        temperature: Generation temperature
        client: OpenAI client, or None when no API key is configured
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        client: OpenAI | None = None,
    ):
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.ANALYSIS_TEMPERATURE

        if client is not None:
            self.client = client
        elif settings.ai_enabled:
            self.client = OpenAI(
                api_key=settings.OPENAI_API_KEY,
                timeout=settings.ANALYSIS_TIMEOUT_SECONDS,
            )
        else:
            self.client = None

        logger.info(
            f"FoodAnalyzer initialized with model={self.model}, "
            f"ai_enabled={self.client is not None}"
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def analyze_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        category_hint: str | None = None,
    ) -> FoodAnalysis:
        """
        Analyze a food photo.

        Args:
            image_bytes: Raw image content
            mime_type: e.g. "image/jpeg"
            category_hint: Category the user picked, used if the model's is unusable

        Returns:
            FoodAnalysis (source="fallback" if the call failed)
        """
        messages = [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": IMAGE_PROMPT},
                    {"type": "image_url", "image_url": {"url": _data_url(mime_type, image_bytes)}},
                ],
            },
        ]
        return self._analyze(messages, category_hint, kind="image")

    def analyze_text(
        self,
        title: str,
        description: str | None = None,
        category_hint: str | None = None,
    ) -> FoodAnalysis:
        """
        Analyze a food item from its title and description.

        Returns:
            FoodAnalysis (source="fallback" if the call failed)
        """
        prompt = (
            f"Food Title: {title}\n"
            f"Description: {description or 'not provided'}\n"
            f"User Suggested Category: {category_hint or 'not provided'}\n\n"
            "Please analyze this food item."
        )
        messages = [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        return self._analyze(messages, category_hint, kind="text")

    def recommend(self, preferences: list[str]) -> list[str]:
        """
        Suggest foods someone with these preferences might share.

        Returns:
            Up to 5 food names; empty list on any failure
        """
        cleaned = [p.strip() for p in preferences if p and p.strip()]
        if not cleaned:
            return []

        messages = [
            {"role": "system", "content": RECOMMENDATION_SYSTEM_PROMPT},
            {"role": "user", "content": f"Food preferences: {', '.join(cleaned)}"},
        ]

        try:
            parsed = self._complete_json(messages)
        except AnalysisError as e:
            logger.warning(f"Recommendations unavailable: {e}")
            return []

        items = parsed.get("recommendations")
        if items is None:
            items = next((v for v in parsed.values() if isinstance(v, list)), [])
        return _as_str_list(items)[:MAX_RECOMMENDATIONS]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _analyze(
        self,
        messages: list[dict[str, Any]],
        category_hint: str | None,
        kind: str,
    ) -> FoodAnalysis:
        try:
            parsed = self._complete_json(messages)
        except AnalysisError as e:
            logger.warning(f"AI {kind} analysis failed, using fallback values: {e}")
            return fallback_analysis(category_hint)

        try:
            analysis = normalize_analysis(parsed, category_hint)
        except (ArithmeticError, TypeError, ValueError) as e:
            logger.warning(f"AI {kind} analysis reply unusable, using fallback values: {e}")
            return fallback_analysis(category_hint)

        logger.info(
            f"AI {kind} analysis: category={analysis.category.value}, "
            f"freshness={analysis.freshness_level.value}, confidence={analysis.confidence:.2f}"
        )
        return analysis

    def _complete_json(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Run one JSON-mode chat completion and parse the reply.

        Raises:
            AnalysisError: If AI is disabled, the call fails, or the reply isn't a JSON object
        """
        if self.client is None:
            raise AnalysisError(
                "AI analysis is disabled",
                code="AI_DISABLED",
                suggestion="Set OPENAI_API_KEY to enable food analysis",
            )

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=messages,
            )
            response_text = response.choices[0].message.content or ""
            logger.debug(f"OpenAI response: {response_text[:200]}...")
        except Exception as e:
            raise AnalysisError(
                f"OpenAI API call failed: {e}",
                code="OPENAI_ERROR",
                suggestion="Check your OPENAI_API_KEY and network connection",
                details={"model": self.model},
            )

        if not response_text.strip():
            raise AnalysisError("Empty response from AI model", code="EMPTY_RESPONSE")

        try:
            parsed = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise AnalysisError(
                f"Failed to parse AI response as JSON: {e}",
                code="JSON_PARSE_ERROR",
                details={"response_preview": response_text[:200]},
            )

        if not isinstance(parsed, dict):
            raise AnalysisError("AI response is not a JSON object", code="UNEXPECTED_SHAPE")
        return parsed


# Lazy-loaded analyzer
_analyzer: FoodAnalyzer | None = None


def get_food_analyzer() -> FoodAnalyzer:
    """Get or create the shared FoodAnalyzer (lazy initialization)."""
    global _analyzer
    if _analyzer is None:
        _analyzer = FoodAnalyzer()
    return _analyzer
