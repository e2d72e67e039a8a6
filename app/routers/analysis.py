# =============================================================================
# app/routers/analysis.py - AI Analysis Endpoints
# =============================================================================
# Lets the create-listing form preview the AI analysis of a photo before
# submitting, and suggests foods to share from a list of preferences.
#
# Endpoints:
#   POST /food-listings/analyze  - Analyze a photo (multipart "image")
#   POST /recommendations        - Suggest foods for preferences
# =============================================================================

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.auth import get_current_user
from app.dependencies import AnalyzerDep
from core.models.analysis import FoodAnalysis, RecommendationRequest, RecommendationResponse
from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/food-listings/analyze", response_model=FoodAnalysis)
async def analyze_food_image(
    image: Annotated[UploadFile, File(description="Food photo")],
    analyzer: AnalyzerDep,
    category: Annotated[Optional[str], Form(description="Category hint")] = None,
    user: dict[str, Any] = Depends(get_current_user),
) -> FoodAnalysis:
    """
    Analyze a food photo without creating a listing.

    Returns source="fallback" with default estimates if the AI is unavailable.
    """
    content = await image.read()
    mime = StorageService.validate_image(content, image.content_type)

    logger.info(f"Analyzing {len(content)} byte image for user {user['id']}")
    return await run_in_threadpool(
        analyzer.analyze_image, content, mime, category
    )


@router.post("/recommendations", response_model=RecommendationResponse)
def recommend_foods(
    request: RecommendationRequest,
    analyzer: AnalyzerDep,
    user: dict[str, Any] = Depends(get_current_user),
) -> RecommendationResponse:
    """Suggest up to 5 foods for the given preferences (empty if the AI is unavailable)."""
    return RecommendationResponse(
        recommendations=analyzer.recommend(request.preferences)
    )
