# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends(), and can be
# replaced in tests through app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from lib.food_analyzer import FoodAnalyzer, get_food_analyzer


def get_analyzer() -> FoodAnalyzer:
    """
    Get the shared FoodAnalyzer instance.

    Created on first use, so the app starts without OpenAI configured.
    """
    return get_food_analyzer()


# Type alias for dependency injection
AnalyzerDep = Annotated[FoodAnalyzer, Depends(get_analyzer)]
