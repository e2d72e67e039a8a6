# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - base.py: CamelModel (snake_case in Python, camelCase JSON)
# - user.py: User upsert/response and bearer token schemas
# - listing.py: Food listing draft/create/update/response schemas
# - pickup.py: Pickup reservation schemas and status state machine
# - notification.py: Notification schemas
# - stats.py: User and platform impact statistics
# - analysis.py: AI food analysis and recommendations
#
# These models define the "contract" between API and clients.
# =============================================================================

from .base import CamelModel

from .user import TokenResponse, UserResponse, UserUpsert

from .listing import (
    FoodCategory,
    FreshnessLevel,
    ListingCreate,
    ListingDraft,
    ListingResponse,
    ListingUpdate,
)

from .pickup import (
    OPEN_PICKUP_STATUSES,
    PICKUP_TRANSITIONS,
    PickupCreate,
    PickupResponse,
    PickupStatus,
    PickupStatusUpdate,
)

from .notification import NotificationResponse, NotificationType

from .stats import PlatformStatsResponse, UserStatsResponse

from .analysis import (
    AnalysisSource,
    FoodAnalysis,
    RecommendationRequest,
    RecommendationResponse,
)

__all__ = [
    "CamelModel",
    # User
    "TokenResponse",
    "UserResponse",
    "UserUpsert",
    # Listing
    "FoodCategory",
    "FreshnessLevel",
    "ListingCreate",
    "ListingDraft",
    "ListingResponse",
    "ListingUpdate",
    # Pickup
    "OPEN_PICKUP_STATUSES",
    "PICKUP_TRANSITIONS",
    "PickupCreate",
    "PickupResponse",
    "PickupStatus",
    "PickupStatusUpdate",
    # Notification
    "NotificationResponse",
    "NotificationType",
    # Stats
    "PlatformStatsResponse",
    "UserStatsResponse",
    # Analysis
    "AnalysisSource",
    "FoodAnalysis",
    "RecommendationRequest",
    "RecommendationResponse",
]
