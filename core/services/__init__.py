# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .user_service import UserService
from .stats_service import StatsService
from .notification_service import NotificationService
from .storage_service import StorageService
from .listing_service import ListingService
from .pickup_service import PickupService

__all__ = [
    "UserService",
    "StatsService",
    "NotificationService",
    "StorageService",
    "ListingService",
    "PickupService",
]
