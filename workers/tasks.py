# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Periodic maintenance tasks, scheduled by celery beat (see workers/config.py).
#
# Tasks:
# - expire_listings: Deactivate listings past their pickup window
# - refresh_platform_stats: Recompute the platform_stats row
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from core.services.listing_service import ListingService
from core.services.stats_service import StatsService

logger = logging.getLogger(__name__)


@shared_task(name="workers.tasks.expire_listings")
def expire_listings() -> dict[str, Any]:
    """
    Deactivate listings whose available_until has passed.

    Open pickups on them are expired and providers are notified.

    Returns:
        Dict with:
        - expired: Number of listings deactivated
        - listing_ids: Their UUIDs
    """
    expired = ListingService.expire_listings()
    logger.info(f"Expiry sweep finished: {len(expired)} listings expired")
    return {
        "expired": len(expired),
        "listing_ids": [str(listing["id"]) for listing in expired],
    }


@shared_task(name="workers.tasks.refresh_platform_stats")
def refresh_platform_stats() -> dict[str, Any]:
    """
    Recompute platform-wide totals.

    Returns:
        The stored totals (JSON-serializable)
    """
    stats = StatsService.refresh_platform_stats()
    return stats.model_dump(mode="json", by_alias=True)
