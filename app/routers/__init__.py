# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - listings.py: Food listing browse/create/edit endpoints
# - analysis.py: AI photo analysis and recommendation endpoints
# - pickups.py: Reservation and pickup status endpoints
# - notifications.py: In-app notification endpoints
# - stats.py: User and platform impact statistics
#
# Auth routes live in app/auth/routes.py.
# Each router is mounted in main.py under /api.
# =============================================================================

from . import health
from . import listings
from . import analysis
from . import pickups
from . import notifications
from . import stats

__all__ = [
    "health",
    "listings",
    "analysis",
    "pickups",
    "notifications",
    "stats",
]
