# =============================================================================
# core/models/stats.py - Impact Statistics Schemas
# =============================================================================
# Running totals shown on the dashboard (per user) and on the landing page
# (platform-wide). Decimal totals serialize as strings ("12.50"), which the
# web client parses with parseFloat.
# =============================================================================

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field

from .base import CamelModel


class UserStatsResponse(CamelModel):
    user_id: UUID | None = None
    total_food_saved: Decimal = Field(default=Decimal("0.00"), description="kg of food")
    total_carbon_saved: Decimal = Field(default=Decimal("0.00"), description="kg CO2")
    total_people_served: int = 0
    total_listings: int = 0
    total_pickups: int = 0
    last_updated: datetime | None = None


class PlatformStatsResponse(CamelModel):
    total_food_saved: Decimal = Decimal("0.00")
    total_carbon_saved: Decimal = Decimal("0.00")
    total_people_served: int = 0
    active_listings: int = 0
    last_updated: datetime | None = None
