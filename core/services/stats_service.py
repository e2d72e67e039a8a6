# =============================================================================
# core/services/stats_service.py - Impact Statistics
# =============================================================================
# Per-user running totals are updated incrementally as listings are posted,
# reserved and completed. Platform totals are recomputed from the per-user
# rows whenever they are read (and periodically by the worker).
#
# Totals are kept as Decimals rounded to 2 places.
# =============================================================================

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from lib.food_analyzer import CARBON_PER_KG_FOOD, DEFAULT_CARBON_SAVINGS, food_saved_kg
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import isoformat, normalize_uuid, to_decimal, utcnow
from core.models.stats import PlatformStatsResponse, UserStatsResponse

logger = logging.getLogger(__name__)

_DECIMAL_FIELDS = ("total_food_saved", "total_carbon_saved")
_INT_FIELDS = ("total_people_served", "total_listings", "total_pickups")


class StatsService:
    """Service for user and platform impact statistics."""

    # -------------------------------------------------------------------------
    # User stats
    # -------------------------------------------------------------------------

    @staticmethod
    def get_user_stats(user_id: str | UUID) -> UserStatsResponse:
        """
        Get a user's totals.

        Returns zero-valued stats if the user has no row yet.
        """
        row = SupabaseClient.fetch_one("user_stats", user_id=normalize_uuid(user_id))
        if not row:
            return UserStatsResponse(user_id=user_id)
        return StatsService._user_stats_from_row(row)

    @staticmethod
    def increment_user_stats(
        user_id: str | UUID,
        food_saved: Decimal | float | int = 0,
        carbon_saved: Decimal | float | int = 0,
        people_served: int = 0,
        listings: int = 0,
        pickups: int = 0,
    ) -> UserStatsResponse:
        """
        Add to a user's running totals.

        Read-modify-write: the row is created when absent and only the
        non-zero increments are written.

        Args:
            user_id: User whose totals change
            food_saved: kg of food
            carbon_saved: kg CO2
            people_served: People fed
            listings: Listings posted
            pickups: Pickups reserved

        Returns:
            Updated stats

        Example:
            StatsService.increment_user_stats(provider_id, listings=1)
        """
        user_id = normalize_uuid(user_id)
        increments: dict[str, Any] = {
            "total_food_saved": to_decimal(food_saved),
            "total_carbon_saved": to_decimal(carbon_saved),
            "total_people_served": int(people_served),
            "total_listings": int(listings),
            "total_pickups": int(pickups),
        }

        current = SupabaseClient.fetch_one("user_stats", user_id=user_id)

        updates: dict[str, Any] = {"last_updated": isoformat()}
        for field, delta in increments.items():
            if not delta:
                continue
            if field in _DECIMAL_FIELDS:
                base = to_decimal(current.get(field) if current else None)
                updates[field] = str(to_decimal(base + delta))
            else:
                base = int((current or {}).get(field) or 0)
                updates[field] = base + delta

        if current:
            rows = SupabaseClient.update_rows("user_stats", updates, user_id=user_id)
            row = rows[0] if rows else {**current, **updates}
        else:
            row = SupabaseClient.insert_row("user_stats", {"user_id": user_id, **updates})

        logger.info(f"Updated stats for user {user_id}: {updates}")
        return StatsService._user_stats_from_row(row)

    @staticmethod
    def credit_completed_pickup(provider_id: str | UUID, listing: dict[str, Any]) -> UserStatsResponse:
        """
        Credit a provider for a completed pickup of one of their listings.

        people served = serves_count, else portions
        carbon saved  = carbon_savings, else 2.5 kg
        food saved    = carbon saved / 2.5 kg CO2 per kg
        """
        people = listing.get("serves_count") or listing.get("portions") or 1
        carbon = listing.get("carbon_savings")
        carbon = to_decimal(carbon) if carbon not in (None, "") else DEFAULT_CARBON_SAVINGS
        if carbon <= 0:
            carbon = DEFAULT_CARBON_SAVINGS

        logger.info(
            f"Crediting provider {provider_id}: {carbon} kg CO2, "
            f"{people} people ({CARBON_PER_KG_FOOD} kg CO2/kg food)"
        )
        return StatsService.increment_user_stats(
            provider_id,
            food_saved=food_saved_kg(carbon),
            carbon_saved=carbon,
            people_served=int(people),
        )

    # -------------------------------------------------------------------------
    # Platform stats
    # -------------------------------------------------------------------------

    @staticmethod
    def refresh_platform_stats() -> PlatformStatsResponse:
        """
        Recompute platform totals and store them in the single platform_stats row.

        Sums every user_stats row and counts active listings that haven't
        passed their pickup window.

        Raises:
            SupabaseClientError: If a query fails
        """
        client = SupabaseClient.get_client()

        try:
            user_rows = (
                client.table("user_stats")
                .select("total_food_saved,total_carbon_saved,total_people_served")
                .execute()
            ).data or []

            active = (
                client.table("food_listings")
                .select("id", count="exact")
                .eq("is_active", True)
                .gte("available_until", isoformat())
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to aggregate platform stats: {e}",
                code="AGGREGATE_FAILED",
            )

        active_count = active.count if active.count is not None else len(active.data or [])

        totals = {
            "total_food_saved": str(sum((to_decimal(r.get("total_food_saved")) for r in user_rows), Decimal("0.00"))),
            "total_carbon_saved": str(sum((to_decimal(r.get("total_carbon_saved")) for r in user_rows), Decimal("0.00"))),
            "total_people_served": sum(int(r.get("total_people_served") or 0) for r in user_rows),
            "active_listings": active_count,
            "last_updated": isoformat(),
        }

        existing = SupabaseClient.fetch_one("platform_stats")
        if existing:
            rows = SupabaseClient.update_rows("platform_stats", totals, id=existing["id"])
            row = rows[0] if rows else {**existing, **totals}
        else:
            row = SupabaseClient.insert_row("platform_stats", totals)

        logger.info(
            f"Refreshed platform stats: {totals['active_listings']} active listings, "
            f"{totals['total_carbon_saved']} kg CO2 saved"
        )
        return PlatformStatsResponse(
            total_food_saved=to_decimal(row.get("total_food_saved")),
            total_carbon_saved=to_decimal(row.get("total_carbon_saved")),
            total_people_served=int(row.get("total_people_served") or 0),
            active_listings=int(row.get("active_listings") or 0),
            last_updated=row.get("last_updated") or utcnow(),
        )

    @staticmethod
    def _user_stats_from_row(row: dict[str, Any]) -> UserStatsResponse:
        return UserStatsResponse(
            user_id=row.get("user_id"),
            total_food_saved=to_decimal(row.get("total_food_saved")),
            total_carbon_saved=to_decimal(row.get("total_carbon_saved")),
            total_people_served=int(row.get("total_people_served") or 0),
            total_listings=int(row.get("total_listings") or 0),
            total_pickups=int(row.get("total_pickups") or 0),
            last_updated=row.get("last_updated"),
        )
