# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Looks up users and creates/refreshes them from Google profiles or the demo
# login. Every user gets exactly one user_stats row.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import isoformat, normalize_uuid
from core.models.user import UserUpsert
from app.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """
    Service for user accounts.

    Provides a clean interface between auth routes and the users table.
    """

    @staticmethod
    def get_user(user_id: str | UUID) -> dict[str, Any]:
        """
        Get a user by ID.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        user = SupabaseClient.fetch_by_id("users", user_id)
        if not user:
            raise UserNotFoundError(str(user_id))
        return user

    @staticmethod
    def find_user(user_id: str | UUID) -> dict[str, Any] | None:
        """Get a user by ID, or None. Used by auth, where a miss isn't an error."""
        return SupabaseClient.fetch_by_id("users", user_id)

    @staticmethod
    def get_user_by_email(email: str) -> dict[str, Any] | None:
        return SupabaseClient.fetch_one("users", email=email.strip().lower())

    @staticmethod
    def get_user_by_google_id(google_id: str) -> dict[str, Any] | None:
        return SupabaseClient.fetch_one("users", google_id=google_id)

    @staticmethod
    def upsert_user(data: UserUpsert) -> dict[str, Any]:
        """
        Create or refresh a user.

        Resolution order:
        1. A user already linked to data.google_id is updated in place
           (the email may have changed on the Google side).
        2. Otherwise the row is upserted on email, which links a Google id
           to an account first created with the same address.

        Args:
            data: Validated profile data

        Returns:
            The stored user row

        Example:
            user = UserService.upsert_user(UserUpsert(
                email="ada@campus.edu", google_id="1098...", name="Ada"
            ))
        """
        now = isoformat()
        profile = {
            "email": data.email,
            "name": data.name or data.email.split("@")[0],
            "profile_picture": data.profile_picture,
            "is_demo": data.is_demo,
            "updated_at": now,
        }

        user = None
        if data.google_id:
            existing = UserService.get_user_by_google_id(data.google_id)
            if existing:
                rows = SupabaseClient.update_rows("users", profile, id=existing["id"])
                user = rows[0] if rows else existing
                logger.info(f"Updated user {user['id']} from Google profile")

        if user is None:
            row = dict(profile)
            if data.google_id:
                row["google_id"] = data.google_id
            user = SupabaseClient.upsert_row("users", row, on_conflict="email")
            logger.info(f"Upserted user {user['id']} ({data.email})")

        UserService.ensure_stats_row(user["id"])
        return user

    @staticmethod
    def ensure_stats_row(user_id: str | UUID) -> dict[str, Any]:
        """Return the user's stats row, creating a zeroed one if missing."""
        user_id = normalize_uuid(user_id)
        stats = SupabaseClient.fetch_one("user_stats", user_id=user_id)
        if stats:
            return stats

        stats = SupabaseClient.insert_row("user_stats", {
            "user_id": user_id,
            "last_updated": isoformat(),
        })
        logger.info(f"Created stats row for user {user_id}")
        return stats
