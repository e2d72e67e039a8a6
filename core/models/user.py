# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# - UserUpsert: Profile data from Google (or the demo login) used to create
#   or refresh a user row
# - UserResponse: What /auth/me and the demo login return
# - TokenResponse: Bearer token issued to non-browser clients
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from .base import CamelModel


class UserUpsert(CamelModel):
    """
    Input for UserService.upsert_user.

    Example:
        {
            "email": "ada@campus.edu",
            "google_id": "109876543210",
            "name": "Ada Lovelace",
            "profile_picture": "https://lh3.googleusercontent.com/..."
        }
    """

    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        description="Email address (unique per user)"
    )

    name: str = Field(
        default="",
        max_length=255,
        description="Display name"
    )

    google_id: str | None = Field(
        default=None,
        description="Google OAuth subject identifier"
    )

    profile_picture: str | None = Field(
        default=None,
        description="Avatar URL"
    )

    is_demo: bool = Field(
        default=False,
        description="True for the shared demo account"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value


class UserResponse(CamelModel):
    """
    User profile returned to clients.

    The Google id stays server-side.
    """

    id: UUID
    email: str
    name: str
    profile_picture: str | None = None
    is_demo: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TokenResponse(CamelModel):
    """Bearer token for API clients that can't keep a session cookie."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Lifetime in seconds")
