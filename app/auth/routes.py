# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Endpoints:
#   GET  /auth/google           - Redirect to Google consent
#   GET  /auth/google/callback  - Finish Google login, start session
#   POST /auth/demo             - Sign in as the shared demo user
#   POST /auth/logout           - End the session
#   GET  /auth/me               - Current user (or null)
#   POST /auth/token            - Bearer token for API clients
# =============================================================================

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from starlette.responses import RedirectResponse

from app.auth.dependencies import (
    create_access_token,
    get_current_user,
    get_current_user_optional,
    login_session,
    logout_session,
)
from app.auth.oauth import oauth
from app.config import settings
from app.exceptions import DemoLoginDisabledError, OAuthLoginError
from core.models.user import TokenResponse, UserResponse, UserUpsert
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

DEMO_EMAIL = "demo@ecoshare.app"
DEMO_NAME = "Demo User"


def _frontend_url(path: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}{path}"


@router.get("/google")
async def google_login(request: Request):
    """Redirect the browser to Google's consent page."""
    redirect_uri = request.url_for("google_callback")
    return await oauth.google.authorize_redirect(request, str(redirect_uri))


@router.get("/google/callback", name="google_callback")
async def google_callback(request: Request) -> RedirectResponse:
    """
    Handle Google's redirect after consent.

    Creates or refreshes the user, stores the user ID in the session and
    sends the browser to the dashboard. Any failure sends it back to the
    login page with ?error=oauth_failed.
    """
    try:
        token = await oauth.google.authorize_access_token(request)
        user_info = token.get("userinfo") or {}

        if not user_info.get("sub") or not user_info.get("email"):
            raise OAuthLoginError("incomplete profile returned by Google")

        user = UserService.upsert_user(UserUpsert(
            email=user_info["email"],
            google_id=user_info["sub"],
            name=user_info.get("name") or "",
            profile_picture=user_info.get("picture"),
        ))
    except Exception as e:
        logger.warning(f"Google login failed: {e}")
        return RedirectResponse(url=_frontend_url("/login?error=oauth_failed"))

    login_session(request, user)
    logger.info(f"User {user['id']} signed in with Google")
    return RedirectResponse(url=_frontend_url("/dashboard"))


@router.post("/demo", response_model=UserResponse)
def demo_login(request: Request) -> dict[str, Any]:
    """
    Sign in as the shared demo account.

    Raises:
        403: If DEMO_LOGIN_ENABLED is off
    """
    if not settings.DEMO_LOGIN_ENABLED:
        raise DemoLoginDisabledError()

    user = UserService.upsert_user(UserUpsert(email=DEMO_EMAIL, name=DEMO_NAME, is_demo=True))
    login_session(request, user)
    logger.info(f"Demo login for user {user['id']}")
    return user


@router.post("/logout")
def logout(request: Request) -> dict:
    """End the session. Always succeeds."""
    logout_session(request)
    return {"success": True}


@router.get("/me", response_model=Optional[UserResponse])
def get_me(
    user: Optional[dict[str, Any]] = Depends(get_current_user_optional),
) -> Optional[dict[str, Any]]:
    """Get the signed-in user's profile, or null when signed out."""
    return user


@router.post("/token", response_model=TokenResponse)
def issue_token(user: dict[str, Any] = Depends(get_current_user)) -> TokenResponse:
    """
    Issue a bearer token for the signed-in user.

    Useful for API clients that can't keep the session cookie.
    """
    token, expires_in = create_access_token(user["id"])
    return TokenResponse(access_token=token, expires_in=expires_in)
