# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Supports both:
# - Session cookie (browser sign-in via Google or the demo login)
# - Bearer token (HS256 JWT from POST /api/auth/token) for API clients
#
# Usage:
#   from app.auth import get_current_user
#
#   @router.get("/protected")
#   def protected(user: dict = Depends(get_current_user)):
#       return {"user_id": user["id"]}
# =============================================================================

import logging
from datetime import timedelta
from typing import Any, Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.exceptions import AuthenticationRequiredError
from core.services.user_service import UserService
from lib.utils import utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_USER_KEY = "user_id"

# HTTP Bearer token extractor (optional - the session cookie is tried first)
security_optional = HTTPBearer(auto_error=False)


# =============================================================================
# Tokens
# =============================================================================

def create_access_token(user_id: str | UUID) -> tuple[str, int]:
    """
    Issue a bearer token for a user.

    Returns:
        Tuple of (token, lifetime in seconds)
    """
    expires_in = settings.ACCESS_TOKEN_TTL_MINUTES * 60
    now = utcnow()
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)
    return token, expires_in


def decode_access_token(token: str) -> str:
    """
    Verify a bearer token and return its user ID.

    Raises:
        AuthenticationRequiredError: If the token is invalid or expired
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Bearer token has expired")
        raise AuthenticationRequiredError("Token has expired")
    except JWTError as e:
        logger.warning(f"Bearer token validation failed: {e}")
        raise AuthenticationRequiredError("Invalid token")

    user_id = payload.get("sub")
    try:
        return str(UUID(user_id))
    except (TypeError, ValueError):
        logger.warning(f"Invalid user ID in token: {user_id}")
        raise AuthenticationRequiredError("Invalid token: malformed user ID")


# =============================================================================
# Sessions
# =============================================================================

def login_session(request: Request, user: dict[str, Any]) -> None:
    """Start a signed-cookie session for the user."""
    request.session[SESSION_USER_KEY] = str(user["id"])


def logout_session(request: Request) -> None:
    request.session.clear()


# =============================================================================
# Dependencies
# =============================================================================

def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> dict[str, Any]:
    """
    Resolve the signed-in user.

    This dependency:
    1. Uses the user_id stored in the session cookie, if any
    2. Otherwise verifies the Bearer token from the Authorization header
    3. Loads the user row, which must still exist

    A session pointing at a deleted user is cleared.

    Returns:
        The user row

    Raises:
        AuthenticationRequiredError: 401 if nobody is signed in
    """
    session_user_id = request.session.get(SESSION_USER_KEY)
    if session_user_id:
        user = UserService.find_user(session_user_id)
        if user:
            return user
        logger.info(f"Clearing stale session for missing user {session_user_id}")
        logout_session(request)

    if credentials is not None:
        user = UserService.find_user(decode_access_token(credentials.credentials))
        if user:
            return user
        raise AuthenticationRequiredError("User no longer exists")

    raise AuthenticationRequiredError()


def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> Optional[dict[str, Any]]:
    """
    Optionally get the signed-in user.

    Returns None instead of raising when nobody is signed in.
    """
    try:
        return get_current_user(request, credentials)
    except AuthenticationRequiredError:
        return None
