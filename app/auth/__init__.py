# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Session-cookie authentication with Google OAuth and a demo login, plus
# bearer tokens for API clients.
#
# Usage:
#   from app.auth import get_current_user
#
#   @router.get("/protected")
#   def protected(user: dict = Depends(get_current_user)):
#       return {"user_id": user["id"]}
# =============================================================================

from app.auth.dependencies import get_current_user, get_current_user_optional

__all__ = [
    "get_current_user",
    "get_current_user_optional",
]
