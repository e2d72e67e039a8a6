# =============================================================================
# app/auth/oauth.py - Google OAuth Client
# =============================================================================
# Registers Google as an OpenID Connect provider with authlib's Starlette
# integration. The OAuth state is kept in the signed session cookie, so
# SessionMiddleware must be installed (see app/main.py).
#
# Usage:
#   from app.auth.oauth import oauth
#   return await oauth.google.authorize_redirect(request, redirect_uri)
# =============================================================================

from authlib.integrations.starlette_client import OAuth

from app.config import settings

GOOGLE_DISCOVERY_URL = "https://accounts.google.com/.well-known/openid-configuration"

oauth = OAuth()

oauth.register(
    name="google",
    client_id=settings.GOOGLE_CLIENT_ID,
    client_secret=settings.GOOGLE_CLIENT_SECRET,
    server_metadata_url=GOOGLE_DISCOVERY_URL,
    client_kwargs={"scope": "openid email profile"},
)
