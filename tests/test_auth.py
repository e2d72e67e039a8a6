# =============================================================================
# tests/test_auth.py - Authentication Tests
# =============================================================================
# This module contains tests for:
# - Demo login, session cookie, logout
# - Google OAuth redirect and callback (authlib mocked)
# - Bearer tokens for API clients
# =============================================================================

from unittest.mock import AsyncMock

import pytest
from starlette.responses import RedirectResponse

from app.auth.dependencies import create_access_token
from app.auth.oauth import oauth
from app.config import settings


GOOGLE_PROFILE = {
    "sub": "109876543210",
    "email": "Ada@Campus.edu",
    "name": "Ada Lovelace",
    "picture": "https://lh3.googleusercontent.com/a/ada",
}


class TestSession:
    """Test demo login and the session cookie."""

    def test_me_is_null_when_signed_out(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json() is None

    def test_demo_login_starts_session(self, client):
        response = client.post("/api/auth/demo")

        assert response.status_code == 200
        user = response.json()
        assert user["email"] == "demo@ecoshare.app"
        assert user["name"] == "Demo User"
        assert user["isDemo"] is True
        assert "googleId" not in user

        me = client.get("/api/auth/me").json()
        assert me["id"] == user["id"]

    def test_demo_login_reuses_account(self, client, fake_db):
        first = client.post("/api/auth/demo").json()
        second = client.post("/api/auth/demo").json()

        assert first["id"] == second["id"]
        assert len(fake_db.rows("users")) == 1

    def test_logout_clears_session(self, auth_client):
        response = auth_client.post("/api/auth/logout")

        assert response.json() == {"success": True}
        assert auth_client.get("/api/auth/me").json() is None
        assert auth_client.get("/api/my-listings").status_code == 401

    def test_demo_login_disabled(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DEMO_LOGIN_ENABLED", False)

        response = client.post("/api/auth/demo")

        assert response.status_code == 403
        assert response.json()["code"] == "DEMO_LOGIN_DISABLED"

    def test_stale_session_is_cleared(self, auth_client, fake_db):
        fake_db.tables["users"].clear()

        assert auth_client.get("/api/auth/me").json() is None
        assert auth_client.get("/api/stats/user").status_code == 401


class TestGoogleOAuth:
    """Test the Google OAuth flow with authlib mocked."""

    def test_login_redirects_to_google(self, client, monkeypatch):
        redirect = AsyncMock(return_value=RedirectResponse("https://accounts.google.com/o/oauth2/auth"))
        monkeypatch.setattr(oauth.google, "authorize_redirect", redirect)

        response = client.get("/api/auth/google", follow_redirects=False)

        assert response.status_code in (302, 307)
        assert response.headers["location"].startswith("https://accounts.google.com/")
        redirect_uri = redirect.call_args.args[1]
        assert redirect_uri.endswith("/api/auth/google/callback")

    def test_callback_creates_user_and_session(self, client, monkeypatch, fake_db):
        monkeypatch.setattr(
            oauth.google,
            "authorize_access_token",
            AsyncMock(return_value={"userinfo": GOOGLE_PROFILE}),
        )

        response = client.get("/api/auth/google/callback", follow_redirects=False)

        assert response.status_code in (302, 307)
        assert response.headers["location"] == f"{settings.FRONTEND_URL}/dashboard"

        me = client.get("/api/auth/me").json()
        assert me["email"] == "ada@campus.edu"
        assert me["name"] == "Ada Lovelace"
        assert fake_db.rows("users")[0]["google_id"] == "109876543210"

    def test_callback_failure_redirects_to_login(self, client, monkeypatch, fake_db):
        monkeypatch.setattr(
            oauth.google,
            "authorize_access_token",
            AsyncMock(side_effect=RuntimeError("mismatching_state")),
        )

        response = client.get("/api/auth/google/callback", follow_redirects=False)

        assert response.headers["location"] == f"{settings.FRONTEND_URL}/login?error=oauth_failed"
        assert fake_db.rows("users") == []

    def test_callback_without_email_fails(self, client, monkeypatch, fake_db):
        monkeypatch.setattr(
            oauth.google,
            "authorize_access_token",
            AsyncMock(return_value={"userinfo": {"sub": "123"}}),
        )

        response = client.get("/api/auth/google/callback", follow_redirects=False)

        assert response.headers["location"].endswith("/login?error=oauth_failed")
        assert client.get("/api/auth/me").json() is None


class TestBearerTokens:
    """Test POST /api/auth/token and bearer authentication."""

    def test_issue_token_requires_session(self, client):
        assert client.post("/api/auth/token").status_code == 401

    def test_token_authenticates_requests(self, auth_client):
        response = auth_client.post("/api/auth/token")

        assert response.status_code == 200
        body = response.json()
        assert body["tokenType"] == "bearer"
        assert body["expiresIn"] == settings.ACCESS_TOKEN_TTL_MINUTES * 60

        auth_client.post("/api/auth/logout")
        headers = {"Authorization": f"Bearer {body['accessToken']}"}
        me = auth_client.get("/api/auth/me", headers=headers).json()
        assert me["id"] == auth_client.user["id"]
        assert auth_client.get("/api/stats/user", headers=headers).status_code == 200

    def test_invalid_token_is_rejected(self, client):
        headers = {"Authorization": "Bearer not-a-real-token"}

        response = client.get("/api/stats/user", headers=headers)

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_REQUIRED"

    def test_token_for_deleted_user_is_rejected(self, client, make_user, fake_db):
        user = make_user()
        token, _ = create_access_token(user["id"])
        fake_db.tables["users"].clear()

        response = client.get("/api/stats/user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    @pytest.mark.parametrize("ttl", [1, 30])
    def test_token_lifetime_follows_settings(self, monkeypatch, ttl):
        monkeypatch.setattr(settings, "ACCESS_TOKEN_TTL_MINUTES", ttl)

        _, expires_in = create_access_token("11111111-1111-1111-1111-111111111111")

        assert expires_in == ttl * 60
