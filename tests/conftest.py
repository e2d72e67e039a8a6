# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Replaces the Supabase client with an in-memory fake for every test
# - Provides API clients (anonymous and signed in) and data helpers
# =============================================================================

import json
import os
from datetime import timedelta
from unittest.mock import MagicMock

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-google-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-google-client-secret")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-sessions")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "false")
# AI off unless a test injects a mocked OpenAI client
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

import lib.food_analyzer as food_analyzer_module
from app.dependencies import get_analyzer
from app.main import app
from core.models.user import UserUpsert
from core.services.user_service import UserService
from lib.food_analyzer import FoodAnalyzer
from lib.supabase_client import SupabaseClient
from lib.utils import isoformat, utcnow
from tests.fake_supabase import FakeSupabase


# =============================================================================
# Helpers
# =============================================================================

def make_openai_client(payload) -> MagicMock:
    """OpenAI client mock whose chat completion returns `payload` as JSON."""
    mock_client = MagicMock()
    mock_response = MagicMock()
    content = payload if isinstance(payload, str) else json.dumps(payload)
    mock_response.choices[0].message.content = content
    mock_client.chat.completions.create.return_value = mock_response
    return mock_client


def future(hours: float = 4) -> str:
    return isoformat(utcnow() + timedelta(hours=hours))


def past(hours: float = 1) -> str:
    return isoformat(utcnow() - timedelta(hours=hours))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def fake_db():
    """In-memory Supabase installed as the singleton client."""
    fake = FakeSupabase()
    SupabaseClient._instance = fake
    food_analyzer_module._analyzer = None
    yield fake
    SupabaseClient._instance = None
    food_analyzer_module._analyzer = None


@pytest.fixture
def analyzer():
    """Analyzer with no OpenAI client: every analysis is the fallback."""
    return FoodAnalyzer(client=None)


@pytest.fixture
def client(analyzer):
    """Anonymous API client using the `analyzer` fixture."""
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client):
    """API client signed in as the demo user (session cookie set)."""
    response = client.post("/api/auth/demo")
    assert response.status_code == 200
    client.user = response.json()
    return client


@pytest.fixture
def make_user():
    """Create a user (and their stats row) directly through the service."""
    def _make_user(email: str = "ada@campus.edu", name: str = "Ada", google_id: str | None = None):
        return UserService.upsert_user(UserUpsert(email=email, name=name, google_id=google_id))
    return _make_user


@pytest.fixture
def make_listing():
    """Insert a listing row for a provider, bypassing the create flow."""
    def _make_listing(provider_id, **overrides):
        row = {
            "provider_id": str(provider_id),
            "title": "Veggie Pizza",
            "description": "Two large pizzas from the club meeting",
            "category": "meal",
            "portions": 8,
            "location": "Student Union, Room 204",
            "available_until": future(),
            "freshness_level": "fresh",
            "is_active": True,
        }
        row.update(overrides)
        return SupabaseClient.insert_row("food_listings", row)
    return _make_listing


@pytest.fixture
def listing_payload():
    """Valid create-listing JSON as the web client sends it."""
    return {
        "title": "Leftover Veggie Pizza",
        "description": "Two large pizzas from the club meeting",
        "category": "meal",
        "portions": 8,
        "location": "Student Union, Room 204",
        "availableUntil": future(),
        "freshnessLevel": "fresh",
    }
