# =============================================================================
# tests/test_analysis.py - AI Analysis API Tests
# =============================================================================
# This module contains tests for:
# - POST /api/food-listings/analyze (photo preview)
# - POST /api/recommendations
# - Image size limits on uploads
# =============================================================================

import json
from decimal import Decimal

from app.config import settings
from tests.conftest import future, make_openai_client

JPEG = b"\xff\xd8\xff\xe0fake-jpeg-bytes"


def _analyze(client, content=JPEG, content_type="image/jpeg", **form):
    return client.post(
        "/api/food-listings/analyze",
        files={"image": ("food.jpg", content, content_type)},
        data=form,
    )


class TestAnalyzeImage:
    """Test POST /api/food-listings/analyze."""

    def test_requires_authentication(self, client):
        response = _analyze(client)

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_REQUIRED"

    def test_fallback_when_ai_disabled(self, auth_client):
        response = _analyze(auth_client, category="dessert")

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "fallback"
        assert body["category"] == "dessert"
        assert Decimal(body["carbonSavings"]) == Decimal("2.50")

    def test_ai_analysis_returned(self, auth_client, analyzer):
        analyzer.client = make_openai_client({
            "title": "Banana Bread",
            "category": "baked_goods",
            "freshnessLevel": "fresh",
            "portions": 10,
            "confidence": 90,
        })

        body = _analyze(auth_client).json()

        assert body["source"] == "ai"
        assert body["title"] == "Banana Bread"
        assert body["category"] == "baked_goods"
        assert body["confidence"] == 0.9

    def test_overflowing_reply_does_not_fail(self, auth_client, analyzer):
        analyzer.client = make_openai_client('{"title": "Soup", "portions": 1e999}')

        response = _analyze(auth_client)

        assert response.status_code == 200
        assert response.json()["portions"] == 1

    def test_rejects_non_image(self, auth_client):
        response = _analyze(auth_client, content=b"hello", content_type="text/plain")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"


class TestImageSizeLimit:
    """Test the MAX_IMAGE_SIZE_MB limit."""

    def test_analyze_rejects_oversized_image(self, auth_client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_IMAGE_SIZE_MB", 1)
        oversized = b"\xff" * (1024 * 1024 + 1)

        response = _analyze(auth_client, content=oversized)

        assert response.status_code == 413
        assert response.json()["code"] == "FILE_TOO_LARGE"

    def test_create_listing_rejects_oversized_image(self, auth_client, monkeypatch, fake_db):
        monkeypatch.setattr(settings, "MAX_IMAGE_SIZE_MB", 1)
        payload = {"title": "Pizza", "location": "Dorm Kitchen", "availableUntil": future()}

        response = auth_client.post(
            "/api/food-listings",
            data={"data": json.dumps(payload)},
            files={"image": ("pizza.jpg", b"\xff" * (1024 * 1024 + 1), "image/jpeg")},
        )

        assert response.status_code == 413
        assert fake_db.rows("food_listings") == []
        assert fake_db.storage.objects == {}


class TestRecommendations:
    """Test POST /api/recommendations."""

    def test_requires_authentication(self, client):
        response = client.post("/api/recommendations", json={"preferences": ["vegan"]})

        assert response.status_code == 401

    def test_limited_to_five(self, auth_client, analyzer):
        analyzer.client = make_openai_client(
            {"recommendations": ["Hummus", "Falafel", "Salad", "Soup", "Curry", "Rice"]}
        )

        response = auth_client.post("/api/recommendations", json={"preferences": ["vegetarian"]})

        assert response.status_code == 200
        assert response.json() == {"recommendations": ["Hummus", "Falafel", "Salad", "Soup", "Curry"]}

    def test_empty_when_ai_disabled(self, auth_client):
        response = auth_client.post("/api/recommendations", json={"preferences": ["spicy"]})

        assert response.json() == {"recommendations": []}

    def test_empty_preferences_rejected(self, auth_client):
        response = auth_client.post("/api/recommendations", json={"preferences": []})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
