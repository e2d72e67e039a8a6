# =============================================================================
# tests/test_listings.py - Food Listing API Tests
# =============================================================================
# This module contains tests for:
# - Creating listings (validation, AI enrichment, fallbacks, images)
# - Browsing active listings
# - Editing and withdrawing listings
# - The expiry sweep
# =============================================================================

import json
from decimal import Decimal

import pytest

from app.exceptions import InvalidListingDataError
from core.services.listing_service import ListingService
from lib.food_analyzer import FoodAnalyzer
from lib.supabase_client import SupabaseClient, SupabaseClientError
from tests.conftest import future, make_openai_client, past


AI_REPLY = {
    "title": "Margherita Pizza",
    "description": "Cheese and tomato pizza",
    "category": "meal",
    "freshnessLevel": "fresh",
    "portions": 6,
    "confidence": 0.92,
    "servesCount": 6,
    "carbonSavings": 4.5,
    "healthScore": 5,
}

JPEG = b"\xff\xd8\xff\xe0fake-jpeg-bytes"


def _post_listing(client, payload, files=None):
    return client.post(
        "/api/food-listings",
        data={"data": json.dumps(payload)},
        files=files,
    )


# =============================================================================
# Create
# =============================================================================

class TestCreateListing:
    """Test POST /api/food-listings."""

    def test_requires_authentication(self, client, listing_payload):
        response = _post_listing(client, listing_payload)

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_REQUIRED"

    def test_valid_listing_is_created(self, auth_client, listing_payload, fake_db):
        response = _post_listing(auth_client, listing_payload)

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Leftover Veggie Pizza"
        assert body["providerId"] == auth_client.user["id"]
        assert body["isActive"] is True
        assert len(fake_db.rows("food_listings")) == 1

    def test_increments_provider_total_listings(self, auth_client, listing_payload):
        _post_listing(auth_client, listing_payload)
        _post_listing(auth_client, listing_payload)

        stats = auth_client.get("/api/stats/user").json()
        assert stats["totalListings"] == 2

    def test_missing_location_is_rejected(self, auth_client, listing_payload, fake_db):
        del listing_payload["location"]

        response = _post_listing(auth_client, listing_payload)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_LISTING_DATA"
        assert fake_db.rows("food_listings") == []

    def test_past_availability_is_rejected(self, auth_client, listing_payload):
        listing_payload["availableUntil"] = past()

        response = _post_listing(auth_client, listing_payload)

        assert response.status_code == 400

    def test_invalid_json_is_rejected(self, auth_client):
        response = auth_client.post("/api/food-listings", data={"data": "{not json"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_LISTING_DATA"

    def test_ai_failure_still_creates_listing_with_fallback(self, auth_client, listing_payload):
        # The default test analyzer has no OpenAI client
        response = _post_listing(auth_client, listing_payload)

        body = response.json()
        assert response.status_code == 200
        assert Decimal(body["carbonSavings"]) == Decimal("2.50")
        assert body["servesCount"] == 1
        assert body["aiAnalysis"]["source"] == "fallback"

    def test_user_values_win_over_analysis(self, auth_client, analyzer, listing_payload):
        analyzer.client = make_openai_client(AI_REPLY)

        response = _post_listing(auth_client, listing_payload)

        body = response.json()
        assert body["title"] == "Leftover Veggie Pizza"
        assert body["portions"] == 8
        assert body["servesCount"] == 6
        assert Decimal(body["carbonSavings"]) == Decimal("4.50")
        assert body["aiAnalysis"]["source"] == "ai"

    def test_image_analysis_fills_blank_fields(self, auth_client, analyzer, fake_db):
        analyzer.client = make_openai_client(AI_REPLY)
        payload = {"location": "Dorm Kitchen", "availableUntil": future()}

        response = _post_listing(
            auth_client, payload, files={"image": ("pizza.jpg", JPEG, "image/jpeg")}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Margherita Pizza"
        assert body["category"] == "meal"
        assert body["freshnessLevel"] == "fresh"
        assert body["portions"] == 6
        assert body["imageUrl"].startswith("https://test-project.supabase.co/storage/v1/object/public/food-images/listings/")
        assert len(fake_db.storage.objects) == 1

    def test_image_with_ai_disabled_uses_fallback_fields(self, auth_client):
        payload = {"title": "Mystery Tray", "location": "Dorm Kitchen", "availableUntil": future()}

        response = _post_listing(
            auth_client, payload, files={"image": ("tray.png", b"png-bytes", "image/png")}
        )

        body = response.json()
        assert response.status_code == 200
        assert body["category"] == "meal"
        assert body["freshnessLevel"] == "good"

    def test_rejects_non_image_upload(self, auth_client, listing_payload):
        response = _post_listing(
            auth_client, listing_payload, files={"image": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"

    def test_storage_failure_returns_error(self, auth_client, listing_payload, fake_db):
        fake_db.storage.fail_uploads = True

        response = _post_listing(
            auth_client, listing_payload, files={"image": ("pizza.jpg", JPEG, "image/jpeg")}
        )

        assert response.status_code == 500
        assert response.json()["code"] == "STORAGE_UPLOAD_ERROR"
        assert fake_db.rows("food_listings") == []


# =============================================================================
# Read
# =============================================================================

class TestBrowseListings:
    """Test listing reads."""

    def test_only_active_unexpired_listings(self, client, make_user, make_listing):
        provider = make_user()
        live = make_listing(provider["id"], title="Live")
        make_listing(provider["id"], title="Withdrawn", is_active=False)
        make_listing(provider["id"], title="Stale", available_until=past())

        response = client.get("/api/food-listings")

        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [live["id"]]

    def test_newest_first_and_limit(self, client, make_user, make_listing):
        provider = make_user()
        for i in range(3):
            make_listing(provider["id"], title=f"Listing {i}")

        response = client.get("/api/food-listings", params={"limit": 2})

        titles = [item["title"] for item in response.json()]
        assert titles == ["Listing 2", "Listing 1"]

    def test_limit_out_of_range(self, client):
        assert client.get("/api/food-listings", params={"limit": 0}).status_code == 400
        assert client.get("/api/food-listings", params={"limit": 101}).status_code == 400

    def test_get_by_id(self, client, make_user, make_listing):
        listing = make_listing(make_user()["id"])

        response = client.get(f"/api/food-listings/{listing['id']}")

        assert response.status_code == 200
        assert response.json()["title"] == "Veggie Pizza"

    def test_get_missing_listing(self, client):
        response = client.get("/api/food-listings/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["code"] == "LISTING_NOT_FOUND"

    def test_my_listings_include_inactive(self, auth_client, make_listing, make_user):
        me = auth_client.user["id"]
        make_listing(me, title="Mine")
        make_listing(me, title="Mine, withdrawn", is_active=False)
        make_listing(make_user()["id"], title="Someone else's")

        titles = {item["title"] for item in auth_client.get("/api/my-listings").json()}

        assert titles == {"Mine", "Mine, withdrawn"}


# =============================================================================
# Update / Delete
# =============================================================================

class TestEditListing:
    """Test PATCH and DELETE by the provider."""

    def test_provider_can_edit(self, auth_client, make_listing):
        listing = make_listing(auth_client.user["id"])

        response = auth_client.patch(
            f"/api/food-listings/{listing['id']}",
            json={"portions": 3, "freshnessLevel": "consume_soon"},
        )

        assert response.status_code == 200
        assert response.json()["portions"] == 3
        assert response.json()["freshnessLevel"] == "consume_soon"
        assert response.json()["title"] == "Veggie Pizza"

    def test_other_users_cannot_edit(self, auth_client, make_user, make_listing):
        listing = make_listing(make_user()["id"])

        response = auth_client.patch(f"/api/food-listings/{listing['id']}", json={"portions": 1})

        assert response.status_code == 403
        assert response.json()["code"] == "LISTING_NOT_OWNED"

    def test_invalid_edit_is_rejected(self, auth_client, make_listing):
        listing = make_listing(auth_client.user["id"])

        response = auth_client.patch(f"/api/food-listings/{listing['id']}", json={"portions": 0})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_delete_is_soft(self, auth_client, make_listing, fake_db):
        listing = make_listing(auth_client.user["id"])

        response = auth_client.delete(f"/api/food-listings/{listing['id']}")

        assert response.status_code == 200
        assert response.json()["isActive"] is False
        assert fake_db.rows("food_listings")[0]["is_active"] is False
        assert auth_client.get("/api/food-listings").json() == []


# =============================================================================
# Expiry sweep
# =============================================================================

class TestExpireListings:
    """Test ListingService.expire_listings."""

    def test_expires_stale_listings_and_notifies(self, fake_db, make_user, make_listing):
        provider = make_user()
        recipient = make_user(email="grace@campus.edu", name="Grace")
        stale = make_listing(provider["id"], title="Old Soup", available_until=past())
        live = make_listing(provider["id"], title="Fresh Bread")
        fake_db.table("pickups").insert({
            "listing_id": stale["id"],
            "recipient_id": recipient["id"],
            "status": "reserved",
        }).execute()

        expired = ListingService.expire_listings()

        assert [listing["id"] for listing in expired] == [stale["id"]]
        listings = {row["id"]: row for row in fake_db.rows("food_listings")}
        assert listings[stale["id"]]["is_active"] is False
        assert listings[live["id"]]["is_active"] is True
        assert fake_db.rows("pickups")[0]["status"] == "expired"

        notifications = fake_db.rows("notifications")
        assert len(notifications) == 1
        assert notifications[0]["type"] == "listing_expired"
        assert notifications[0]["user_id"] == provider["id"]

    def test_nothing_to_expire(self, make_user, make_listing):
        make_listing(make_user()["id"])

        assert ListingService.expire_listings() == []


class TestCreateListingService:
    """Test ListingService.create_listing directly."""

    def test_text_analysis_only_when_title_present(self, make_user):
        mock_client = make_openai_client(AI_REPLY)
        analyzer = FoodAnalyzer(client=mock_client)

        with pytest.raises(InvalidListingDataError):
            ListingService.create_listing(
                make_user()["id"],
                {"location": "Gym", "availableUntil": future()},
                analyzer=analyzer,
            )

        mock_client.chat.completions.create.assert_not_called()

    def test_invalid_listing_with_image_is_not_uploaded(self, make_user, analyzer, fake_db):
        with pytest.raises(InvalidListingDataError):
            ListingService.create_listing(
                make_user()["id"],
                {"title": "Pizza", "location": "Gym", "availableUntil": past()},
                image=JPEG,
                image_type="image/jpeg",
                analyzer=analyzer,
            )

        assert fake_db.storage.objects == {}

    def test_failed_insert_removes_uploaded_image(self, make_user, analyzer, fake_db, monkeypatch):
        user = make_user()

        def failing_insert(table, data):
            raise SupabaseClientError("insert failed", code="INSERT_FAILED")

        monkeypatch.setattr(SupabaseClient, "insert_row", failing_insert)

        with pytest.raises(SupabaseClientError):
            ListingService.create_listing(
                user["id"],
                {"title": "Pizza", "location": "Gym", "availableUntil": future()},
                image=JPEG,
                image_type="image/jpeg",
                analyzer=analyzer,
            )

        assert fake_db.storage.objects == {}
        assert fake_db.rows("food_listings") == []
