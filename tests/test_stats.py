# =============================================================================
# tests/test_stats.py - Statistics Tests
# =============================================================================
# This module contains tests for:
# - Incremental per-user totals
# - Platform totals recomputed on read
# =============================================================================

from decimal import Decimal

from core.services.stats_service import StatsService
from tests.conftest import past


class TestIncrementUserStats:
    """Test StatsService.increment_user_stats."""

    def test_creates_row_when_missing(self, fake_db):
        user_id = "11111111-1111-1111-1111-111111111111"

        stats = StatsService.increment_user_stats(user_id, pickups=1)

        assert stats.total_pickups == 1
        assert len(fake_db.rows("user_stats")) == 1

    def test_adds_to_existing_totals(self, make_user):
        user = make_user()

        StatsService.increment_user_stats(user["id"], carbon_saved=Decimal("2.5"), food_saved=1)
        stats = StatsService.increment_user_stats(user["id"], carbon_saved=1.255, people_served=3)

        assert stats.total_carbon_saved == Decimal("3.76")
        assert stats.total_food_saved == Decimal("1.00")
        assert stats.total_people_served == 3

    def test_zero_increments_leave_fields_unchanged(self, make_user, fake_db):
        user = make_user()
        StatsService.increment_user_stats(user["id"], listings=2)

        StatsService.increment_user_stats(user["id"], pickups=1)

        row = fake_db.rows("user_stats")[0]
        assert row["total_listings"] == 2
        assert row["total_pickups"] == 1

    def test_get_user_stats_defaults(self):
        stats = StatsService.get_user_stats("22222222-2222-2222-2222-222222222222")

        assert stats.total_food_saved == Decimal("0.00")
        assert stats.total_listings == 0


class TestPlatformStats:
    """Test GET /api/stats/platform."""

    def test_empty_platform(self, client):
        response = client.get("/api/stats/platform")

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["totalCarbonSaved"]) == Decimal("0")
        assert body["activeListings"] == 0

    def test_recomputed_on_read(self, client, make_user, make_listing, fake_db):
        ada = make_user()
        grace = make_user(email="grace@campus.edu", name="Grace")
        StatsService.increment_user_stats(ada["id"], carbon_saved=5, food_saved=2, people_served=4)
        StatsService.increment_user_stats(grace["id"], carbon_saved="2.5", food_saved=1, people_served=1)
        make_listing(ada["id"])
        make_listing(ada["id"], is_active=False)
        make_listing(grace["id"], available_until=past())

        body = client.get("/api/stats/platform").json()

        assert Decimal(body["totalCarbonSaved"]) == Decimal("7.50")
        assert Decimal(body["totalFoodSaved"]) == Decimal("3.00")
        assert body["totalPeopleServed"] == 5
        assert body["activeListings"] == 1

        # Later reads see new data
        StatsService.increment_user_stats(grace["id"], people_served=10)
        assert client.get("/api/stats/platform").json()["totalPeopleServed"] == 15
        assert len(fake_db.rows("platform_stats")) == 1

    def test_user_stats_require_auth(self, client):
        assert client.get("/api/stats/user").status_code == 401

    def test_user_stats_for_new_user(self, auth_client):
        body = auth_client.get("/api/stats/user").json()

        assert body["userId"] == auth_client.user["id"]
        assert body["totalListings"] == 0
