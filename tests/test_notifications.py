# =============================================================================
# tests/test_notifications.py - Notification API Tests
# =============================================================================

from core.models.notification import NotificationType
from core.services.notification_service import NotificationService


def _notify(user_id, title="Food Reserved"):
    return NotificationService.create_notification(
        user_id=user_id,
        title=title,
        message="Someone reserved your pizza",
        type=NotificationType.PICKUP_RESERVED,
    )


class TestNotifications:
    """Test the notification endpoints."""

    def test_list_newest_first(self, auth_client):
        me = auth_client.user["id"]
        _notify(me, "First")
        _notify(me, "Second")

        response = auth_client.get("/api/notifications")

        assert response.status_code == 200
        assert [n["title"] for n in response.json()] == ["Second", "First"]
        assert response.json()[0]["isRead"] is False

    def test_only_own_notifications(self, auth_client, make_user):
        _notify(make_user()["id"])

        assert auth_client.get("/api/notifications").json() == []

    def test_mark_read(self, auth_client, fake_db):
        notification = _notify(auth_client.user["id"])

        response = auth_client.post(f"/api/notifications/{notification['id']}/read")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert fake_db.rows("notifications")[0]["is_read"] is True

    def test_mark_read_of_other_user_is_not_found(self, auth_client, make_user, fake_db):
        notification = _notify(make_user()["id"])

        response = auth_client.post(f"/api/notifications/{notification['id']}/read")

        assert response.status_code == 404
        assert response.json()["code"] == "NOTIFICATION_NOT_FOUND"
        assert fake_db.rows("notifications")[0]["is_read"] is False

    def test_mark_all_read(self, auth_client, make_user, fake_db):
        me = auth_client.user["id"]
        other = make_user()["id"]
        _notify(me)
        _notify(me)
        _notify(other)

        response = auth_client.post("/api/notifications/read-all")

        assert response.json() == {"success": True, "updated": 2}
        unread = [n for n in fake_db.rows("notifications") if not n["is_read"]]
        assert [n["user_id"] for n in unread] == [other]

    def test_requires_authentication(self, client):
        assert client.get("/api/notifications").status_code == 401
