"""Tests for the notification endpoints."""

from tests.consts import API_BASE
from tests.consts import SAMPLE_REQUEST_BODY


class TestNotifications:
    """Tests for /api/notifications."""

    def test_create_notifies(self, client):
        request_id = client.post(f"{API_BASE}/requests", json=SAMPLE_REQUEST_BODY).json()["RequestId"]

        body = client.get(f"{API_BASE}/notifications").json()

        assert body["Count"] == 1
        assert body["UnreadCount"] == 1
        notification = body["Notifications"][0]
        assert notification["Title"] == "Transport Request Submitted"
        assert notification["RelatedRequestId"] == request_id
        assert notification["EventType"] == "REQUEST_CREATED"

    def test_failed_transition_notifies(self, client):
        client.post(f"{API_BASE}/requests/req_missing/start")

        notification = client.get(f"{API_BASE}/notifications").json()["Notifications"][0]

        assert notification["Title"] == "Action Not Allowed"
        assert notification["Severity"] == "error"

    def test_mark_read(self, client):
        client.post(f"{API_BASE}/rewards", json={"reward_type": "alert_submit"})
        notification_id = client.get(f"{API_BASE}/notifications").json()["Notifications"][0]["NotificationId"]

        response = client.post(f"{API_BASE}/notifications/{notification_id}/read")

        assert response.status_code == 200
        assert response.json()["Read"] is True
        assert client.get(f"{API_BASE}/notifications", params={"unread_only": True}).json()["Count"] == 0

    def test_mark_unknown(self, client):
        response = client.post(f"{API_BASE}/notifications/ntf_missing/read")

        assert response.status_code == 404
        assert response.json()["detail"] == "Notification not found: ntf_missing"
