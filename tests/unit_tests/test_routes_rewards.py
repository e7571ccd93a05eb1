"""Tests for the reward endpoints."""

from tests.consts import API_BASE


class TestAddReward:
    """Tests for POST /api/rewards."""

    def test_savings(self, client):
        response = client.post(
            f"{API_BASE}/rewards",
            json={"reward_type": "savings_added", "actor_id": "member-1", "meta": {"amount": 950}},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["Points"] == 9
        assert body["ActorId"] == "member-1"
        assert body["Description"] == "Savings added"

    def test_default_actor(self, client):
        body = client.post(f"{API_BASE}/rewards", json={"reward_type": "chv_visit"}).json()

        assert body["ActorId"] == "test-actor"
        assert body["Points"] == 10

    def test_unknown_type(self, client):
        response = client.post(f"{API_BASE}/rewards", json={"reward_type": "free_lunch"})

        assert response.status_code == 422

    def test_non_numeric_amount(self, client):
        response = client.post(
            f"{API_BASE}/rewards",
            json={"reward_type": "loan_repayment", "meta": {"amount": "lots"}},
        )

        assert response.status_code == 422
        assert response.json()["error_type"] == "ValidationError"


class TestRewardSummary:
    """Tests for GET /api/rewards/{actor_id}."""

    def test_summary_for_rider(self, client):
        client.post(
            f"{API_BASE}/rewards",
            json={"reward_type": "ride_completed", "actor_id": "rider-7", "meta": {"distance_km": 8}},
        )

        body = client.get(f"{API_BASE}/rewards/rider-7", params={"role": "rider"}).json()

        assert body["TotalPoints"] == 18
        assert body["CreditScore"] == 377
        assert body["LoanReadiness"] == 62
        assert body["Role"] == "rider"
        assert len(body["RecentEvents"]) == 1

    def test_unknown_actor_starts_at_base(self, client):
        body = client.get(f"{API_BASE}/rewards/nobody").json()

        assert body["TotalPoints"] == 0
        assert body["CreditScore"] == 300
        assert body["LoanReadiness"] == 40
        assert body["RecentEvents"] == []

    def test_recent_events_limit(self, client):
        for _ in range(5):
            client.post(f"{API_BASE}/rewards", json={"reward_type": "patient_added", "actor_id": "chv-1"})

        default = client.get(f"{API_BASE}/rewards/chv-1", params={"role": "chv"}).json()
        limited = client.get(f"{API_BASE}/rewards/chv-1", params={"limit": 1}).json()

        assert len(default["RecentEvents"]) == 3
        assert len(limited["RecentEvents"]) == 1
        assert default["TotalPoints"] == 25

    def test_unknown_role(self, client):
        assert client.get(f"{API_BASE}/rewards/rider-7", params={"role": "pilot"}).status_code == 422


class TestRewardEvents:
    """Tests for GET /api/rewards/{actor_id}/events."""

    def test_filter_by_type(self, client):
        client.post(f"{API_BASE}/rewards", json={"reward_type": "chv_visit", "actor_id": "chv-2"})
        client.post(f"{API_BASE}/rewards", json={"reward_type": "household_visit", "actor_id": "chv-2"})

        everything = client.get(f"{API_BASE}/rewards/chv-2/events").json()
        visits = client.get(f"{API_BASE}/rewards/chv-2/events", params={"reward_type": "household_visit"}).json()

        assert everything["Count"] == 2
        assert everything["TotalPoints"] == 22
        assert visits["Count"] == 1
        assert visits["Events"][0]["Points"] == 12
