"""Tests for the pricing endpoint."""

from tests.consts import API_BASE


class TestEstimate:
    """Tests for GET /api/pricing/estimate."""

    def test_long_trip(self, client):
        response = client.get(f"{API_BASE}/pricing/estimate", params={"distance_km": 8})

        assert response.status_code == 200
        assert response.json() == {"DistanceKm": 8.0, "Cost": 220.0, "Tier": ">5km"}

    def test_short_trip_is_clamped(self, client):
        body = client.get(f"{API_BASE}/pricing/estimate", params={"distance_km": 0.4}).json()

        assert body["DistanceKm"] == 1.0
        assert body["Cost"] == 50.0
        assert body["Tier"] == "0-3km"

    def test_middle_tier(self, client):
        body = client.get(f"{API_BASE}/pricing/estimate", params={"distance_km": 5}).json()

        assert body["Cost"] == 100.0
        assert body["Tier"] == "3-5km"

    def test_negative_distance(self, client):
        response = client.get(f"{API_BASE}/pricing/estimate", params={"distance_km": -1})

        assert response.status_code == 422
        assert response.json()["error_type"] == "ValidationError"

    def test_missing_distance(self, client):
        assert client.get(f"{API_BASE}/pricing/estimate").status_code == 422
