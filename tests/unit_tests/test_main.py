"""Tests for application assembly and settings."""

from unittest.mock import patch

import pytest

from medride_api.main import create_app
from medride_api.settings import Settings
from medride_api.transport.service import TransportService


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.store_backend == "memory"
        assert settings.default_actor_id == "anonymous"
        assert settings.recent_rewards_limit == 5
        assert settings.domain_db_connection_string is None

    def test_environment_overrides(self, mock_settings):
        assert mock_settings.default_actor_id == "test-actor"
        assert mock_settings.recent_rewards_limit == 3


class TestCreateApp:
    """Tests for create_app."""

    def test_in_memory_service(self, app):
        assert isinstance(app.state.transport_service, TransportService)
        assert app.state.transport_service.default_actor_id == "test-actor"
        assert not hasattr(app.state, "domain_db_pool")

    def test_postgres_requires_connection_string(self):
        with patch.dict("os.environ", {"STORE_BACKEND": "postgres"}, clear=True):
            settings = Settings(_env_file=None)

        with pytest.raises(ValueError, match="DOMAIN_DB_CONNECTION_STRING"):
            create_app(settings=settings)

    def test_postgres_wires_pool(self, app_with_postgres, mock_domain_db_pool):
        assert app_with_postgres.state.domain_db_pool is mock_domain_db_pool

    def test_routes_registered(self, app):
        paths = {route.path for route in app.routes}

        assert "/health" in paths
        assert "/api/requests/{request_id}/complete" in paths
        assert "/api/rewards/{actor_id}" in paths
        assert "/api/notifications/{notification_id}/read" in paths
