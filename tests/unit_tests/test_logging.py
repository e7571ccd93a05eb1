"""Tests for logger configuration and request context capture."""

import json
import sys

from fastapi import FastAPI
from fastapi.testclient import TestClient

from medride_api.monitoring.logger import get_formatted_stacktrace
from medride_api.monitoring.logger import process_log_record
from medride_api.monitoring.request_context import RequestContextMiddleware
from medride_api.monitoring.request_context import get_request_context


class TestProcessLogRecord:
    """Tests for process_log_record."""

    def test_extra_is_serialized(self):
        record = {"extra": {"request_id": "req_1", "points": 18}, "exception": None}

        processed = process_log_record(record)

        assert json.loads(processed["extra"]) == {"request_id": "req_1", "points": 18}
        assert processed["stacktrace"] == ""

    def test_empty_extra_untouched(self):
        record = {"extra": {}, "exception": None}

        assert process_log_record(record)["extra"] == {}

    def test_correlation_id_gets_its_own_column(self):
        record = {"extra": {"correlation_id": "abc123", "points": 18}, "exception": None}

        processed = process_log_record(record)

        assert processed["correlation_id"] == "abc123"
        assert json.loads(processed["extra"]) == {"points": 18}

    def test_correlation_id_placeholder_outside_requests(self):
        record = {"extra": {"service": "medride-api"}, "exception": None}

        processed = process_log_record(record)

        assert processed["correlation_id"] == "-"
        assert json.loads(processed["extra"]) == {"service": "medride-api"}

    def test_stacktrace_on_single_line(self):
        try:
            raise ValueError("boom")
        except ValueError:
            exc_info = sys.exc_info()

        stacktrace = get_formatted_stacktrace(exc_info, replace_newline_character_with_carriage_return=True)

        assert "ValueError: boom" in stacktrace
        assert "\n" not in stacktrace


def _context_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware, enable_request_logging=False)

    @app.get("/ctx")
    async def ctx():
        return get_request_context()

    return app


class TestRequestContext:
    """Tests for RequestContextMiddleware."""

    def test_forwarded_client_ip(self):
        with TestClient(_context_app()) as client:
            response = client.get(
                "/ctx",
                headers={"X-Request-ID": "trace-9", "X-Forwarded-For": "10.0.0.1, 172.16.0.1"},
            )

        assert response.json() == {"correlation_id": "trace-9", "client_ip": "10.0.0.1", "request_path": "GET /ctx"}
        assert response.headers["X-Request-ID"] == "trace-9"

    def test_generated_correlation_id(self):
        with TestClient(_context_app()) as client:
            response = client.get("/ctx")

        correlation_id = response.headers["X-Request-ID"]
        assert len(correlation_id) == 32
        assert response.json()["correlation_id"] == correlation_id
