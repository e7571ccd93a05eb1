"""Tests for the domain exceptions and their FastAPI handlers."""

import json
from unittest.mock import AsyncMock
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest
from fastapi.exceptions import RequestValidationError

from medride_api.errors import InvalidStateTransition
from medride_api.errors import NotFoundError
from medride_api.errors import TransportError
from medride_api.errors import ValidationError
from medride_api.errors import handle_broad_exceptions
from medride_api.errors import handle_pydantic_validation_errors
from medride_api.errors import handle_transport_errors


@pytest.fixture
def mock_request():
    """Minimal stand-in for a FastAPI request."""
    request = MagicMock()
    request.method = "POST"
    request.url.path = "/api/requests/req_1/accept"
    request.state.request_body = {"rider_id": "rider-1"}
    return request


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_status_codes(self):
        assert ValidationError("bad").http_status == 422
        assert NotFoundError("req_1").http_status == 404
        assert InvalidStateTransition("req_1", "completed", "accepted").http_status == 409

    def test_all_are_transport_errors(self):
        for exc in (ValidationError("bad"), NotFoundError("req_1"), InvalidStateTransition("r", "a", "b")):
            assert isinstance(exc, TransportError)

    def test_not_found_message(self):
        assert str(NotFoundError("req_1")) == "Request not found: req_1"
        assert NotFoundError("ntf_1", entity="Notification").message == "Notification not found: ntf_1"

    def test_invalid_transition_carries_states(self):
        exc = InvalidStateTransition("req_1", "completed", "accepted")

        assert exc.current_status == "completed"
        assert exc.target_status == "accepted"
        assert exc.context == {
            "request_id": "req_1",
            "current_status": "completed",
            "target_status": "accepted",
            "closed": False,
        }

    def test_closed_request_message(self):
        exc = InvalidStateTransition("req_1", "completed", "accepted", closed=True)

        assert exc.message == "Request req_1 is already completed and cannot move to accepted"
        assert exc.context["closed"] is True


class TestHandlers:
    """Tests for the exception handlers."""

    @pytest.mark.asyncio
    async def test_transport_error_handler(self, mock_request):
        with patch("medride_api.errors.log_response_info") as log_response:
            response = await handle_transport_errors(
                mock_request, InvalidStateTransition("req_1", "completed", "accepted")
            )

        assert response.status_code == 409
        body = json.loads(response.body)
        assert body["error_type"] == "InvalidStateTransition"
        assert body["detail"] == "Cannot move request req_1 from completed to accepted"
        log_response.assert_called_once_with(response)

    @pytest.mark.asyncio
    async def test_transport_error_with_braces_in_message(self, mock_request):
        response = await handle_transport_errors(mock_request, ValidationError("Invalid urgency: '{x}'"))

        assert response.status_code == 422
        assert json.loads(response.body)["detail"] == "Invalid urgency: '{x}'"

    @pytest.mark.asyncio
    async def test_request_validation_handler(self, mock_request):
        exc = RequestValidationError(
            [{"type": "missing", "loc": ("body", "rider_id"), "msg": "Field required", "input": {}}]
        )

        response = await handle_pydantic_validation_errors(mock_request, exc)

        assert response.status_code == 422
        assert json.loads(response.body) == {"detail": [{"msg": "Field required", "input": {}}]}

    @pytest.mark.asyncio
    async def test_broad_exception_handler(self, mock_request):
        call_next = AsyncMock(side_effect=RuntimeError("store exploded {unexpectedly}"))

        response = await handle_broad_exceptions(mock_request, call_next)

        assert response.status_code == 500
        assert json.loads(response.body) == {"detail": "Internal server error", "error_type": "RuntimeError"}

    @pytest.mark.asyncio
    async def test_broad_exception_handler_passes_through(self, mock_request):
        sentinel = MagicMock()
        call_next = AsyncMock(return_value=sentinel)

        assert await handle_broad_exceptions(mock_request, call_next) is sentinel
