"""Domain exceptions for the transport core and their FastAPI error handlers."""

import pydantic
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from medride_api.monitoring.logger import log_response_info

# Explicit exports
__all__ = [
    "TransportError",
    "ValidationError",
    "NotFoundError",
    "InvalidStateTransition",
    "handle_broad_exceptions",
    "handle_transport_errors",
    "handle_pydantic_validation_errors",
]


class TransportError(Exception):
    """Base class for every recoverable error raised by the transport core."""

    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(TransportError):
    """Malformed input: bad distance, unrecognized enum value, missing contact field."""

    http_status = status.HTTP_422_UNPROCESSABLE_CONTENT


class NotFoundError(TransportError):
    """An operation referenced an unknown request (or notification) id."""

    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, request_id: str, entity: str = "Request"):
        super().__init__(f"{entity} not found: {request_id}", request_id=request_id, entity=entity)
        self.request_id = request_id


class InvalidStateTransition(TransportError):
    """An operation was attempted against a record whose state does not permit it."""

    http_status = status.HTTP_409_CONFLICT

    def __init__(self, request_id: str, current_status: str, target_status: str, closed: bool = False):
        if closed:
            message = f"Request {request_id} is already {current_status} and cannot move to {target_status}"
        else:
            message = f"Cannot move request {request_id} from {current_status} to {target_status}"
        super().__init__(
            message,
            request_id=request_id,
            current_status=current_status,
            target_status=target_status,
            closed=closed,
        )
        self.request_id = request_id
        self.current_status = current_status
        self.target_status = target_status


# fastapi docs on middlewares: https://fastapi.tiangolo.com/tutorial/middleware/
async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        error_response = {"detail": "Internal server error", "error_type": type(err).__name__}

        request_body = getattr(request.state, "request_body", None)

        # bind() keeps braces in the error text from being read as format fields
        logger.opt(exception=err).bind(
            http_status=500,
            http_method=request.method,
            url_path=str(request.url.path),
            error_type=type(err).__name__,
            error_message=str(err),
            request_body=request_body,
            response_body=error_response,
        ).error(f"Unhandled exception: {type(err).__name__}: {str(err)}")

        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response,
        )
        log_response_info(response)
        return response


async def handle_transport_errors(request: Request, exc: TransportError) -> JSONResponse:
    """
    Convert transport core errors into HTTP responses.

    Maps domain exceptions to HTTP status codes:
    - ValidationError -> 422 Unprocessable Content
    - NotFoundError -> 404 Not Found
    - InvalidStateTransition -> 409 Conflict

    Every one of these is retryable by the caller, so they are logged at
    WARNING level rather than ERROR.

    Parameters
    ----------
    request : Request
        FastAPI request object
    exc : TransportError
        Domain exception raised by the transport core

    Returns
    -------
    JSONResponse
        HTTP response with appropriate status code and error details
    """
    error_type = type(exc).__name__
    error_response = {"detail": exc.message, "error_type": error_type}

    logger.bind(
        http_status=exc.http_status,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type=error_type,
        request_body=getattr(request.state, "request_body", None),
        response_body=error_response,
        **exc.context,
    ).warning(f"Transport error: {error_type}: {exc.message}")

    response = JSONResponse(status_code=exc.http_status, content=error_response)
    log_response_info(response)
    return response


# fastapi docs on error handlers: https://fastapi.tiangolo.com/tutorial/handling-errors/
async def handle_pydantic_validation_errors(
    request: Request, exc: pydantic.ValidationError | RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = exc.errors()
    error_response = {
        "detail": [
            {
                "msg": error["msg"],
                "input": error.get("input"),
            }
            for error in errors
        ]
    }

    logger.warning(
        f"Validation error: {len(errors)} validation errors",
        http_status=422,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type="ValidationError",
        validation_errors=errors,
        request_body=getattr(request.state, "request_body", None),
        response_body=error_response,
    )

    response = JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=jsonable(error_response),
    )
    log_response_info(response)

    return response


def jsonable(payload):
    """Make validation error payloads JSON-safe (inputs may hold arbitrary objects)."""
    from fastapi.encoders import jsonable_encoder

    return jsonable_encoder(payload, custom_encoder={Exception: str})
