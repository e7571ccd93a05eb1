"""Request context middleware for logging."""
import json
import time
import uuid
from contextvars import ContextVar
from typing import Any
from typing import Callable
from typing import Optional

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from medride_api.monitoring.logger import log_request_info

# Context variables to store request-specific data
correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")
client_ip_ctx: ContextVar[str] = ContextVar("client_ip", default="")
request_path_ctx: ContextVar[str] = ContextVar("request_path", default="")

# Maximum size for request body logging
MAX_BODY_LOG_SIZE = 10000  # 10KB limit


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture and log request context information."""

    def __init__(self, app, enable_request_logging: bool = True):
        super().__init__(app)
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Any:
        """
        Capture request context and add to logging.

        Captures:
        - Correlation ID (from X-Request-ID header or generated)
        - Client IP (first X-Forwarded-For hop or direct peer)
        - Request path and method
        - Request body (for POST/PUT/PATCH) so error handlers can log it
        """
        correlation_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        correlation_id_ctx.set(correlation_id)

        client_ip = self._get_client_ip(request)
        client_ip_ctx.set(client_ip)

        request_path = f"{request.method} {request.url.path}"
        request_path_ctx.set(request_path)

        # Store in request state early so error handlers can access it
        request.state.request_body = None
        if request.method in ("POST", "PUT", "PATCH"):
            request.state.request_body = await self._get_request_body(request)

        with logger.contextualize(correlation_id=correlation_id, client_ip=client_ip, request_path=request_path):
            log_request_info(request)

            start_time = time.time()
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000

            response.headers["X-Request-ID"] = correlation_id

            if self.enable_request_logging:
                logger.bind(
                    event_type="http_request",
                    http_method=request.method,
                    url_path=str(request.url.path),
                    url_query=str(request.query_params) if request.query_params else None,
                    status_code=response.status_code,
                    response_time_ms=round(duration_ms, 2),
                ).info(f"{request.method} {request.url.path} - {response.status_code}")

            return response

    async def _get_request_body(self, request: Request) -> Optional[dict]:
        """
        Read the request body for logging.

        Returns:
            Parsed JSON body, a truncation marker for large bodies, or None
        """
        body = await request.body()
        if not body:
            return None

        if len(body) > MAX_BODY_LOG_SIZE:
            return {"_truncated": True, "_size": len(body)}

        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return {"_error": "Failed to parse request body", "_error_detail": str(e)}

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        """Get the real client IP, honouring proxies that set X-Forwarded-For."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"


def get_request_context() -> dict:
    """Return the context captured for the request currently being served."""
    return {
        "correlation_id": correlation_id_ctx.get(),
        "client_ip": client_ip_ctx.get(),
        "request_path": request_path_ctx.get(),
    }
