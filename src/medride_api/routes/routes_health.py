"""Health check endpoints for monitoring application status."""

from datetime import datetime
from datetime import timezone

from fastapi import APIRouter
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

ROUTER_HEALTH = APIRouter(tags=["Health"])


@ROUTER_HEALTH.get(
    "/health",
    summary="Health check endpoint",
    description="Basic health check that returns application status and metadata",
    responses={
        status.HTTP_200_OK: {
            "description": "Application is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "timestamp": "2026-01-05T12:00:00.000000Z",
                        "service": "MedRide Transport API",
                        "version": "v1",
                        "store_backend": "memory",
                    }
                }
            },
        }
    },
)
async def health_check(request: Request):
    """
    Basic health check endpoint.

    Returns application status and metadata. This endpoint is lightweight
    and does not perform any external dependency checks.
    """
    settings = request.app.state.settings

    response_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.service_name,
        "version": "v1",
        "store_backend": settings.store_backend,
    }

    logger.debug("Health check requested", status="healthy")

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response_data,
    )


@ROUTER_HEALTH.get(
    "/health/live",
    summary="Liveness check",
    description="Returns 200 while the process is able to serve requests",
)
async def liveness_check():
    """Liveness check; never touches external dependencies."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()},
    )


@ROUTER_HEALTH.get(
    "/health/ready",
    summary="Readiness check",
    description="Returns 200 once the transport service and its storage are usable",
    responses={
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Service or database not ready"},
    },
)
async def readiness_check(request: Request):
    """
    Readiness check.

    In-memory deployments are ready as soon as the service exists. PostgreSQL
    deployments also need the domain database pool to answer a health query.
    """
    checks = {"transport_service": getattr(request.app.state, "transport_service", None) is not None}

    domain_db_pool = getattr(request.app.state, "domain_db_pool", None)
    if domain_db_pool is not None:
        checks["database"] = await domain_db_pool.health_check()

    ready = all(checks.values())
    if not ready:
        logger.warning("Readiness check failed", checks=checks)

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
        },
    )
