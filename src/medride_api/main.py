import os
from pathlib import Path
from textwrap import dedent

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from loguru import logger

from medride_api.errors import TransportError
from medride_api.errors import handle_broad_exceptions
from medride_api.errors import handle_pydantic_validation_errors
from medride_api.errors import handle_transport_errors
from medride_api.monitoring.logger import configure_logger
from medride_api.monitoring.request_context import RequestContextMiddleware
from medride_api.routes.routes_health import ROUTER_HEALTH
from medride_api.routes.routes_notifications import ROUTER_NOTIFICATIONS
from medride_api.routes.routes_pricing import ROUTER_PRICING
from medride_api.routes.routes_requests import ROUTER_HISTORY
from medride_api.routes.routes_requests import ROUTER_REQUESTS
from medride_api.routes.routes_rewards import ROUTER_REWARDS
from medride_api.settings import Settings
from medride_api.transport.service import TransportService


def _detect_environment() -> str:
    """Detect whether configuration comes from a .env file or the process environment."""
    if Path(".env").exists():
        return "local-env-file"
    return "env-vars"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application.

    Configuration is loaded directly from environment variables via pydantic-settings.
    - Deployed: set variables in the process environment
    - Local development: use a .env file in the working directory
    """
    settings = settings or Settings()

    configure_logger(log_level=settings.log_level, service_name=settings.service_name)

    logger.info(
        "Configuration loaded successfully",
        config_source=_detect_environment(),
        store_backend=settings.store_backend,
        domain_db_connection_string_set=bool(settings.domain_db_connection_string),
        environment=os.getenv("ENVIRONMENT"),
    )

    app = FastAPI(
        title=settings.service_name,
        version="v1",
        description=dedent(
            """
        Coordinates medical-transport requests between caregivers, community health
        volunteers, health officers and riders, and rewards participants with points
        that feed a trust/credit score.

        | Area | Endpoints |
        | --- | --- |
        | Pricing | `GET /api/pricing/estimate` |
        | Requests | `POST /api/requests`, `POST /api/requests/{id}/accept` ... |
        | Rewards | `POST /api/rewards`, `GET /api/rewards/{actor_id}` |
        | Notifications | `GET /api/notifications` |
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = settings

    if settings.store_backend == "postgres":
        if not settings.domain_db_connection_string:
            raise ValueError("DOMAIN_DB_CONNECTION_STRING is required when STORE_BACKEND=postgres")

        from medride_api.transport.db.pool import DomainDBPool

        domain_db_pool = DomainDBPool(
            settings.domain_db_connection_string,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
        app.state.domain_db_pool = domain_db_pool
        # Repositories only acquire connections per call, so the pool can be opened at startup
        app.state.transport_service = TransportService.from_pool(
            domain_db_pool,
            default_actor_id=settings.default_actor_id,
            recent_rewards_limit=settings.recent_rewards_limit,
        )

        @app.on_event("startup")
        async def startup_database():
            """Open the transport database pool and run migrations."""
            await app.state.domain_db_pool.initialize()
            logger.success("Transport database initialized")

        @app.on_event("shutdown")
        async def shutdown_database():
            """Close transport database connections."""
            await app.state.domain_db_pool.close()
            logger.info("Transport database closed")

    else:
        app.state.transport_service = TransportService.in_memory(
            default_actor_id=settings.default_actor_id,
            recent_rewards_limit=settings.recent_rewards_limit,
        )
        logger.info("Using in-memory transport stores (data is lost on restart)")

    # Add request context middleware for tracking who/where requests come from
    app.add_middleware(RequestContextMiddleware, enable_request_logging=settings.enable_request_logging)
    app.include_router(ROUTER_HEALTH)
    app.include_router(ROUTER_PRICING, prefix="/api")
    app.include_router(ROUTER_REQUESTS, prefix="/api")
    app.include_router(ROUTER_HISTORY, prefix="/api")
    app.include_router(ROUTER_REWARDS, prefix="/api")
    app.include_router(ROUTER_NOTIFICATIONS, prefix="/api")

    app.add_exception_handler(
        exc_class_or_status_code=TransportError,
        handler=handle_transport_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_pydantic_validation_errors,
    )

    app.middleware("http")(handle_broad_exceptions)

    logger.success("Starting MedRide transport API", store_backend=settings.store_backend)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
