"""FastAPI dependencies for accessing app state."""

from fastapi import Request

from medride_api.settings import Settings
from medride_api.transport.service import TransportService


def get_settings(request: Request) -> Settings:
    """
    Get application settings from request state.

    Parameters
    ----------
    request : Request
        FastAPI request object

    Returns
    -------
    Settings
        Application settings instance
    """
    return request.app.state.settings


def get_transport_service(request: Request) -> TransportService:
    """
    Get the transport service from request state.

    The service is built once at startup (in-memory or PostgreSQL backed,
    depending on Settings.store_backend) and shared by every request.

    Parameters
    ----------
    request : Request
        FastAPI request object

    Returns
    -------
    TransportService
        Shared transport service
    """
    return request.app.state.transport_service
