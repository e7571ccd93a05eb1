"""Settings for the transport coordination API."""

from typing import Literal
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the transport coordination API.

    [pydantic.BaseSettings](https://docs.pydantic.dev/latest/concepts/pydantic_settings/) reads
    and validates configuration values from environment variables.

    This class automatically reads from:
    1. Environment variables (production)
    2. .env file (local development)

    Environment variable names are treated case-insensitively.
    """

    service_name: str = "MedRide Transport API"
    """Service name reported by health checks and the OpenAPI document."""

    # Persistence
    store_backend: Literal["memory", "postgres"] = "memory"
    """Where requests, history, rewards and notifications live. "memory" is for local runs and tests."""

    domain_db_connection_string: Optional[str] = None
    """PostgreSQL connection string, required when store_backend is "postgres"."""

    db_pool_min_size: int = 2
    """Minimum connections kept by the asyncpg pool."""

    db_pool_max_size: int = 10
    """Maximum connections opened by the asyncpg pool."""

    # Logging
    log_level: str = "INFO"
    """Minimum level written to stdout."""

    enable_request_logging: bool = True
    """Log one structured line per HTTP request (method, path, status, timing)."""

    # Rewards
    default_actor_id: str = "anonymous"
    """Actor credited by POST /api/rewards when the body names no actor."""

    recent_rewards_limit: int = 5
    """How many recent reward events the reward summary returns."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",  # Load from .env file if it exists (local development)
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables not defined in the model
        validate_default=True,
    )
