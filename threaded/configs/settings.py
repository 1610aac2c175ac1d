"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from threaded.configs.base import BaseSettings
from threaded.configs.client import ClientSettings
from threaded.configs.database import DatabaseSettings
from threaded.configs.limits import LimitsSettings
from threaded.configs.parse import ParseSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)
    parse: ParseSettings = Field(default_factory=ParseSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)

    cors_origins: list[str] = Field(
        default=["*"],
        description="Origins allowed to call the API from a browser",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from threaded.configs import get_settings
        settings = get_settings()
    """
    return Settings()
