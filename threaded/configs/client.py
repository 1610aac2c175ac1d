"""
API client configuration settings.

Base URL and retry policy used by the reading client when talking to
the session store over HTTP.

Dependencies: pydantic, pydantic_settings
System role: Client-side request configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Reading client configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="THREADED_CLIENT_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(default="http://localhost:8000", description="Session store base URL")
    max_attempts: int = Field(default=3, description="Attempts per request, including the first")
    backoff_seconds: float = Field(default=1.0, description="Base delay; doubles per retry (1s, 2s, 4s)")
    timeout_seconds: float = Field(default=30.0, description="Per-request timeout")
    ownership_file: str = Field(
        default="~/.threaded/sessions.json",
        description="Where owner tokens for created and forked sessions are kept",
    )
    history_file: str = Field(
        default="~/.threaded/session-history.json",
        description="Recently opened sessions",
    )
