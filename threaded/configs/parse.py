"""
Document parsing configuration settings.

Credentials and endpoints for the extraction backends, plus the
freshness window applied to URL-derived parse cache entries.

Dependencies: pydantic, pydantic_settings
System role: Parse endpoint and parse cache configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ParseSettings(BaseSettings):
    """Settings for the parse endpoint and its extraction backends."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PARSE_",
        case_sensitive=False,
        extra="ignore",
    )

    datalab_api_key: str | None = Field(
        default=None,
        description="API key for the Datalab marker converter (files)",
    )
    datalab_api_url: str = Field(
        default="https://www.datalab.to/api/v1/marker",
        description="Datalab marker submit endpoint",
    )
    datalab_poll_interval_seconds: float = Field(default=2.0, description="Delay between status polls")
    datalab_max_polls: int = Field(default=60, description="Maximum number of status polls")

    jina_api_key: str | None = Field(
        default=None,
        description="Optional API key for the Jina reader (URLs)",
    )
    jina_reader_url: str = Field(
        default="https://r.jina.ai/",
        description="Jina reader prefix; the target URL is appended verbatim",
    )

    url_cache_ttl_seconds: int = Field(
        default=6 * 60 * 60,
        description="Freshness window for URL parse cache entries (default 6 hours)",
    )
    request_timeout_seconds: float = Field(default=60.0, description="Outbound HTTP timeout")
