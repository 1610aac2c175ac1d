"""
Payload limit settings.

Byte limits for stored documents, thread anchors, messages and uploads.
Lengths are measured on the UTF-8 encoding of the trimmed value.

Dependencies: pydantic, pydantic_settings
System role: Input validation thresholds
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from threaded.configs.base import BaseSettings


class LimitsSettings(BaseSettings):
    """Maximum sizes accepted by the session store and parse endpoint."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LIMITS_",
        case_sensitive=False,
        extra="ignore",
    )

    markdown_content_bytes: int = Field(default=500 * 1024, description="Session document (500KB)")
    context_bytes: int = Field(default=50 * 1024, description="Thread context (50KB)")
    snippet_bytes: int = Field(default=1024, description="Thread snippet (1KB)")
    message_text_bytes: int = Field(default=50 * 1024, description="Message text (50KB)")
    upload_bytes: int = Field(default=10 * 1024 * 1024, description="Parse upload (10MB)")
