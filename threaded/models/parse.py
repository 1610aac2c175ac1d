"""
Parse endpoint schemas.

Dependencies: pydantic
System role: Parse API contracts
"""

from typing import Literal

from pydantic import BaseModel, Field


class ParseUrlRequest(BaseModel):
    """Request schema for converting a public URL to markdown."""

    url: str | None = Field(default=None, description="Absolute http(s) URL")


class ParseResponse(BaseModel):
    """Parse result."""

    markdown: str
    source: Literal["file", "url"]
    cached: bool = False
