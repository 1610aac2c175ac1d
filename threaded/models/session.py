"""
Session domain models and schemas.

Request/response schemas for session operations.

Dependencies: pydantic
System role: Session API contracts
"""

from pydantic import Field

from threaded.models.common import CamelModel
from threaded.models.thread import ThreadResponse


class CreateSessionRequest(CamelModel):
    """Request schema for creating a new session."""

    markdown_content: str | None = Field(default=None, description="Document markdown (max 500KB)")


class CreateSessionResponse(CamelModel):
    """Response schema for a created session. The owner token is shown once."""

    session_id: str
    owner_token: str


class ForkSessionResponse(CamelModel):
    """Response schema for a fork: new credentials plus old → new ids."""

    session_id: str
    owner_token: str
    thread_id_map: dict[str, str]
    message_id_map: dict[str, str] = Field(default_factory=dict)


class SessionResponse(CamelModel):
    """Full session graph."""

    id: str
    markdown_content: str
    created_at: int
    updated_at: int
    forked_from: str | None = None
    threads: list[ThreadResponse] = Field(default_factory=list)
