"""
Thread schemas.

Dependencies: pydantic
System role: Thread API contracts
"""

from pydantic import Field

from threaded.models.common import CamelModel
from threaded.models.message import MessageResponse


class CreateThreadRequest(CamelModel):
    """Request schema for creating a thread anchored to a selection."""

    context: str | None = Field(default=None, description="Quoted text (max 50KB)")
    snippet: str | None = Field(default=None, description="Short label (max 1KB)")
    type: str | None = Field(default=None, description="'discussion' (default) or 'comment'")


class CreateThreadResponse(CamelModel):
    """Response schema for a created thread."""

    thread_id: str
    created_at: int


class ThreadResponse(CamelModel):
    """Thread with its ordered messages."""

    id: str
    context: str
    snippet: str
    type: str
    created_at: int
    messages: list[MessageResponse] = Field(default_factory=list)
