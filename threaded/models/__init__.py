"""API request/response schemas."""

from threaded.models.common import CamelModel, ErrorResponse, SuccessResponse
from threaded.models.message import (
    AddMessageRequest,
    AddMessageResponse,
    MessagePart,
    MessageResponse,
    TextPart,
    ToolInvocationPart,
    UpdateMessageRequest,
    UpdateMessageResponse,
    dump_parts,
    parse_parts,
    text_from_parts,
)
from threaded.models.parse import ParseResponse, ParseUrlRequest
from threaded.models.session import (
    CreateSessionRequest,
    CreateSessionResponse,
    ForkSessionResponse,
    SessionResponse,
)
from threaded.models.thread import CreateThreadRequest, CreateThreadResponse, ThreadResponse

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "SuccessResponse",
    "AddMessageRequest",
    "AddMessageResponse",
    "MessagePart",
    "MessageResponse",
    "TextPart",
    "ToolInvocationPart",
    "UpdateMessageRequest",
    "UpdateMessageResponse",
    "dump_parts",
    "parse_parts",
    "text_from_parts",
    "ParseResponse",
    "ParseUrlRequest",
    "CreateSessionRequest",
    "CreateSessionResponse",
    "ForkSessionResponse",
    "SessionResponse",
    "CreateThreadRequest",
    "CreateThreadResponse",
    "ThreadResponse",
]
