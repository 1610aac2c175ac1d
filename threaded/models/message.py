"""
Message schemas and the message part sum type.

A message part is either a text fragment or a tool invocation record.
Parts are validated with a discriminated union on `type`, stored as
JSON, and rendered back with camelCase keys.

Dependencies: pydantic
System role: Message API contracts
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from threaded.models.common import CamelModel


class TextPart(CamelModel):
    """Plain text fragment."""

    type: Literal["text"] = "text"
    text: str


class ToolInvocationPart(CamelModel):
    """Tool call made by the model, with its result once available."""

    type: Literal["tool-invocation"] = "tool-invocation"
    tool_call_id: str
    tool_name: str
    args: dict[str, Any] = Field(default_factory=dict)
    state: Literal["partial-call", "call", "result"]
    result: Any = None


MessagePart = Annotated[Union[TextPart, ToolInvocationPart], Field(discriminator="type")]

message_parts_adapter = TypeAdapter(list[MessagePart])


def parse_parts(raw: Any) -> list[TextPart | ToolInvocationPart]:
    """
    Validate a raw JSON list of parts.

    Raises:
        pydantic.ValidationError: If any element is not a known part
    """
    return message_parts_adapter.validate_python(raw)


def dump_parts(parts: list[TextPart | ToolInvocationPart]) -> list[dict[str, Any]]:
    """Serialize parts to JSON-ready dicts with camelCase keys."""
    return [part.model_dump(by_alias=True, exclude_none=True) for part in parts]


def part_text(part: TextPart | ToolInvocationPart) -> str:
    """Text contributed by a single part."""
    if isinstance(part, TextPart):
        return part.text
    if isinstance(part, ToolInvocationPart):
        return ""
    raise TypeError(f"Unknown message part: {type(part).__name__}")


def text_from_parts(parts: list[TextPart | ToolInvocationPart]) -> str:
    """Concatenate the text parts of a message."""
    return "".join(part_text(part) for part in parts)


class AddMessageRequest(CamelModel):
    """Request schema for appending a message to a thread."""

    role: str | None = Field(default=None, description="'user' or 'model' ('assistant' accepted)")
    text: str | None = Field(default=None, description="Message text (max 50KB)")
    parts: list[dict[str, Any]] | None = Field(default=None, description="Optional structured parts")


class AddMessageResponse(CamelModel):
    """Response schema for an appended message."""

    message_id: str
    timestamp: int


class UpdateMessageRequest(CamelModel):
    """Request schema for editing a message in place."""

    text: str | None = None


class UpdateMessageResponse(CamelModel):
    """Response schema for an edited message."""

    success: bool = True
    timestamp: int


class MessageResponse(CamelModel):
    """Message as returned inside a session graph."""

    id: str
    role: str
    text: str
    timestamp: int
    parts: list[dict[str, Any]] | None = None
