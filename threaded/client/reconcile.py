"""
Local optimistic state helpers.

The reader shows a message as soon as it is typed and replaces its
temporary id and timestamp with the server's once the write returns.
After a fork, local thread and message ids are rewritten to the fork's.

Dependencies: pydantic, threaded.models
System role: Keeps local thread state consistent with the server
"""

from typing import Any

from pydantic import BaseModel, Field

from threaded.core.ids import new_id
from threaded.models.session import SessionResponse


class LocalMessage(BaseModel):
    """Message as held by the reader."""

    id: str = Field(default_factory=new_id)
    role: str
    text: str
    timestamp: int
    parts: list[dict[str, Any]] | None = None
    pending: bool = True


class LocalThread(BaseModel):
    """Thread as held by the reader."""

    id: str
    context: str
    snippet: str
    type: str = "discussion"
    messages: list[LocalMessage] = Field(default_factory=list)


def threads_from_session(session: SessionResponse) -> list[LocalThread]:
    """Local copies of a server session's threads, all confirmed."""
    return [
        LocalThread(
            id=thread.id,
            context=thread.context,
            snippet=thread.snippet,
            type=thread.type,
            messages=[
                LocalMessage(
                    id=m.id,
                    role=m.role,
                    text=m.text,
                    timestamp=m.timestamp,
                    parts=m.parts,
                    pending=False,
                )
                for m in thread.messages
            ],
        )
        for thread in session.threads
    ]


def apply_thread_id_map(
    threads: list[LocalThread],
    thread_id_map: dict[str, str],
    message_id_map: dict[str, str] | None = None,
) -> list[LocalThread]:
    """
    Rewrite thread (and optionally message) ids after a fork.

    Ids not present in the maps are kept. The input is not modified.
    """
    message_id_map = message_id_map or {}
    remapped = []
    for thread in threads:
        messages = [
            m.model_copy(update={"id": message_id_map.get(m.id, m.id)})
            for m in thread.messages
        ]
        remapped.append(
            thread.model_copy(
                update={"id": thread_id_map.get(thread.id, thread.id), "messages": messages}
            )
        )
    return remapped


def confirm_message(
    thread: LocalThread,
    local_id: str,
    server_id: str,
    timestamp: int,
) -> LocalThread:
    """
    Replace an optimistic message's id and timestamp with the server's.

    Returns:
        LocalThread: Updated copy; unchanged if `local_id` is not in the thread
    """
    messages = [
        m.model_copy(update={"id": server_id, "timestamp": timestamp, "pending": False})
        if m.id == local_id
        else m
        for m in thread.messages
    ]
    return thread.model_copy(update={"messages": messages})
