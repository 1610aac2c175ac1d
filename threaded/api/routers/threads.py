"""
Thread and message API endpoints.

All routes require the X-Owner-Token header.

Routes:
- POST /sessions/{id}/threads - Add thread
- DELETE /sessions/{id}/threads/{tid} - Delete thread
- POST /sessions/{id}/threads/{tid}/messages - Add message
- PUT /sessions/{id}/threads/{tid}/messages/{mid} - Edit message
- DELETE /sessions/{id}/threads/{tid}/messages?after={mid} - Truncate thread

Dependencies: threaded.application.services, threaded.models
System role: Thread/message HTTP API
"""

from fastapi import APIRouter, Depends, Query, status

from threaded.api.deps import get_owner_token, get_thread_service
from threaded.application.services import ThreadService
from threaded.models.common import SuccessResponse
from threaded.models.message import (
    AddMessageRequest,
    AddMessageResponse,
    UpdateMessageRequest,
    UpdateMessageResponse,
)
from threaded.models.thread import CreateThreadRequest, CreateThreadResponse

router = APIRouter(prefix="/sessions/{session_id}/threads", tags=["threads"])


@router.post("", response_model=CreateThreadResponse, status_code=status.HTTP_201_CREATED)
async def add_thread(
    session_id: str,
    request: CreateThreadRequest,
    owner_token: str | None = Depends(get_owner_token),
    thread_service: ThreadService = Depends(get_thread_service),
) -> CreateThreadResponse:
    """Create a thread anchored to a selection."""
    result = await thread_service.add_thread(
        session_id,
        owner_token,
        context=request.context,
        snippet=request.snippet,
        thread_type=request.type,
    )
    return CreateThreadResponse(**result)


@router.delete("/{thread_id}", response_model=SuccessResponse)
async def delete_thread(
    session_id: str,
    thread_id: str,
    owner_token: str | None = Depends(get_owner_token),
    thread_service: ThreadService = Depends(get_thread_service),
) -> SuccessResponse:
    """Delete a thread and its messages."""
    await thread_service.delete_thread(session_id, thread_id, owner_token)
    return SuccessResponse()


@router.post(
    "/{thread_id}/messages",
    response_model=AddMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_message(
    session_id: str,
    thread_id: str,
    request: AddMessageRequest,
    owner_token: str | None = Depends(get_owner_token),
    thread_service: ThreadService = Depends(get_thread_service),
) -> AddMessageResponse:
    """
    Append a message to a thread.

    Returns:
        AddMessageResponse: Server id and timestamp for reconciling the local copy
    """
    result = await thread_service.add_message(
        session_id,
        thread_id,
        owner_token,
        role=request.role,
        text=request.text,
        parts=request.parts,
    )
    return AddMessageResponse(**result)


@router.put("/{thread_id}/messages/{message_id}", response_model=UpdateMessageResponse)
async def update_message(
    session_id: str,
    thread_id: str,
    message_id: str,
    request: UpdateMessageRequest,
    owner_token: str | None = Depends(get_owner_token),
    thread_service: ThreadService = Depends(get_thread_service),
) -> UpdateMessageResponse:
    """Edit a message's text in place."""
    result = await thread_service.update_message(
        session_id,
        thread_id,
        message_id,
        owner_token,
        text=request.text,
    )
    return UpdateMessageResponse(**result)


@router.delete("/{thread_id}/messages", response_model=SuccessResponse)
async def truncate_thread(
    session_id: str,
    thread_id: str,
    after: str | None = Query(default=None, description="Keep this message and everything before it"),
    owner_token: str | None = Depends(get_owner_token),
    thread_service: ThreadService = Depends(get_thread_service),
) -> SuccessResponse:
    """Delete every message after `after`. Repeating the call is a no-op."""
    await thread_service.truncate_thread_after(session_id, thread_id, after, owner_token)
    return SuccessResponse()
