"""
Session API endpoints.

Routes:
- POST /sessions - Create new session
- GET /sessions/{id} - Get full session graph
- DELETE /sessions/{id} - Delete session (owner only)
- POST /sessions/{id}/fork - Fork session

Dependencies: threaded.application.services, threaded.models
System role: Session management HTTP API
"""

import logging

from fastapi import APIRouter, Depends, status

from threaded.api.deps import (
    get_fork_service,
    get_owner_token,
    get_session_service,
)
from threaded.application.services import ForkService, SessionService
from threaded.models.common import SuccessResponse
from threaded.models.session import (
    CreateSessionRequest,
    CreateSessionResponse,
    ForkSessionResponse,
    SessionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=CreateSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: CreateSessionRequest,
    session_service: SessionService = Depends(get_session_service),
) -> CreateSessionResponse:
    """
    Create a session for a document.

    Args:
        request: CreateSessionRequest with markdownContent
        session_service: Injected SessionService

    Returns:
        CreateSessionResponse: New session id and its owner token

    Raises:
        ValidationError (400): Empty or oversized content
    """
    result = await session_service.create_session(request.markdown_content)
    return CreateSessionResponse(**result)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """
    Get a session with its threads and messages. Anyone with the id may read.

    Raises:
        SessionNotFoundError (404)
    """
    session = await session_service.get_session(session_id)
    return SessionResponse(**session)


@router.delete("/{session_id}", response_model=SuccessResponse)
async def delete_session(
    session_id: str,
    owner_token: str | None = Depends(get_owner_token),
    session_service: SessionService = Depends(get_session_service),
) -> SuccessResponse:
    """
    Delete a session and everything in it.

    Raises:
        ForbiddenError (403): Missing or wrong X-Owner-Token
    """
    await session_service.delete_session(session_id, owner_token)
    return SuccessResponse()


@router.post(
    "/{session_id}/fork",
    response_model=ForkSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def fork_session(
    session_id: str,
    fork_service: ForkService = Depends(get_fork_service),
) -> ForkSessionResponse:
    """
    Fork a session into a new one owned by the caller.

    Returns:
        ForkSessionResponse: New id, new owner token and the old → new thread and message id maps

    Raises:
        SessionNotFoundError (404)
    """
    result = await fork_service.fork_session(session_id)
    return ForkSessionResponse(**result)
