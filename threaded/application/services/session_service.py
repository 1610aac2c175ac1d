"""
Session service orchestrator.

Coordinates session lifecycle operations: create, read the assembled
graph, and delete with an explicit ordered cascade.

Dependencies: threaded.boundary.db.CRUD, threaded.core
System role: Session use case orchestration
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from threaded.application.services.auth_guard import OwnerTokenGuard
from threaded.boundary.db.CRUD.session_crud import session_crud
from threaded.boundary.db.models.message_model import MessageModel
from threaded.boundary.db.models.session_model import SessionModel
from threaded.boundary.db.models.thread_model import ThreadModel
from threaded.configs.limits import LimitsSettings
from threaded.core.clock import now_ms
from threaded.core.exceptions import SessionNotFoundError
from threaded.core.ids import new_id, new_owner_token
from threaded.core.validation import validate_string

logger = logging.getLogger(__name__)


def _sort_key(row: ThreadModel | MessageModel) -> tuple[int, str]:
    return (row.created_at, row.id)


def serialize_message(message: MessageModel) -> dict:
    """Message as returned in a session graph; `timestamp` is created_at."""
    return {
        "id": message.id,
        "role": message.role,
        "text": message.text,
        "timestamp": message.created_at,
        "parts": message.parts,
    }


def serialize_session(session: SessionModel) -> dict:
    """
    Assemble the full graph of a loaded session.

    Threads and messages are ordered by (created_at, id).
    """
    return {
        "id": session.id,
        "markdown_content": session.markdown_content,
        "created_at": session.created_at,
        "updated_at": session.updated_at,
        "forked_from": session.forked_from,
        "threads": [
            {
                "id": thread.id,
                "context": thread.context,
                "snippet": thread.snippet,
                "type": thread.type,
                "created_at": thread.created_at,
                "messages": [
                    serialize_message(m) for m in sorted(thread.messages, key=_sort_key)
                ],
            }
            for thread in sorted(session.threads, key=_sort_key)
        ],
    }


class SessionService:
    """Session service orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        limits: LimitsSettings | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """
        Initialize session service with async database session.

        Args:
            db: Async SQLAlchemy session
            limits: Payload limits (defaults from environment)
            clock: Epoch-millisecond clock
        """
        self.db = db
        self.limits = limits or LimitsSettings()
        self.clock = clock
        self.guard = OwnerTokenGuard(db)

    async def create_session(self, markdown_content: str | None) -> dict:
        """
        Create a new session for a document.

        Args:
            markdown_content: Document markdown

        Returns:
            dict: session_id and owner_token (the token is only returned here)

        Raises:
            ValidationError: If content is empty or larger than the limit
        """
        content = validate_string(
            markdown_content,
            self.limits.markdown_content_bytes,
            "markdownContent",
        )

        now = self.clock()
        session = await session_crud.create(
            self.db,
            id=new_id(),
            owner_token=new_owner_token(),
            markdown_content=content,
            created_at=now,
            updated_at=now,
        )
        await self.db.commit()

        logger.info(
            "Session created",
            extra={"session_id": session.id, "content_bytes": len(content.encode("utf-8"))},
        )
        return {"session_id": session.id, "owner_token": session.owner_token}

    async def get_session(self, session_id: str) -> dict:
        """
        Get the full session graph. No authorization required.

        Args:
            session_id: Session id

        Returns:
            dict: Session with ordered threads and messages

        Raises:
            SessionNotFoundError: If session not found
        """
        session = await session_crud.get_graph(self.db, session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return serialize_session(session)

    async def delete_session(self, session_id: str, owner_token: str | None) -> bool:
        """
        Delete a session with all its threads and messages.

        Messages, threads and the session row are removed in that order
        inside one transaction.

        Args:
            session_id: Session id
            owner_token: Presented owner token

        Returns:
            bool: True when deleted

        Raises:
            ForbiddenError: If the token does not own the session
        """
        await self.guard.require_owner(session_id, owner_token)

        try:
            await session_crud.delete_cascade(self.db, session_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Session deleted", extra={"session_id": session_id})
        return True
