"""
Thread and message service orchestrator.

All operations require the session's owner token and verify the parent
chain (thread in session, message in thread) before mutating. Every
successful mutation bumps the session's updated_at.

Dependencies: threaded.boundary.db.CRUD, threaded.core, threaded.models.message
System role: Thread/message use case orchestration
"""

import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from threaded.application.services.auth_guard import OwnerTokenGuard
from threaded.boundary.db.CRUD.message_crud import message_crud
from threaded.boundary.db.CRUD.session_crud import session_crud
from threaded.boundary.db.CRUD.thread_crud import thread_crud
from threaded.configs.limits import LimitsSettings
from threaded.core.clock import now_ms
from threaded.core.exceptions import MessageNotFoundError, ThreadNotFoundError, ValidationError
from threaded.core.ids import new_id
from threaded.core.validation import validate_role, validate_string, validate_thread_type
from threaded.models.message import dump_parts, parse_parts, text_from_parts

logger = logging.getLogger(__name__)


class ThreadService:
    """Thread and message operations scoped to one owned session."""

    def __init__(
        self,
        db: AsyncSession,
        limits: LimitsSettings | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """
        Initialize thread service with async database session.

        Args:
            db: Async SQLAlchemy session
            limits: Payload limits (defaults from environment)
            clock: Epoch-millisecond clock
        """
        self.db = db
        self.limits = limits or LimitsSettings()
        self.clock = clock
        self.guard = OwnerTokenGuard(db)

    @staticmethod
    def _next_timestamp(now: int, latest: int | None) -> int:
        # Strictly after the latest sibling, so same-millisecond appends keep order.
        if latest is None:
            return now
        return max(now, latest + 1)

    async def _require_thread(self, session_id: str, thread_id: str):
        thread = await thread_crud.get_in_session(self.db, thread_id, session_id)
        if thread is None:
            raise ThreadNotFoundError(thread_id, details={"session_id": session_id})
        return thread

    async def _commit_with_touch(self, session_id: str, timestamp: int) -> None:
        try:
            await session_crud.touch(self.db, session_id, timestamp)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def add_thread(
        self,
        session_id: str,
        owner_token: str | None,
        context: Any,
        snippet: Any,
        thread_type: Any = None,
    ) -> dict:
        """
        Create a thread in an owned session.

        Args:
            session_id: Session id
            owner_token: Presented owner token
            context: Quoted selection, or the whole-document sentinel
            snippet: Short label
            thread_type: 'discussion' (default) or 'comment'

        Returns:
            dict: thread_id and created_at

        Raises:
            ForbiddenError: If the token does not own the session
            ValidationError: If context/snippet/type are invalid
        """
        await self.guard.require_owner(session_id, owner_token)

        context = validate_string(context, self.limits.context_bytes, "context")
        snippet = validate_string(snippet, self.limits.snippet_bytes, "snippet")
        thread_type = validate_thread_type(thread_type)

        latest = await thread_crud.latest_created_at(self.db, session_id)
        created_at = self._next_timestamp(self.clock(), latest)

        thread = await thread_crud.create(
            self.db,
            id=new_id(),
            session_id=session_id,
            context=context,
            snippet=snippet,
            type=thread_type,
            created_at=created_at,
        )
        await self._commit_with_touch(session_id, created_at)

        logger.info(
            "Thread created",
            extra={"session_id": session_id, "thread_id": thread.id, "thread_type": thread_type},
        )
        return {"thread_id": thread.id, "created_at": created_at}

    async def delete_thread(self, session_id: str, thread_id: str, owner_token: str | None) -> bool:
        """
        Delete a thread and its messages.

        Raises:
            ForbiddenError: If the token does not own the session
            ThreadNotFoundError: If the thread is not in this session
        """
        await self.guard.require_owner(session_id, owner_token)
        await self._require_thread(session_id, thread_id)

        await thread_crud.delete_with_messages(self.db, thread_id)
        await self._commit_with_touch(session_id, self.clock())

        logger.info("Thread deleted", extra={"session_id": session_id, "thread_id": thread_id})
        return True

    async def add_message(
        self,
        session_id: str,
        thread_id: str,
        owner_token: str | None,
        role: Any,
        text: Any,
        parts: Any = None,
    ) -> dict:
        """
        Append a message to a thread.

        When `text` is omitted but `parts` are given, the text is taken from
        the text parts.

        Args:
            session_id: Session id
            thread_id: Thread id
            owner_token: Presented owner token
            role: 'user' or 'model' ('assistant' is accepted as 'model')
            text: Message text
            parts: Optional list of message parts

        Returns:
            dict: message_id and timestamp (the message's created_at)

        Raises:
            ForbiddenError: If the token does not own the session
            ThreadNotFoundError: If the thread is not in this session
            ValidationError: If role, text or parts are invalid
        """
        await self.guard.require_owner(session_id, owner_token)
        await self._require_thread(session_id, thread_id)

        stored_parts = None
        if parts is not None:
            try:
                validated = parse_parts(parts)
            except PydanticValidationError as e:
                raise ValidationError(
                    "parts must be a list of text or tool-invocation parts",
                    field="parts",
                    details={"errors": e.error_count()},
                ) from e
            stored_parts = dump_parts(validated)
            if text is None:
                text = text_from_parts(validated)

        text = validate_string(text, self.limits.message_text_bytes, "text")
        role = validate_role(role)

        latest = await message_crud.latest_created_at(self.db, thread_id)
        created_at = self._next_timestamp(self.clock(), latest)

        message = await message_crud.create(
            self.db,
            id=new_id(),
            thread_id=thread_id,
            role=role,
            text=text,
            parts=stored_parts,
            created_at=created_at,
        )
        await self._commit_with_touch(session_id, created_at)

        logger.debug(
            "Message added",
            extra={"session_id": session_id, "thread_id": thread_id, "message_id": message.id},
        )
        return {"message_id": message.id, "timestamp": created_at}

    async def update_message(
        self,
        session_id: str,
        thread_id: str,
        message_id: str,
        owner_token: str | None,
        text: Any,
    ) -> dict:
        """
        Edit a message's text in place.

        Stored parts, when present, are replaced by a single text part so
        they agree with the new text.

        Returns:
            dict: timestamp of the edit

        Raises:
            ForbiddenError: If the token does not own the session
            ValidationError: If text is invalid
            MessageNotFoundError: If the message is not in this thread/session
        """
        await self.guard.require_owner(session_id, owner_token)
        text = validate_string(text, self.limits.message_text_bytes, "text")

        message = await message_crud.get_in_thread(self.db, message_id, thread_id, session_id)
        if message is None:
            raise MessageNotFoundError(message_id, details={"thread_id": thread_id})

        message.text = text
        if message.parts is not None:
            message.parts = [{"type": "text", "text": text}]

        now = self.clock()
        await self._commit_with_touch(session_id, now)
        return {"timestamp": now}

    async def truncate_thread_after(
        self,
        session_id: str,
        thread_id: str,
        message_id: str | None,
        owner_token: str | None,
    ) -> bool:
        """
        Delete every message sorting strictly after `message_id`.

        Idempotent: repeating the call removes nothing further.

        Raises:
            ForbiddenError: If the token does not own the session
            ValidationError: If message_id is missing
            ThreadNotFoundError: If the thread is not in this session
            MessageNotFoundError: If the anchor message is not in the thread
        """
        await self.guard.require_owner(session_id, owner_token)
        if not message_id:
            raise ValidationError("Missing 'after' query parameter", field="after")

        await self._require_thread(session_id, thread_id)
        anchor = await message_crud.get_in_thread(self.db, message_id, thread_id, session_id)
        if anchor is None:
            raise MessageNotFoundError(message_id, details={"thread_id": thread_id})

        deleted = await message_crud.delete_after(self.db, thread_id, anchor)
        await self._commit_with_touch(session_id, self.clock())

        logger.info(
            "Thread truncated",
            extra={"session_id": session_id, "thread_id": thread_id, "deleted": deleted},
        )
        return True
