"""
Session fork orchestrator.

A fork is a full clone of a session graph under a new session id and a
new owner token. Every thread and message gets a fresh id; created_at
values and the document are copied verbatim. The whole graph is written
in one unit of work: either everything lands or nothing does.

Dependencies: sqlalchemy, threaded.boundary.db
System role: Copy-on-write branching of shared sessions
"""

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from threaded.boundary.db.CRUD.session_crud import session_crud
from threaded.boundary.db.models.message_model import MessageModel
from threaded.boundary.db.models.session_model import SessionModel
from threaded.boundary.db.models.thread_model import ThreadModel
from threaded.core.clock import now_ms
from threaded.core.exceptions import SessionNotFoundError
from threaded.core.ids import new_id, new_owner_token
from threaded.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class ForkService:
    """Clones session graphs."""

    def __init__(self, db: AsyncSession, clock: Callable[[], int] = now_ms) -> None:
        self.db = db
        self.clock = clock

    async def fork_session(self, original_id: str) -> dict:
        """
        Fork a session. Anyone holding the session id may fork it.

        Args:
            original_id: Session to clone

        Returns:
            dict: session_id, owner_token, thread_id_map and message_id_map
                (old id → new id)

        Raises:
            SessionNotFoundError: If the original does not exist
            SQLAlchemyError: If the insert fails; nothing is persisted
        """
        original = await session_crud.get_graph(self.db, original_id)
        if original is None:
            raise SessionNotFoundError(original_id)

        now = self.clock()
        forked = SessionModel(
            id=new_id(),
            owner_token=new_owner_token(),
            markdown_content=original.markdown_content,
            created_at=now,
            updated_at=now,
            forked_from=original.id,
        )

        thread_id_map: dict[str, str] = {}
        message_id_map: dict[str, str] = {}
        for thread in original.threads:
            new_thread = ThreadModel(
                id=new_id(),
                context=thread.context,
                snippet=thread.snippet,
                type=thread.type,
                created_at=thread.created_at,
            )
            thread_id_map[thread.id] = new_thread.id

            for message in thread.messages:
                new_message = MessageModel(
                    id=new_id(),
                    role=message.role,
                    text=message.text,
                    parts=message.parts,
                    created_at=message.created_at,
                )
                message_id_map[message.id] = new_message.id
                new_thread.messages.append(new_message)

            forked.threads.append(new_thread)

        try:
            self.db.add(forked)
            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            log_exception_with_context(logger, "Fork failed, rolled back", e, original_id=original_id)
            raise

        logger.info(
            "Session forked",
            extra={
                "original_id": original_id,
                "session_id": forked.id,
                "threads": len(thread_id_map),
                "messages": len(message_id_map),
            },
        )
        return {
            "session_id": forked.id,
            "owner_token": forked.owner_token,
            "thread_id_map": thread_id_map,
            "message_id_map": message_id_map,
        }
