"""
Message CRUD operations.

Messages in a thread are ordered by (created_at, id); truncation uses the
same key so it does not depend on clock resolution.

Dependencies: sqlalchemy, threaded.boundary.db.models
System role: Message persistence operations
"""

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from threaded.boundary.db.CRUD.base_crud import BaseCRUD
from threaded.boundary.db.models.message_model import MessageModel
from threaded.boundary.db.models.thread_model import ThreadModel


class MessageCRUD(BaseCRUD[MessageModel]):
    """CRUD operations for MessageModel."""

    def __init__(self) -> None:
        """Initialize MessageCRUD with MessageModel."""
        super().__init__(MessageModel)

    async def get_in_thread(
        self,
        session: AsyncSession,
        message_id: str,
        thread_id: str,
        session_id: str,
    ) -> MessageModel | None:
        """
        Retrieve a message only if it belongs to the thread and the thread to the session.

        Args:
            session: Async database session
            message_id: Message id
            thread_id: Expected thread id
            session_id: Expected session id

        Returns:
            MessageModel if the whole chain matches, None otherwise
        """
        stmt = (
            select(MessageModel)
            .join(ThreadModel, MessageModel.thread_id == ThreadModel.id)
            .where(
                MessageModel.id == message_id,
                MessageModel.thread_id == thread_id,
                ThreadModel.session_id == session_id,
            )
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def latest_created_at(self, session: AsyncSession, thread_id: str) -> int | None:
        """Largest message created_at in a thread, None when the thread is empty."""
        stmt = select(func.max(MessageModel.created_at)).where(MessageModel.thread_id == thread_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_after(
        self,
        session: AsyncSession,
        thread_id: str,
        anchor: MessageModel,
    ) -> int:
        """
        Delete every message of a thread that sorts strictly after `anchor`.

        Args:
            session: Async database session
            thread_id: Thread id
            anchor: Message that stays, together with everything before it

        Returns:
            int: Number of deleted messages
        """
        stmt = delete(MessageModel).where(
            MessageModel.thread_id == thread_id,
            or_(
                MessageModel.created_at > anchor.created_at,
                and_(
                    MessageModel.created_at == anchor.created_at,
                    MessageModel.id > anchor.id,
                ),
            ),
        )
        result = await session.execute(stmt)
        return result.rowcount


message_crud = MessageCRUD()
