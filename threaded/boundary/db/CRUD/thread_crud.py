"""
Thread CRUD operations.

Dependencies: sqlalchemy, threaded.boundary.db.models
System role: Thread persistence operations
"""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from threaded.boundary.db.CRUD.base_crud import BaseCRUD
from threaded.boundary.db.models.message_model import MessageModel
from threaded.boundary.db.models.thread_model import ThreadModel


class ThreadCRUD(BaseCRUD[ThreadModel]):
    """CRUD operations for ThreadModel, always scoped to a session."""

    def __init__(self) -> None:
        """Initialize ThreadCRUD with ThreadModel."""
        super().__init__(ThreadModel)

    async def get_in_session(
        self,
        session: AsyncSession,
        thread_id: str,
        session_id: str,
    ) -> ThreadModel | None:
        """
        Retrieve a thread only if it belongs to the given session.

        Args:
            session: Async database session
            thread_id: Thread id
            session_id: Expected owning session id

        Returns:
            ThreadModel if found in that session, None otherwise
        """
        stmt = select(ThreadModel).where(
            ThreadModel.id == thread_id,
            ThreadModel.session_id == session_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def latest_created_at(self, session: AsyncSession, session_id: str) -> int | None:
        """Largest thread created_at in a session, None when it has no threads."""
        stmt = select(func.max(ThreadModel.created_at)).where(ThreadModel.session_id == session_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_with_messages(self, session: AsyncSession, thread_id: str) -> bool:
        """
        Delete a thread and its messages.

        Args:
            session: Async database session
            thread_id: Thread id

        Returns:
            True if the thread row was deleted
        """
        await session.execute(delete(MessageModel).where(MessageModel.thread_id == thread_id))
        return await self.delete_by_id(session, thread_id)


thread_crud = ThreadCRUD()
