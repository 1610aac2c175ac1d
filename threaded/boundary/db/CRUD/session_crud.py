"""
Session CRUD operations.

Provides Create, Read, Update, Delete operations for SessionModel
with session-specific query methods: graph loading, owner token lookup,
monotonic updated_at bumps and the ordered cascade delete.

Dependencies: sqlalchemy, threaded.boundary.db.models
System role: Session persistence operations
"""

from sqlalchemy import case, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from threaded.boundary.db.CRUD.base_crud import BaseCRUD
from threaded.boundary.db.models.message_model import MessageModel
from threaded.boundary.db.models.session_model import SessionModel
from threaded.boundary.db.models.thread_model import ThreadModel


class SessionCRUD(BaseCRUD[SessionModel]):
    """
    CRUD operations for SessionModel.

    Extends BaseCRUD with session-specific queries including
    eager loading of the full thread/message graph.
    """

    def __init__(self) -> None:
        """Initialize SessionCRUD with SessionModel."""
        super().__init__(SessionModel)

    async def get_graph(
        self,
        session: AsyncSession,
        id: str,
    ) -> SessionModel | None:
        """
        Retrieve session with eagerly loaded threads and messages.

        Collections are loaded unordered; callers sort by (created_at, id).
        Rows already in the identity map are refreshed, since bulk
        statements do not update loaded collections.

        Args:
            session: Async database session
            id: Session id

        Returns:
            SessionModel with threads and messages loaded, None if not found
        """
        stmt = (
            select(SessionModel)
            .where(SessionModel.id == id)
            .options(selectinload(SessionModel.threads).selectinload(ThreadModel.messages))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_owner_token(self, session: AsyncSession, id: str) -> str | None:
        """
        Look up the stored owner token for a session.

        Args:
            session: Async database session
            id: Session id

        Returns:
            Owner token, or None when the session does not exist
        """
        stmt = select(SessionModel.owner_token).where(SessionModel.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def touch(self, session: AsyncSession, id: str, timestamp: int) -> None:
        """
        Bump updated_at to `timestamp` unless it is already later.

        Args:
            session: Async database session
            id: Session id
            timestamp: Candidate updated_at (epoch ms)
        """
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == id)
            .values(
                updated_at=case(
                    (SessionModel.updated_at < timestamp, timestamp),
                    else_=SessionModel.updated_at,
                )
            )
        )
        await session.execute(stmt)

    async def delete_cascade(self, session: AsyncSession, id: str) -> bool:
        """
        Delete a session with its threads and messages.

        Runs messages → threads → session as explicit statements so the
        result does not depend on the backend enforcing foreign-key
        cascades, and detaches forks that pointed at this session.
        The caller commits.

        Args:
            session: Async database session
            id: Session id

        Returns:
            True if the session row was deleted, False if not found
        """
        thread_ids = select(ThreadModel.id).where(ThreadModel.session_id == id)

        await session.execute(
            delete(MessageModel).where(MessageModel.thread_id.in_(thread_ids))
        )
        await session.execute(delete(ThreadModel).where(ThreadModel.session_id == id))
        await session.execute(
            update(SessionModel)
            .where(SessionModel.forked_from == id)
            .values(forked_from=None)
        )
        result = await session.execute(delete(SessionModel).where(SessionModel.id == id))
        return result.rowcount > 0


session_crud = SessionCRUD()
