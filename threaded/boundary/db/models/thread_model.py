"""
Thread ORM model.

A thread is a discussion anchored to a quoted selection of the session's
document (or to the whole document).

Dependencies: sqlalchemy, threaded.boundary.db.base
System role: Thread persistence
"""

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from threaded.boundary.db.base import Base, CreatedAtMixin, IdString, NanoIdMixin


class ThreadModel(Base, NanoIdMixin, CreatedAtMixin):
    """
    Thread ORM model.

    Attributes:
        id: Thread nanoid
        session_id: Owning session (cascade delete)
        context: Quoted text the thread is anchored to
        snippet: Short label shown in thread lists
        type: 'discussion' or 'comment'
        created_at: Creation timestamp (epoch ms)
    """

    __tablename__ = "threads"
    __table_args__ = (
        Index("idx_threads_created", "session_id", "created_at"),
    )

    session_id: Mapped[str] = mapped_column(
        IdString,
        ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    context: Mapped[str] = mapped_column(Text, nullable=False)
    snippet: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default="discussion")

    session = relationship("SessionModel", back_populates="threads")
    messages = relationship(
        "MessageModel",
        back_populates="thread",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
