"""
Message ORM model.

Messages within a thread are totally ordered by (created_at, id).

Dependencies: sqlalchemy, threaded.boundary.db.base
System role: Message persistence
"""

from sqlalchemy import CheckConstraint, ForeignKey, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from threaded.boundary.db.base import Base, CreatedAtMixin, IdString, NanoIdMixin


class MessageModel(Base, NanoIdMixin, CreatedAtMixin):
    """
    Message ORM model.

    Attributes:
        id: Message nanoid (tie-breaker for equal created_at)
        thread_id: Owning thread (cascade delete)
        role: 'user' or 'model'
        text: Plain text of the message
        parts: Optional structured parts (text / tool invocation records)
        created_at: Creation timestamp (epoch ms)
    """

    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'model')", name="ck_messages_role"),
        Index("idx_messages_created", "thread_id", "created_at"),
    )

    thread_id: Mapped[str] = mapped_column(
        IdString,
        ForeignKey("threads.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    parts: Mapped[list | None] = mapped_column(JSON, nullable=True, default=None)

    thread = relationship("ThreadModel", back_populates="messages")
