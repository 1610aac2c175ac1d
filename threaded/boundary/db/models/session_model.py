"""
Session ORM model.

A session is a markdown document plus its discussion threads. It is
shared by id; writes require the owner token.

Dependencies: sqlalchemy, threaded.boundary.db.base
System role: Session persistence
"""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from threaded.boundary.db.base import Base, IdString, NanoIdMixin, TimestampMixin


class SessionModel(Base, NanoIdMixin, TimestampMixin):
    """
    Session ORM model.

    Attributes:
        id: Shareable nanoid (primary key)
        owner_token: Secret proving write authority; never changes after insert
        markdown_content: The document being read
        forked_from: Parent session id for forks (SET NULL when parent is deleted)
        created_at: Creation timestamp (epoch ms)
        updated_at: Last mutation timestamp (epoch ms, monotonic)

    Relationships:
        threads: One-to-many with ThreadModel
    """

    __tablename__ = "sessions"

    owner_token: Mapped[str] = mapped_column(String(64), nullable=False)
    markdown_content: Mapped[str] = mapped_column(Text, nullable=False)
    forked_from: Mapped[str | None] = mapped_column(
        IdString,
        ForeignKey("sessions.id", ondelete="SET NULL"),
        nullable=True,
        default=None,
    )

    threads = relationship(
        "ThreadModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
