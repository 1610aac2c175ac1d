"""
SQLAlchemy declarative base and common mixins.

Provides base class for all ORM models and reusable mixins
for common fields (nanoid primary keys, epoch-millisecond timestamps).

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from threaded.core.clock import now_ms
from threaded.core.ids import ID_SIZE, new_id

# Ids compare by code point everywhere, matching Python sorting of (created_at, id).
IdString = String(ID_SIZE).with_variant(String(ID_SIZE, collation="C"), "postgresql")


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for ORM model registration.

    All database models inherit from this class to ensure they're
    registered with the metadata and included in table creation.
    """

    pass


class NanoIdMixin:
    """
    Mixin providing a random URL-safe string primary key.

    Attributes:
        id: 21-character nanoid, generated on insert when not supplied
    """

    id: Mapped[str] = mapped_column(
        IdString,
        primary_key=True,
        default=new_id,
        nullable=False,
    )


class CreatedAtMixin:
    """
    Mixin providing an immutable creation timestamp.

    Attributes:
        created_at: Epoch milliseconds (UTC); part of the (created_at, id) sort key
    """

    created_at: Mapped[int] = mapped_column(
        BigInteger,
        default=now_ms,
        nullable=False,
    )


class TimestampMixin(CreatedAtMixin):
    """
    Mixin providing creation and last-modification timestamps.

    updated_at has no onupdate hook: writers bump it explicitly so it never
    moves backwards.

    Attributes:
        created_at: Row creation timestamp (epoch ms)
        updated_at: Last modification timestamp (epoch ms, monotonic)
    """

    updated_at: Mapped[int] = mapped_column(
        BigInteger,
        default=now_ms,
        nullable=False,
    )
