"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, NanoIdMixin, CreatedAtMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Connection management
  - SessionModel, ThreadModel, MessageModel, ParseCacheModel: Domain entities
  - session_crud, thread_crud, message_crud, parse_cache_crud: CRUD singletons

Dependencies: sqlalchemy, threaded.configs
System role: Database adapter providing persistent storage for sessions,
threads, messages and the parse cache.
"""

from threaded.boundary.db.base import Base, CreatedAtMixin, NanoIdMixin, TimestampMixin
from threaded.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from threaded.boundary.db.models import (
    MessageModel,
    ParseCacheModel,
    SessionModel,
    ThreadModel,
)
from threaded.boundary.db.CRUD import (
    BaseCRUD,
    MessageCRUD,
    ParseCacheCRUD,
    SessionCRUD,
    ThreadCRUD,
    message_crud,
    parse_cache_crud,
    session_crud,
    thread_crud,
)

__all__ = [
    # Base classes
    "Base",
    "NanoIdMixin",
    "CreatedAtMixin",
    "TimestampMixin",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "SessionModel",
    "ThreadModel",
    "MessageModel",
    "ParseCacheModel",
    # CRUD classes
    "BaseCRUD",
    "SessionCRUD",
    "ThreadCRUD",
    "MessageCRUD",
    "ParseCacheCRUD",
    # CRUD singletons
    "session_crud",
    "thread_crud",
    "message_crud",
    "parse_cache_crud",
]
