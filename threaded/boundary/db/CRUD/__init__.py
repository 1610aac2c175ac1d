"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from threaded.boundary.db.CRUD import session_crud, thread_crud, message_crud

    session = await session_crud.get_graph(db, session_id)
"""

from threaded.boundary.db.CRUD.base_crud import BaseCRUD
from threaded.boundary.db.CRUD.session_crud import SessionCRUD, session_crud
from threaded.boundary.db.CRUD.thread_crud import ThreadCRUD, thread_crud
from threaded.boundary.db.CRUD.message_crud import MessageCRUD, message_crud
from threaded.boundary.db.CRUD.parse_cache_crud import ParseCacheCRUD, parse_cache_crud

__all__ = [
    "BaseCRUD",
    "SessionCRUD",
    "session_crud",
    "ThreadCRUD",
    "thread_crud",
    "MessageCRUD",
    "message_crud",
    "ParseCacheCRUD",
    "parse_cache_crud",
]
