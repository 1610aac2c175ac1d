"""
Database models package.

Exports:
  - SessionModel: Session ORM model
  - ThreadModel: Thread ORM model
  - MessageModel: Message ORM model
  - ParseCacheModel: Parse cache entry

Dependencies: sqlalchemy, threaded.boundary.db.base
System role: Database model definitions for domain entities
"""

from threaded.boundary.db.models.session_model import SessionModel
from threaded.boundary.db.models.thread_model import ThreadModel
from threaded.boundary.db.models.message_model import MessageModel
from threaded.boundary.db.models.parse_cache_model import ParseCacheModel

__all__ = [
    "SessionModel",
    "ThreadModel",
    "MessageModel",
    "ParseCacheModel",
]
