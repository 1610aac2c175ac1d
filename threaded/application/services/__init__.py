"""Service orchestrators."""

from .auth_guard import OwnerTokenGuard
from .fork_service import ForkService
from .parse_service import ParseService
from .session_service import SessionService
from .thread_service import ThreadService

__all__ = [
    "OwnerTokenGuard",
    "ForkService",
    "ParseService",
    "SessionService",
    "ThreadService",
]
