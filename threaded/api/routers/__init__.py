"""API routers."""

from .health import router as health_router
from .parse import router as parse_router
from .sessions import router as sessions_router
from .threads import router as threads_router

__all__ = [
    "health_router",
    "parse_router",
    "sessions_router",
    "threads_router",
]
