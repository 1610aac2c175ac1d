"""API dependencies."""

from .dependencies import (
    ServiceCache,
    get_fork_service,
    get_owner_token,
    get_parse_service,
    get_service_cache,
    get_session_service,
    get_settings_dependency,
    get_thread_service,
)

__all__ = [
    "ServiceCache",
    "get_fork_service",
    "get_owner_token",
    "get_parse_service",
    "get_service_cache",
    "get_session_service",
    "get_settings_dependency",
    "get_thread_service",
]
