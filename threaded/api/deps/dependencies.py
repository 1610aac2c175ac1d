"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: threaded.configs, threaded.application, threaded.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from threaded.application.services import (
    ForkService,
    ParseService,
    SessionService,
    ThreadService,
)
from threaded.boundary.db import get_async_db
from threaded.boundary.extraction import DatalabClient, JinaReaderClient
from threaded.configs import Settings, get_settings


class ServiceCache:
    """Container for cached extraction clients."""

    def __init__(self):
        self._datalab = None
        self._jina = None

    @property
    def datalab(self) -> DatalabClient | None:
        """Get cached Datalab client, None when no API key is configured."""
        if self._datalab is None:
            parse = get_settings().parse
            if not parse.datalab_api_key:
                return None
            self._datalab = DatalabClient(
                api_key=parse.datalab_api_key,
                api_url=parse.datalab_api_url,
                poll_interval=parse.datalab_poll_interval_seconds,
                max_polls=parse.datalab_max_polls,
                timeout=parse.request_timeout_seconds,
            )
        return self._datalab

    @property
    def jina(self) -> JinaReaderClient:
        """Get cached Jina reader client."""
        if self._jina is None:
            parse = get_settings().parse
            self._jina = JinaReaderClient(
                reader_url=parse.jina_reader_url,
                api_key=parse.jina_api_key,
                timeout=parse.request_timeout_seconds,
            )
        return self._jina

    def clear(self) -> None:
        """Clear all cached instances."""
        self._datalab = None
        self._jina = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_owner_token(x_owner_token: str | None = Header(default=None)) -> str | None:
    """Owner token from the X-Owner-Token header, if any."""
    return x_owner_token


def get_session_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> SessionService:
    """
    Get session service instance.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings

    Returns:
        SessionService: Service bound to this request's session
    """
    return SessionService(db, limits=settings.limits)


def get_thread_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> ThreadService:
    """Get thread service instance."""
    return ThreadService(db, limits=settings.limits)


def get_fork_service(db: AsyncSession = Depends(get_async_db)) -> ForkService:
    """Get fork service instance."""
    return ForkService(db)


def get_parse_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> ParseService:
    """
    Get parse service instance wired to the cached extraction clients.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings

    Returns:
        ParseService: Service with cache freshness and upload limits from settings
    """
    cache = get_service_cache()
    return ParseService(
        db,
        datalab=cache.datalab,
        jina=cache.jina,
        url_ttl_seconds=settings.parse.url_cache_ttl_seconds,
        max_upload_bytes=settings.limits.upload_bytes,
    )
