"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, threaded.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from threaded import __version__
from threaded.api.deps.dependencies import get_service_cache
from threaded.api.error_handlers import register_exception_handlers
from threaded.boundary.db.connection import get_async_engine
from threaded.boundary.db.create_tables import create_all_tables
from threaded.configs import get_settings
from threaded.observability import configure_logging
from threaded.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from .routers import (
    health_router,
    parse_router,
    sessions_router,
    threads_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.effective_log_level)
    logger = logging.getLogger("uvicorn")

    # Startup
    if settings.database.auto_create_tables:
        await create_all_tables()
    logger.info("Session store ready")

    yield

    # Shutdown
    get_service_cache().clear()
    await get_async_engine().dispose()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()

    app = FastAPI(
        title="Threaded Session API",
        description="Document sessions with forkable discussion threads",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Owner-Token", "X-Correlation-ID"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(sessions_router, prefix="/api")
    app.include_router(threads_router, prefix="/api")
    app.include_router(parse_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "threaded.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
