"""
Database table creation.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, threaded.configs
System role: Database schema initialization

Usage:
    python -m threaded.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from threaded.boundary.db.base import Base
from threaded.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from threaded.boundary.db.models import (  # noqa: F401
    MessageModel,
    ParseCacheModel,
    SessionModel,
    ThreadModel,
)

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: CREATE TABLE IF NOT EXISTS for each model, so safe
    to run on every startup. Existing tables remain unchanged.

    Args:
        engine: Engine to use (defaults to the configured one)
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured", extra={"tables": sorted(Base.metadata.tables)})


if __name__ == "__main__":
    asyncio.run(create_all_tables())
