"""
Parse cache CRUD operations.

Dependencies: sqlalchemy, threaded.boundary.db.models
System role: Content-addressed parse result persistence
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from threaded.boundary.db.models.parse_cache_model import ParseCacheModel


class ParseCacheCRUD:
    """Lookup and upsert of parse cache entries keyed by content hash."""

    async def get(self, session: AsyncSession, content_hash: str) -> ParseCacheModel | None:
        """
        Retrieve a cache entry by content hash.

        Args:
            session: Async database session
            content_hash: Hex SHA-256 digest

        Returns:
            ParseCacheModel if cached, None otherwise
        """
        stmt = select(ParseCacheModel).where(ParseCacheModel.content_hash == content_hash)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        session: AsyncSession,
        content_hash: str,
        markdown: str,
        source_type: str,
        original_filename: str | None,
        file_size: int | None,
        created_at: int,
    ) -> ParseCacheModel:
        """
        Insert an entry, or overwrite the existing row for the same hash.

        Stale URL entries are replaced in place; there is never more than
        one row per hash. The caller commits.

        Returns:
            ParseCacheModel: The stored entry
        """
        entry = await self.get(session, content_hash)
        if entry is None:
            entry = ParseCacheModel(content_hash=content_hash)
            session.add(entry)

        entry.markdown = markdown
        entry.source_type = source_type
        entry.original_filename = original_filename
        entry.file_size = file_size
        entry.created_at = created_at

        await session.flush()
        return entry


parse_cache_crud = ParseCacheCRUD()
