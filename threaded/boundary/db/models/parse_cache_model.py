"""
Parse cache ORM model.

Content-addressed store of extraction results keyed by the SHA-256 of the
raw upload bytes, or of the literal URL string for links.

Dependencies: sqlalchemy, threaded.boundary.db.base
System role: Avoid repeated paid extraction calls for identical input
"""

from sqlalchemy import BigInteger, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from threaded.boundary.db.base import Base, CreatedAtMixin


class ParseCacheModel(Base, CreatedAtMixin):
    """
    Parse cache entry.

    Attributes:
        content_hash: Hex SHA-256 digest (primary key)
        markdown: Normalized extraction output
        source_type: 'file' or 'url'
        original_filename: Upload filename or the URL
        file_size: Upload size in bytes (None for URLs)
        created_at: When the entry was computed (epoch ms); drives URL freshness
    """

    __tablename__ = "parse_cache"
    __table_args__ = (
        Index("idx_parse_cache_created", "created_at"),
    )

    content_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    markdown: Mapped[str] = mapped_column(Text, nullable=False)
    source_type: Mapped[str] = mapped_column(String(8), nullable=False)
    original_filename: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
