"""
Parse service with a content-addressed cache.

Raw input (file bytes, or the literal URL string) is hashed with SHA-256
and the hash keys previously extracted markdown. File entries never
expire; URL entries are recomputed and overwritten once they are older
than the freshness window. Every result, cached or fresh, passes through
the markdown table fix.

Dependencies: hashlib (stdlib), sqlalchemy, threaded.boundary
System role: Parse endpoint orchestration and extraction cost control
"""

import hashlib
import logging
from collections.abc import Awaitable, Callable
from pathlib import PurePath

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from threaded.boundary.db.CRUD.parse_cache_crud import parse_cache_crud
from threaded.boundary.extraction.datalab_client import DatalabClient
from threaded.boundary.extraction.jina_client import JinaReaderClient
from threaded.core.clock import now_ms
from threaded.core.exceptions import UpstreamExtractionError, ValidationError
from threaded.core.markdown import fix_malformed_tables
from threaded.core.validation import validate_public_url
from threaded.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)

PASSTHROUGH_EXTENSIONS = ("md", "txt")
CONVERTED_EXTENSIONS = ("pdf", "docx", "xlsx", "csv", "html", "xml", "pptx", "epub")

DEFAULT_URL_TTL_SECONDS = 6 * 60 * 60


def content_hash(raw: bytes | str) -> str:
    """SHA-256 hex digest of raw bytes, or of a string's UTF-8 encoding."""
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def file_extension(filename: str | None) -> str | None:
    """Lower-cased extension without the dot, None if there is none."""
    if not filename:
        return None
    suffix = PurePath(filename).suffix
    return suffix[1:].lower() if suffix else None


class ParseService:
    """
    Converts uploads and URLs to markdown, reusing cached results.

    Args:
        db: Async SQLAlchemy session
        datalab: File converter client (None when no API key is configured)
        jina: URL reader client
        url_ttl_seconds: Freshness window for URL entries
        max_upload_bytes: Upload size limit
        clock: Epoch-millisecond clock
    """

    def __init__(
        self,
        db: AsyncSession,
        datalab: DatalabClient | None = None,
        jina: JinaReaderClient | None = None,
        url_ttl_seconds: int = DEFAULT_URL_TTL_SECONDS,
        max_upload_bytes: int = 10 * 1024 * 1024,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.db = db
        self.datalab = datalab
        self.jina = jina
        self.url_ttl_ms = url_ttl_seconds * 1000
        self.max_upload_bytes = max_upload_bytes
        self.clock = clock

    async def parse_with_cache(
        self,
        raw: bytes | str,
        source_type: str,
        extract: Callable[[], Awaitable[str]],
        original_filename: str | None = None,
        file_size: int | None = None,
    ) -> tuple[str, bool]:
        """
        Return markdown for `raw`, calling `extract` only on a cache miss.

        Args:
            raw: File bytes, or the URL string
            source_type: 'file' or 'url'
            extract: Coroutine factory producing markdown on a miss
            original_filename: Upload name or URL, stored for reference
            file_size: Upload size in bytes

        Returns:
            tuple[str, bool]: (normalized markdown, served from cache)

        Raises:
            UpstreamExtractionError: If extraction fails or returns nothing
        """
        key = content_hash(raw)
        now = self.clock()

        entry = await parse_cache_crud.get(self.db, key)
        if entry is not None:
            fresh = entry.source_type != "url" or now - entry.created_at < self.url_ttl_ms
            if fresh:
                log_with_context(
                    logger,
                    logging.INFO,
                    "Parse cache hit",
                    content_hash=key,
                    source_type=source_type,
                    original_filename=entry.original_filename,
                )
                return fix_malformed_tables(entry.markdown), True
            logger.info("Parse cache entry expired", extra={"content_hash": key})

        markdown = await extract()
        if not markdown or not markdown.strip():
            raise UpstreamExtractionError(
                "Parsing returned empty content",
                details={"source_type": source_type},
            )
        markdown = fix_malformed_tables(markdown)

        try:
            await parse_cache_crud.upsert(
                self.db,
                content_hash=key,
                markdown=markdown,
                source_type=source_type,
                original_filename=original_filename,
                file_size=file_size,
                created_at=now,
            )
            await self.db.commit()
        except IntegrityError:
            # Another request stored the same hash first; its row is equivalent.
            await self.db.rollback()
            logger.warning("Parse cache insert raced", extra={"content_hash": key})

        return markdown, False

    async def parse_file(
        self,
        filename: str | None,
        content: bytes,
        content_type: str | None = None,
    ) -> dict:
        """
        Convert an uploaded file.

        .md and .txt files are returned as-is (after the table fix) without
        touching the cache; other allowed types go through the converter.

        Returns:
            dict: markdown, source='file', cached

        Raises:
            ValidationError: Missing, oversized, empty or unsupported file
            UpstreamExtractionError: Converter unavailable or failed
        """
        if filename is None:
            raise ValidationError("No file provided", field="file")

        if len(content) > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File too large (max {limit_mb}MB)", field="file")

        ext = file_extension(filename)
        if ext in PASSTHROUGH_EXTENSIONS:
            text = content.decode("utf-8", errors="replace")
            if not text.strip():
                raise ValidationError("File is empty", field="file")
            return {"markdown": fix_malformed_tables(text), "source": "file", "cached": False}

        if ext not in CONVERTED_EXTENSIONS:
            allowed = ", ".join(f".{e}" for e in PASSTHROUGH_EXTENSIONS + CONVERTED_EXTENSIONS)
            raise ValidationError(f"Unsupported file type. Allowed: {allowed}", field="file")

        if self.datalab is None:
            raise UpstreamExtractionError(
                "Datalab API key not configured for file parsing",
                backend="datalab",
            )

        datalab = self.datalab

        async def extract() -> str:
            return await datalab.convert(content, filename, content_type)

        markdown, cached = await self.parse_with_cache(
            content,
            "file",
            extract,
            original_filename=filename,
            file_size=len(content),
        )
        return {"markdown": markdown, "source": "file", "cached": cached}

    async def parse_url(self, url: str | None) -> dict:
        """
        Convert a public web page.

        Returns:
            dict: markdown, source='url', cached

        Raises:
            ValidationError: Missing, malformed or private URL
            UpstreamExtractionError: Reader unavailable or failed
        """
        url = validate_public_url(url)

        if self.jina is None:
            raise UpstreamExtractionError("URL reader not configured", backend="jina")

        jina = self.jina

        async def extract() -> str:
            return await jina.read(url)

        markdown, cached = await self.parse_with_cache(
            url,
            "url",
            extract,
            original_filename=url,
        )
        return {"markdown": markdown, "source": "url", "cached": cached}
