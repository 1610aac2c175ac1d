"""
Integration tests for ParseService and the parse cache.

System role: Verification of content-addressed caching and file/URL routing
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from threaded.application.services.parse_service import ParseService, content_hash, file_extension
from threaded.boundary.db.CRUD import parse_cache_crud
from threaded.boundary.db.models import ParseCacheModel
from threaded.core.exceptions import UpstreamExtractionError, ValidationError


class CountingExtractor:
    """Extraction stand-in that records how often it ran."""

    def __init__(self, markdown: str = "# Extracted") -> None:
        self.markdown = markdown
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        return self.markdown


async def _cache_rows(db) -> int:
    return await db.scalar(select(func.count()).select_from(ParseCacheModel))


class TestHelpers:

    def test_content_hash_is_sha256_hex(self) -> None:
        assert content_hash(b"") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )
        assert content_hash("abc") == content_hash(b"abc")

    @pytest.mark.parametrize(
        "filename, expected",
        [("Report.PDF", "pdf"), ("notes.md", "md"), ("archive.tar.gz", "gz"), ("README", None), (None, None)],
    )
    def test_file_extension(self, filename, expected) -> None:
        assert file_extension(filename) == expected


class TestParseWithCache:

    @pytest.mark.asyncio
    async def test_identical_bytes_extract_once(self, test_async_db, clock) -> None:
        # Arrange
        service = ParseService(test_async_db, clock=clock)
        extractor = CountingExtractor()

        # Act
        first = await service.parse_with_cache(b"%PDF-1.7 ...", "file", extractor, "a.pdf", 12)
        second = await service.parse_with_cache(b"%PDF-1.7 ...", "file", extractor, "b.pdf", 12)

        # Assert
        assert extractor.calls == 1
        assert first == ("# Extracted", False)
        assert second == ("# Extracted", True)
        assert await _cache_rows(test_async_db) == 1

    @pytest.mark.asyncio
    async def test_file_entries_never_expire(self, test_async_db, clock) -> None:
        service = ParseService(test_async_db, url_ttl_seconds=60, clock=clock)
        extractor = CountingExtractor()

        await service.parse_with_cache(b"bytes", "file", extractor)
        clock.advance(365 * 24 * 3600 * 1000)
        _, cached = await service.parse_with_cache(b"bytes", "file", extractor)

        assert cached is True
        assert extractor.calls == 1

    @pytest.mark.asyncio
    async def test_url_entry_fresh_within_window(self, test_async_db, clock) -> None:
        service = ParseService(test_async_db, url_ttl_seconds=60, clock=clock)
        extractor = CountingExtractor()

        await service.parse_with_cache("https://example.com/a", "url", extractor)
        clock.advance(59_999)
        _, cached = await service.parse_with_cache("https://example.com/a", "url", extractor)

        assert cached is True
        assert extractor.calls == 1

    @pytest.mark.asyncio
    async def test_stale_url_entry_is_overwritten(self, test_async_db, clock) -> None:
        # Arrange
        service = ParseService(test_async_db, url_ttl_seconds=60, clock=clock)
        url = "https://example.com/a"
        await service.parse_with_cache(url, "url", CountingExtractor("# Old"))
        clock.advance(60_000)

        # Act
        markdown, cached = await service.parse_with_cache(url, "url", CountingExtractor("# New"))

        # Assert
        assert (markdown, cached) == ("# New", False)
        assert await _cache_rows(test_async_db) == 1
        entry = await parse_cache_crud.get(test_async_db, content_hash(url))
        assert entry.markdown == "# New"
        assert entry.created_at == clock.now

    @pytest.mark.asyncio
    @pytest.mark.parametrize("output", ["", "  \n "])
    async def test_empty_extraction_is_error_and_not_cached(self, test_async_db, clock, output) -> None:
        service = ParseService(test_async_db, clock=clock)

        with pytest.raises(UpstreamExtractionError, match="empty content"):
            await service.parse_with_cache(b"blank", "file", CountingExtractor(output))

        assert await _cache_rows(test_async_db) == 0

    @pytest.mark.asyncio
    async def test_extraction_failure_not_cached(self, test_async_db) -> None:
        service = ParseService(test_async_db)
        failing = AsyncMock(side_effect=UpstreamExtractionError("Failed to process file"))

        with pytest.raises(UpstreamExtractionError):
            await service.parse_with_cache(b"x", "file", failing)

        assert await _cache_rows(test_async_db) == 0

    @pytest.mark.asyncio
    async def test_cache_hit_is_normalized(self, test_async_db, clock) -> None:
        # Arrange: a row stored before the table fix existed
        raw = b"legacy"
        await parse_cache_crud.upsert(
            test_async_db,
            content_hash=content_hash(raw),
            markdown="| a | b |\n|---|---|\n|---|---|\n| 1 | 2 |",
            source_type="file",
            original_filename="legacy.pdf",
            file_size=6,
            created_at=clock.now,
        )
        await test_async_db.commit()

        # Act
        markdown, cached = await ParseService(test_async_db, clock=clock).parse_with_cache(
            raw, "file", CountingExtractor()
        )

        # Assert
        assert cached is True
        assert markdown == "| a | b |\n|---|---|\n| 1 | 2 |"

    @pytest.mark.asyncio
    async def test_concurrent_insert_of_same_hash(self, test_async_db, clock, monkeypatch) -> None:
        # Arrange: another writer stored the hash between our lookup and insert
        raw = b"raced"
        await parse_cache_crud.upsert(
            test_async_db,
            content_hash=content_hash(raw),
            markdown="# Winner",
            source_type="file",
            original_filename=None,
            file_size=None,
            created_at=clock.now,
        )
        await test_async_db.commit()
        test_async_db.expunge_all()
        monkeypatch.setattr(parse_cache_crud, "get", AsyncMock(return_value=None))

        # Act
        markdown, cached = await ParseService(test_async_db, clock=clock).parse_with_cache(
            raw, "file", CountingExtractor("# Loser")
        )

        # Assert
        assert (markdown, cached) == ("# Loser", False)
        assert await _cache_rows(test_async_db) == 1


class TestParseFile:

    @pytest.mark.asyncio
    async def test_markdown_passthrough_skips_cache(self, test_async_db) -> None:
        datalab = AsyncMock()
        service = ParseService(test_async_db, datalab=datalab)

        result = await service.parse_file("notes.md", b"# Notes\n\nbody", "text/markdown")

        assert result == {"markdown": "# Notes\n\nbody", "source": "file", "cached": False}
        datalab.convert.assert_not_called()
        assert await _cache_rows(test_async_db) == 0

    @pytest.mark.asyncio
    async def test_converted_file_is_cached(self, test_async_db) -> None:
        datalab = AsyncMock()
        datalab.convert.return_value = "# From PDF"
        service = ParseService(test_async_db, datalab=datalab)

        first = await service.parse_file("paper.pdf", b"%PDF", "application/pdf")
        second = await service.parse_file("renamed.pdf", b"%PDF", "application/pdf")

        assert first == {"markdown": "# From PDF", "source": "file", "cached": False}
        assert second["cached"] is True
        datalab.convert.assert_awaited_once_with(b"%PDF", "paper.pdf", "application/pdf")

    @pytest.mark.asyncio
    async def test_rejections(self, test_async_db) -> None:
        service = ParseService(test_async_db, datalab=AsyncMock(), max_upload_bytes=1024 * 1024)

        with pytest.raises(ValidationError, match="No file provided"):
            await service.parse_file(None, b"")
        with pytest.raises(ValidationError, match="File too large"):
            await service.parse_file("big.pdf", b"x" * (1024 * 1024 + 1))
        with pytest.raises(ValidationError, match="File is empty"):
            await service.parse_file("blank.txt", b"  \n")
        with pytest.raises(ValidationError, match="Unsupported file type"):
            await service.parse_file("program.exe", b"MZ")

    @pytest.mark.asyncio
    async def test_missing_converter_key(self, test_async_db) -> None:
        service = ParseService(test_async_db, datalab=None)

        with pytest.raises(UpstreamExtractionError, match="Datalab API key not configured"):
            await service.parse_file("paper.pdf", b"%PDF")


class TestParseUrl:

    @pytest.mark.asyncio
    async def test_reads_and_caches(self, test_async_db) -> None:
        jina = AsyncMock()
        jina.read.return_value = "# Page"
        service = ParseService(test_async_db, jina=jina)

        first = await service.parse_url("https://example.com/post")
        second = await service.parse_url("https://example.com/post")

        assert first == {"markdown": "# Page", "source": "url", "cached": False}
        assert second["cached"] is True
        jina.read.assert_awaited_once_with("https://example.com/post")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "url",
        [None, "", "ftp://example.com/x", "http://127.0.0.1/admin", "http://localhost:8000", "http://10.0.0.5/"],
    )
    async def test_rejects_bad_urls(self, test_async_db, url) -> None:
        jina = AsyncMock()

        with pytest.raises(ValidationError):
            await ParseService(test_async_db, jina=jina).parse_url(url)

        jina.read.assert_not_called()
