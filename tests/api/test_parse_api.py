"""
Parse endpoint tests. Extraction backends are faked with httpx.MockTransport.
"""

import httpx
import pytest
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from threaded.api.deps import get_parse_service
from threaded.application.services import ParseService
from threaded.boundary.db import get_async_db
from threaded.boundary.extraction import JinaReaderClient


@pytest.fixture
def reader_calls() -> list[str]:
    return []


@pytest.fixture
def parse_app(app, reader_calls):
    def handler(request: httpx.Request) -> httpx.Response:
        reader_calls.append(str(request.url))
        if "broken" in str(request.url):
            return httpx.Response(502, text="bad gateway")
        return httpx.Response(200, text="# Page\n\n|a|b|\n|--|--|\n|--|--|\n|1|2|")

    jina = JinaReaderClient(reader_url="https://reader.test/", transport=httpx.MockTransport(handler))

    async def override_get_parse_service(db: AsyncSession = Depends(get_async_db)) -> ParseService:
        return ParseService(db, datalab=None, jina=jina)

    app.dependency_overrides[get_parse_service] = override_get_parse_service
    return app


class TestParseUrl:

    @pytest.mark.asyncio
    async def test_url_is_read_once(self, http, parse_app, reader_calls):
        first = await http.post("/api/parse", json={"url": "https://example.com/post"})
        second = await http.post("/api/parse", json={"url": "https://example.com/post"})

        assert first.status_code == 200
        assert first.json() == {
            "markdown": "# Page\n\n|a|b|\n|--|--|\n|1|2|",
            "source": "url",
            "cached": False,
        }
        assert second.json()["cached"] is True
        assert len(reader_calls) == 1
        assert reader_calls[0].startswith("https://reader.test/")
        assert reader_calls[0].endswith("example.com/post")

    @pytest.mark.asyncio
    async def test_private_url_rejected(self, http, parse_app, reader_calls):
        response = await http.post("/api/parse", json={"url": "http://169.254.169.254/latest"})

        assert response.status_code == 400
        assert reader_calls == []

    @pytest.mark.asyncio
    async def test_reader_failure_is_500(self, http, parse_app):
        response = await http.post("/api/parse", json={"url": "https://broken.example.com/"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch URL"}

    @pytest.mark.asyncio
    async def test_invalid_json(self, http, parse_app):
        response = await http.post(
            "/api/parse",
            content=b"{oops",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}


class TestParseFile:

    @pytest.mark.asyncio
    async def test_markdown_upload_passthrough(self, http, parse_app):
        response = await http.post(
            "/api/parse",
            files={"file": ("notes.md", b"# Notes", "text/markdown")},
        )

        assert response.status_code == 200
        assert response.json() == {"markdown": "# Notes", "source": "file", "cached": False}

    @pytest.mark.asyncio
    async def test_missing_file_field(self, http, parse_app):
        response = await http.post(
            "/api/parse",
            files={"attachment": ("notes.md", b"# Notes", "text/markdown")},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No file provided"}

    @pytest.mark.asyncio
    async def test_unsupported_type(self, http, parse_app):
        response = await http.post(
            "/api/parse",
            files={"file": ("tool.exe", b"MZ", "application/octet-stream")},
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Unsupported file type")

    @pytest.mark.asyncio
    async def test_pdf_without_converter_key(self, http, parse_app):
        response = await http.post(
            "/api/parse",
            files={"file": ("paper.pdf", b"%PDF-1.7", "application/pdf")},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Datalab API key not configured for file parsing"}


@pytest.mark.asyncio
async def test_other_content_type(http, parse_app):
    response = await http.post(
        "/api/parse",
        content=b"url=https://example.com",
        headers={"Content-Type": "text/plain"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request format"}
