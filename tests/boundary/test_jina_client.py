"""
Tests for the Jina reader client using httpx.MockTransport.
"""

import httpx
import pytest

from threaded.boundary.extraction import JinaReaderClient
from threaded.core.exceptions import UpstreamExtractionError


class TestJinaRead:

    @pytest.mark.asyncio
    async def test_appends_target_and_asks_for_markdown(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="# Article")

        client = JinaReaderClient(
            reader_url="https://reader.test/",
            transport=httpx.MockTransport(handler),
        )

        assert await client.read("https://example.com/a?b=1") == "# Article"
        assert seen[0].headers["Accept"] == "text/markdown"
        assert "Authorization" not in seen[0].headers
        assert seen[0].url.host == "reader.test"
        assert "example.com/a" in str(seen[0].url)

    @pytest.mark.asyncio
    async def test_sends_bearer_key_when_configured(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        client = JinaReaderClient(api_key="jina-key", transport=httpx.MockTransport(handler))
        await client.read("https://example.com")

        assert seen[0].headers["Authorization"] == "Bearer jina-key"

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        client = JinaReaderClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(451, text="blocked"))
        )

        with pytest.raises(UpstreamExtractionError) as exc_info:
            await client.read("https://example.com")

        assert exc_info.value.message == "Failed to fetch URL"
        assert exc_info.value.details == {"backend": "jina", "status_code": 451}

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = JinaReaderClient(transport=httpx.MockTransport(handler))

        with pytest.raises(UpstreamExtractionError, match="Failed to fetch URL"):
            await client.read("https://example.com")
