"""
Jina reader client for URL-to-markdown extraction.

Dependencies: httpx
System role: URL extraction backend for the parse endpoint
"""

import logging

import httpx

from threaded.core.exceptions import UpstreamExtractionError

logger = logging.getLogger(__name__)

_BACKEND = "jina"


class JinaReaderClient:
    """Fetches a public page as markdown through the Jina reader."""

    def __init__(
        self,
        reader_url: str = "https://r.jina.ai/",
        api_key: str | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.reader_url = reader_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def read(self, url: str) -> str:
        """
        Fetch `url` through the reader.

        Raises:
            UpstreamExtractionError: On network failure or a non-2xx response
        """
        headers = {"Accept": "text/markdown"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        # The target is appended verbatim, not as a query parameter.
        reader_target = f"{self.reader_url}{url}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(reader_target, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Jina reader request failed", extra={"url": url, "error": str(e)})
            raise UpstreamExtractionError("Failed to fetch URL", backend=_BACKEND) from e

        if not response.is_success:
            logger.error(
                "Jina reader rejected request",
                extra={"url": url, "status_code": response.status_code},
            )
            raise UpstreamExtractionError(
                "Failed to fetch URL",
                backend=_BACKEND,
                details={"status_code": response.status_code},
            )

        return response.text
