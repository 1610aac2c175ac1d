"""
Datalab marker client for file-to-markdown conversion.

Submits a document as multipart form data, then polls the returned
check URL until the conversion completes, fails, or runs out of polls.

Dependencies: httpx
System role: File extraction backend for the parse endpoint
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from threaded.core.exceptions import UpstreamExtractionError

logger = logging.getLogger(__name__)

_BACKEND = "datalab"
_PUBLIC_ERROR = "Failed to process file"


class DatalabClient:
    """
    Async client for the Datalab marker API.

    Args:
        api_key: Datalab API key, sent as X-API-Key
        api_url: Submit endpoint
        poll_interval: Seconds between status polls
        max_polls: Maximum number of status polls before giving up
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
        sleep: Coroutine used between polls
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        poll_interval: float = 2.0,
        max_polls: int = 60,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.timeout = timeout
        self._transport = transport
        self._sleep = sleep

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"X-API-Key": self.api_key},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def convert(self, content: bytes, filename: str, content_type: str | None = None) -> str:
        """
        Convert a document to markdown.

        Args:
            content: Raw file bytes
            filename: Original file name (the extension selects the converter)
            content_type: Optional MIME type of the upload

        Returns:
            str: Markdown produced by the converter

        Raises:
            UpstreamExtractionError: On HTTP failure, conversion error or timeout
        """
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        data = {
            "output_format": "markdown",
            "skip_cache": "false",
            "force_ocr": "true",
            "use_llm": "true",
        }

        async with self._client() as client:
            try:
                response = await client.post(self.api_url, files=files, data=data)
            except httpx.HTTPError as e:
                logger.error(
                    "Datalab submit failed",
                    extra={"upload_name": filename, "error": str(e)},
                )
                raise UpstreamExtractionError(_PUBLIC_ERROR, backend=_BACKEND) from e

            if response.status_code >= 400:
                logger.error(
                    "Datalab submit rejected",
                    extra={"upload_name": filename, "status_code": response.status_code},
                )
                raise UpstreamExtractionError(
                    _PUBLIC_ERROR,
                    backend=_BACKEND,
                    details={"status_code": response.status_code},
                )

            result = response.json()
            if not result.get("success"):
                raise UpstreamExtractionError(
                    _PUBLIC_ERROR,
                    backend=_BACKEND,
                    details={"error": result.get("error")},
                )

            check_url = result.get("request_check_url")
            if not check_url:
                raise UpstreamExtractionError(
                    _PUBLIC_ERROR,
                    backend=_BACKEND,
                    details={"error": "no check URL returned"},
                )

            logger.info(
                "Datalab conversion submitted",
                extra={"upload_name": filename, "request_id": result.get("request_id")},
            )
            return await self._poll(client, check_url)

    async def _poll(self, client: httpx.AsyncClient, check_url: str) -> str:
        for attempt in range(self.max_polls):
            try:
                response = await client.get(check_url)
            except httpx.HTTPError as e:
                raise UpstreamExtractionError(_PUBLIC_ERROR, backend=_BACKEND) from e

            if response.status_code >= 400:
                raise UpstreamExtractionError(
                    _PUBLIC_ERROR,
                    backend=_BACKEND,
                    details={"status_code": response.status_code, "attempt": attempt},
                )

            result = response.json()
            status = result.get("status")

            if status == "complete":
                markdown = result.get("markdown")
                if not markdown:
                    raise UpstreamExtractionError(
                        _PUBLIC_ERROR,
                        backend=_BACKEND,
                        details={"error": "completed without markdown"},
                    )
                return markdown

            if status == "error":
                raise UpstreamExtractionError(
                    _PUBLIC_ERROR,
                    backend=_BACKEND,
                    details={"error": result.get("error")},
                )

            await self._sleep(self.poll_interval)

        logger.warning("Datalab conversion timed out", extra={"polls": self.max_polls})
        raise UpstreamExtractionError("Parsing timed out", backend=_BACKEND)
