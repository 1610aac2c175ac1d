"""
HTTP client for the session store.

Every call goes through a bounded retry: network failures and 5xx
responses are retried with exponential backoff (1s, 2s, ...), any 4xx is
returned to the caller immediately. Error messages come from the
response body's `error` field when there is one.

Dependencies: httpx, tenacity, threaded.models
System role: Remote access to sessions, threads, messages and parsing
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from threaded.configs.client import ClientSettings
from threaded.models.message import AddMessageResponse, UpdateMessageResponse
from threaded.models.parse import ParseResponse
from threaded.models.session import CreateSessionResponse, ForkSessionResponse, SessionResponse
from threaded.models.thread import CreateThreadResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Failed API call.

    Attributes:
        message: Server-provided error, or a generic fallback
        status: HTTP status code, None for network failures
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        self.message = message
        self.status = status
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Network failures and server errors may succeed on retry."""
        return self.status is None or self.status >= 500


def _should_retry(exc: BaseException) -> bool:
    if isinstance(exc, ApiError):
        return exc.retryable
    return isinstance(exc, httpx.TransportError)


def _log_retry(retry_state) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Request failed, retrying (attempt {retry_state.attempt_number})",
        extra={"error": str(exc), "error_type": type(exc).__name__},
    )


class ThreadedApiClient:
    """
    Async client for the Threaded HTTP API.

    Args:
        base_url: Server root, e.g. http://localhost:8000
        max_attempts: Attempts per call, including the first
        backoff_seconds: First retry delay; doubles on each retry
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
        sleep: Coroutine used between retries
    """

    def __init__(
        self,
        base_url: str,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None, **kwargs) -> "ThreadedApiClient":
        """Build a client from THREADED_CLIENT_* settings."""
        settings = settings or ClientSettings()
        return cls(
            base_url=settings.base_url,
            max_attempts=settings.max_attempts,
            backoff_seconds=settings.backoff_seconds,
            timeout=settings.timeout_seconds,
            **kwargs,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ThreadedApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        owner_token: str | None = None,
        **kwargs: Any,
    ) -> Any:
        headers = {"X-Owner-Token": owner_token} if owner_token else None
        response = await self._http.request(method, path, headers=headers, **kwargs)

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = "Request failed"
            if isinstance(data, dict) and data.get("error"):
                message = data["error"]
            raise ApiError(message, response.status_code)
        return data

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        retrying = AsyncRetrying(
            retry=retry_if_exception(_should_retry),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_seconds),
            before_sleep=_log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._send(method, path, **kwargs)
        except httpx.TransportError as e:
            raise ApiError(f"Network error: {type(e).__name__}") from e

    # Sessions

    async def create_session(self, markdown_content: str) -> CreateSessionResponse:
        data = await self._request("POST", "/api/sessions", json={"markdownContent": markdown_content})
        return CreateSessionResponse.model_validate(data)

    async def get_session(self, session_id: str) -> SessionResponse:
        data = await self._request("GET", f"/api/sessions/{session_id}")
        return SessionResponse.model_validate(data)

    async def delete_session(self, session_id: str, owner_token: str) -> None:
        await self._request("DELETE", f"/api/sessions/{session_id}", owner_token=owner_token)

    async def fork_session(self, session_id: str) -> ForkSessionResponse:
        data = await self._request("POST", f"/api/sessions/{session_id}/fork")
        return ForkSessionResponse.model_validate(data)

    # Threads and messages

    async def add_thread(
        self,
        session_id: str,
        owner_token: str,
        context: str,
        snippet: str,
        thread_type: str = "discussion",
    ) -> CreateThreadResponse:
        data = await self._request(
            "POST",
            f"/api/sessions/{session_id}/threads",
            owner_token=owner_token,
            json={"context": context, "snippet": snippet, "type": thread_type},
        )
        return CreateThreadResponse.model_validate(data)

    async def delete_thread(self, session_id: str, owner_token: str, thread_id: str) -> None:
        await self._request(
            "DELETE",
            f"/api/sessions/{session_id}/threads/{thread_id}",
            owner_token=owner_token,
        )

    async def add_message(
        self,
        session_id: str,
        owner_token: str,
        thread_id: str,
        role: str,
        text: str,
        parts: list[dict[str, Any]] | None = None,
    ) -> AddMessageResponse:
        body: dict[str, Any] = {"role": role, "text": text}
        if parts is not None:
            body["parts"] = parts
        data = await self._request(
            "POST",
            f"/api/sessions/{session_id}/threads/{thread_id}/messages",
            owner_token=owner_token,
            json=body,
        )
        return AddMessageResponse.model_validate(data)

    async def update_message(
        self,
        session_id: str,
        owner_token: str,
        thread_id: str,
        message_id: str,
        text: str,
    ) -> UpdateMessageResponse:
        data = await self._request(
            "PUT",
            f"/api/sessions/{session_id}/threads/{thread_id}/messages/{message_id}",
            owner_token=owner_token,
            json={"text": text},
        )
        return UpdateMessageResponse.model_validate(data)

    async def truncate_thread(
        self,
        session_id: str,
        owner_token: str,
        thread_id: str,
        after_message_id: str,
    ) -> None:
        await self._request(
            "DELETE",
            f"/api/sessions/{session_id}/threads/{thread_id}/messages",
            owner_token=owner_token,
            params={"after": after_message_id},
        )

    # Parsing

    async def parse_url(self, url: str) -> ParseResponse:
        data = await self._request("POST", "/api/parse", json={"url": url})
        return ParseResponse.model_validate(data)

    async def parse_file(self, filename: str, content: bytes) -> ParseResponse:
        data = await self._request("POST", "/api/parse", files={"file": (filename, content)})
        return ParseResponse.model_validate(data)
