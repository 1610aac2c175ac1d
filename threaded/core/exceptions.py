"""
Exception hierarchy for the Threaded session store.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.
Each class carries the HTTP status it is surfaced with.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ThreadedException(Exception):
    """Base exception for all Threaded application errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(ThreadedException):
    """Raised when input validation fails. Never retried."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ForbiddenError(ThreadedException):
    """
    Raised when an owner token is missing or does not match.

    The message is always the same so the response does not reveal whether
    the session exists or the token was wrong.
    """

    status_code = 403

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__("Forbidden", details)


class NotFoundError(ThreadedException):
    """Base class for missing resources."""

    status_code = 404


class SessionNotFoundError(NotFoundError):
    """Raised when a session cannot be found."""

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize session not found error.

        Args:
            session_id: ID of the missing session
            details: Additional context
        """
        details = details or {}
        details["session_id"] = session_id
        super().__init__("Session not found", details)


class ThreadNotFoundError(NotFoundError):
    """Raised when a thread does not exist or belongs to another session."""

    def __init__(self, thread_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["thread_id"] = thread_id
        super().__init__("Thread not found", details)


class MessageNotFoundError(NotFoundError):
    """Raised when a message does not exist or belongs to another thread."""

    def __init__(self, message_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["message_id"] = message_id
        super().__init__("Message not found", details)


class UpstreamExtractionError(ThreadedException):
    """
    Raised when a document-extraction backend fails or returns nothing.

    The message is generic and safe to return to callers; backend specifics
    go into details for logging only.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize upstream extraction error.

        Args:
            message: Public error message
            backend: Extraction backend that failed (datalab, jina)
            details: Additional context
        """
        details = details or {}
        if backend:
            details["backend"] = backend
        super().__init__(message, details)
