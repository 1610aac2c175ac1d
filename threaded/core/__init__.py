"""
Core domain module.

Contains the exception hierarchy and the pure, storage-independent pieces
of the session store: identifier generation, secret comparison, input
validation and markdown normalization.
"""

from threaded.core.exceptions import (
    ThreadedException,
    ValidationError,
    ForbiddenError,
    NotFoundError,
    SessionNotFoundError,
    ThreadNotFoundError,
    MessageNotFoundError,
    UpstreamExtractionError,
)

__all__ = [
    "ThreadedException",
    "ValidationError",
    "ForbiddenError",
    "NotFoundError",
    "SessionNotFoundError",
    "ThreadNotFoundError",
    "MessageNotFoundError",
    "UpstreamExtractionError",
]
