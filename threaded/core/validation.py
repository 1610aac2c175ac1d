"""
Input validation helpers.

String fields are trimmed, must be non-empty, and are limited by the size
of their UTF-8 encoding. URLs submitted for parsing must be absolute
http(s) URLs that do not point at loopback, private or link-local hosts.

Dependencies: ipaddress, socket, urllib (stdlib), threaded.core.exceptions
System role: Reject bad input before any side effect
"""

import ipaddress
import socket
from typing import Any
from urllib.parse import urlparse

from threaded.core.exceptions import ValidationError

THREAD_TYPES = ("discussion", "comment")
MESSAGE_ROLES = ("user", "model")
ROLE_ALIASES = {"assistant": "model"}

_LOCAL_HOST_SUFFIXES = (".localhost", ".local", ".internal")


def validate_string(value: Any, max_bytes: int, field: str) -> str:
    """
    Validate and trim a required string field.

    Args:
        value: Raw value from the request body
        max_bytes: Maximum UTF-8 size of the trimmed value
        field: Field name used in the error message

    Returns:
        str: Trimmed value

    Raises:
        ValidationError: If not a string, empty after trimming, or too large
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)

    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty", field=field)

    if len(trimmed.encode("utf-8")) > max_bytes:
        raise ValidationError(
            f"{field} exceeds maximum length of {max_bytes} bytes",
            field=field,
        )
    return trimmed


def validate_role(value: Any) -> str:
    """
    Validate a message role, normalizing 'assistant' to 'model'.

    Raises:
        ValidationError: If the role is not user/model/assistant
    """
    role = ROLE_ALIASES.get(value, value) if isinstance(value, str) else value
    if role not in MESSAGE_ROLES:
        raise ValidationError("role must be 'user' or 'model'", field="role")
    return role


def validate_thread_type(value: Any) -> str:
    """Validate an optional thread type, defaulting to 'discussion'."""
    if value is None:
        return THREAD_TYPES[0]
    if value not in THREAD_TYPES:
        raise ValidationError("type must be 'discussion' or 'comment'", field="type")
    return value


def _is_private_host(host: str) -> bool:
    host = host.strip("[]").lower()
    if host == "localhost" or host.endswith(_LOCAL_HOST_SUFFIXES):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        # Shorthand IPv4 forms (2130706433, 0x7f.1, 127.1) as resolvers read them.
        try:
            address = ipaddress.IPv4Address(socket.inet_aton(host))
        except OSError:
            return False
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_unspecified
        or address.is_multicast
    )


def validate_public_url(value: Any) -> str:
    """
    Validate a URL submitted for parsing.

    Args:
        value: Raw URL from the request body

    Returns:
        str: The URL, unchanged (it is also the cache key)

    Raises:
        ValidationError: If missing, malformed, non-http(s), or private
    """
    if not value or not isinstance(value, str):
        raise ValidationError("URL is required", field="url")

    try:
        parsed = urlparse(value)
        hostname = parsed.hostname
    except ValueError:
        raise ValidationError("Invalid URL", field="url")

    if parsed.scheme not in ("http", "https") or not hostname:
        raise ValidationError("Invalid URL", field="url")

    if _is_private_host(hostname):
        raise ValidationError("URL must point to a public host", field="url")

    return value
