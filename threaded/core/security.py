"""
Owner token comparison.

Dependencies: hmac (stdlib)
System role: Constant-time secret comparison for the auth guard
"""

import hmac

# Compared against when the session does not exist, so a missing session
# costs the same work as a wrong token.
_DUMMY_TOKEN = "0" * 32


def tokens_match(stored: str | None, presented: str | None) -> bool:
    """
    Compare a stored owner token with a presented one in constant time.

    hmac.compare_digest touches every byte regardless of where the first
    mismatch is, and returns False for unequal lengths without looking at
    content. Empty or missing values never match.

    Args:
        stored: Token persisted with the session (None if no session)
        presented: Token supplied by the caller

    Returns:
        bool: True only for an exact match
    """
    expected = (stored or _DUMMY_TOKEN).encode("utf-8")
    candidate = (presented or "").encode("utf-8")
    matched = hmac.compare_digest(expected, candidate)
    return matched and bool(stored) and bool(presented)
