"""
Identifier and secret generation.

Nanoid-compatible ids drawn from a 64-symbol URL-safe alphabet using the
operating system CSPRNG. Session ids are shareable; owner tokens are
secrets and use a longer size.

Dependencies: secrets (stdlib)
System role: Unguessable identifiers for sessions, threads and messages
"""

import secrets

URL_ALPHABET = "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"

ID_SIZE = 21
OWNER_TOKEN_SIZE = 32


def nanoid(size: int = ID_SIZE) -> str:
    """
    Generate a random URL-safe identifier.

    Each byte is masked to 6 bits, which maps uniformly onto the
    64-character alphabet.

    Args:
        size: Number of characters

    Returns:
        str: Random identifier
    """
    return "".join(URL_ALPHABET[byte & 63] for byte in secrets.token_bytes(size))


def new_id() -> str:
    """Identifier for sessions, threads and messages (21 chars, ~126 bits)."""
    return nanoid(ID_SIZE)


def new_owner_token() -> str:
    """Owner secret (32 chars, ~192 bits), independent of the session id."""
    return nanoid(OWNER_TOKEN_SIZE)
