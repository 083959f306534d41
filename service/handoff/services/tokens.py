"""
Handoff token generation.

Tokens travel as the Telegram deep-link start parameter, so they must stay
within [A-Za-z0-9_-] and 64 characters.
"""

import secrets

from handoff.errors import EntropyUnavailable

# 9 bytes -> 12 URL-safe characters, 72 bits of entropy
TOKEN_BYTES = 9
MIN_TOKEN_BYTES = 6


def generate_token(nbytes: int = TOKEN_BYTES) -> str:
    """Return a fresh URL-safe token drawn from the OS random source."""
    if nbytes < MIN_TOKEN_BYTES:
        raise ValueError(f"Token needs at least {MIN_TOKEN_BYTES} bytes, got {nbytes}")

    try:
        return secrets.token_urlsafe(nbytes)
    except (NotImplementedError, OSError) as e:
        raise EntropyUnavailable(f"Random source unavailable: {e}") from e
