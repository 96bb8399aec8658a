"""JWT expiration helpers.

Only the ``exp`` claim is read. Signatures are not verified; these helpers
decide *when* to refresh, never whether a token is trustworthy.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
import time


def _b64url_decode(segment: str) -> bytes:
    padding = -len(segment) % 4
    return base64.urlsafe_b64decode(segment + "=" * padding)


def parse_expiration(token: str) -> int | float | None:
    """Parse the expiration timestamp (in milliseconds) from a JWT token.

    Args:
        token: JWT token string.

    Returns:
        Expiration timestamp in milliseconds, or None if the token is
        malformed or carries no numeric ``exp`` claim.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    try:
        payload = json.loads(_b64url_decode(parts[1]))
    except (binascii.Error, ValueError):
        # ValueError covers JSON and UTF-8 decoding failures.
        return None
    if not isinstance(payload, dict):
        return None
    exp = payload.get("exp")
    # bool is an int subclass but never a timestamp
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        return None
    if isinstance(exp, float) and not math.isfinite(exp):
        return None
    return exp * 1000


def is_expiring_soon(token: str | None, leeway_seconds: float) -> bool:
    """Check if a JWT token is expiring within the leeway period.

    Args:
        token: JWT token string, or None.
        leeway_seconds: Seconds before expiration to consider "expiring soon".

    Returns:
        True if token is absent, invalid, or expiring soon.
    """
    if not token:
        return True

    exp = parse_expiration(token)
    if exp is None:
        return True

    return time.time() * 1000 >= exp - leeway_seconds * 1000
