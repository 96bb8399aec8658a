"""Centralized error hierarchy.

Classes:
  RetokenError  – Base for all library errors.
  RefreshError  – Terminal failure of the token refresh exchange.
  RequestError  – Unexpected status returned to the typed JSON request path.

Transport exceptions (aiohttp, OSError, ...) are never wrapped into these;
they propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class RetokenError(Exception):
    """Base class for all retoken errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class RefreshError(RetokenError):
    """Raised when the refresh exchange fails terminally.

    The status is the HTTP status of the last refresh response, or 0 when
    no refresh token was available and no request was attempted.

    Args:
        message: Descriptive error message.
        status: HTTP-like status code.
    """

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message, data={"status": status})
        self.status = status


class RequestError(RetokenError):
    """Raised by the JSON request path when the final status is unexpected.

    Args:
        message: Descriptive error message.
        status: HTTP status code of the final response.
        body: Best-effort decoded JSON body, or None if it could not be decoded.
    """

    def __init__(self, message: str, status: int, body: Any = None) -> None:
        super().__init__(message, data={"status": status})
        self.status = status
        self.body = body


__all__ = [
    "RetokenError",
    "RefreshError",
    "RequestError",
]
