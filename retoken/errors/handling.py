"""Error categorisation and structured error logging."""

from __future__ import annotations

import logging

import aiohttp

from ..logging_config import log_structured_error
from .internal import RefreshError, RequestError, RetokenError


def error_category(error: BaseException) -> str:
    """Map an exception to the category used in structured error logs."""
    if isinstance(error, RefreshError):
        return "refresh"
    if isinstance(error, RequestError):
        return "request"
    if isinstance(error, aiohttp.ClientError | OSError | TimeoutError):
        return "network"
    if isinstance(error, RetokenError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: BaseException,
    context: dict[str, object] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level (default: ERROR).
    """
    log_structured_error(
        error_type=error_category(error),
        message=f"{message}: {error}",
        exception=error,
        context=context,
        level=level,
    )
