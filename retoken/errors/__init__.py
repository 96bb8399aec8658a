"""Error hierarchy and error logging helpers."""

from .handling import log_error  # noqa: F401
from .internal import RefreshError, RequestError, RetokenError  # noqa: F401

__all__ = ["RetokenError", "RefreshError", "RequestError", "log_error"]
