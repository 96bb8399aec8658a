r"""
Logging configuration for retoken.

The library never installs handlers on import; embedding applications that
want retoken's colored console output call ``LoggerConfigurator().configure()``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import colorlog

LOGGER_NAME = "retoken"


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context.

    Args:
        error_type: Category of the error (e.g., 'refresh', 'network')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"

    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {exception}"

    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.getLogger(LOGGER_NAME).log(level, structured_message)


class LoggerConfigurator:
    """Handles logging configuration cleanly using colorlog.

    Supports environment variable configuration for log levels.
    """

    def __init__(self, config: dict[str, Any] | None = None):
        """Initialize the configurator.

        Args:
            config: Optional overrides. Recognised keys: ``level`` (int) and
                ``stream`` (text stream, default stderr).
        """
        self.config = config or {}

    def build_formatter(self) -> colorlog.ColoredFormatter:
        return colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={
                "message": {
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                }
            },
            reset=True,
        )

    def configure(self) -> logging.Logger:
        """Configure the retoken logger with colored output.

        Uses environment variables:
        - DEBUG: Set to 'true', '1', or 'yes' for DEBUG level, otherwise INFO

        Returns:
            The configured retoken logger.
        """
        debug_env = os.environ.get("DEBUG", "").lower()
        log_level = self.config.get(
            "level", logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO
        )

        handler = logging.StreamHandler(self.config.get("stream", sys.stderr))
        handler.setFormatter(self.build_formatter())

        logger = logging.getLogger(LOGGER_NAME)
        # Reconfiguring replaces the previous handler instead of stacking another.
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(log_level)
        return logger
