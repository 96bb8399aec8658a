"""
Default configuration values for retoken

Each constant can be overridden by setting an environment variable with the same name.
"""

import logging
import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, logs a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            logging.warning(
                f"Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            logging.warning(
                f"Invalid float value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_int_list(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    """Retrieve a comma separated list of integers from an environment variable.

    An empty value yields an empty tuple (no retries for delay sequences).

    Args:
        name: The name of the environment variable to read.
        default: The default tuple to return if parsing fails.

    Returns:
        The parsed tuple, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return tuple(int(part) for part in value.split(",") if part.strip())
    except ValueError:
        logging.warning(
            f"Invalid integer list for {name}='{value}', using default {default}"
        )
        return default


# Token expiry
RETOKEN_EXPIRATION_LEEWAY_SECONDS = _get_env_float(
    "RETOKEN_EXPIRATION_LEEWAY_SECONDS", 60
)  # Treat access token as stale this many seconds before exp

# Refresh retry/backoff
RETOKEN_RETRY_DELAYS_MS = _get_env_int_list(
    "RETOKEN_RETRY_DELAYS_MS", (3000, 6000, 12000)
)  # Waits between refresh attempts (one retry per entry)
RETOKEN_SKIP_ON_CLIENT_ERROR = (
    os.getenv("RETOKEN_SKIP_ON_CLIENT_ERROR", "true").lower() in ("true", "1", "yes")
)  # Do not retry refresh on 4xx responses

# Status classification
RETRY_STATUSES = frozenset({401})  # Original-request statuses that trigger refresh + retry
REFRESH_FAILURE_STATUSES = frozenset({401, 403})  # Refresh statuses meaning the refresh token is dead
EXPECTED_JSON_STATUSES = frozenset({200, 201})  # Default success set for request_json
HTTP_NO_CONTENT = 204

# Refresh endpoint defaults
REFRESH_METHOD = "POST"
REFRESH_CREDENTIALS = "same-origin"
APPLICATION_JSON = "application/json"

# Cross-tab
CROSS_TAB_CHANNEL_NAME = os.getenv(
    "RETOKEN_CROSS_TAB_CHANNEL_NAME", "retoken-auth"
)  # Library-wide default broadcast channel
LOGOUT_MESSAGE_TYPE = "LOGOUT"

# Network/HTTP
HTTP_REQUEST_TIMEOUT_SECONDS = _get_env_int(
    "HTTP_REQUEST_TIMEOUT_SECONDS", 30
)  # Total timeout applied by the default aiohttp transport
