"""Bearer-token lifecycle management for asyncio HTTP clients."""

from .auth_token.refresher import TokenRefresher  # noqa: F401
from .auth_token.types import TokenPair  # noqa: F401
from .client import Retoken, create_retoken  # noqa: F401
from .config import (  # noqa: F401
    CrossTabConfig,
    RefreshEndpoint,
    RetokenConfig,
    RetryConfig,
)
from .crosstab import CrossTabSync, LocalBroadcastChannel, create_cross_tab_sync  # noqa: F401
from .errors.internal import RefreshError, RequestError, RetokenError  # noqa: F401
from .http_client import AiohttpTransport, TransportResponse  # noqa: F401
from .jwt import is_expiring_soon, parse_expiration  # noqa: F401
from .logging_config import LoggerConfigurator  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "AiohttpTransport",
    "CrossTabConfig",
    "CrossTabSync",
    "LocalBroadcastChannel",
    "LoggerConfigurator",
    "RefreshEndpoint",
    "RefreshError",
    "RequestError",
    "Retoken",
    "RetokenConfig",
    "RetokenError",
    "RetryConfig",
    "TokenPair",
    "TokenRefresher",
    "TransportResponse",
    "create_cross_tab_sync",
    "create_retoken",
    "is_expiring_soon",
    "parse_expiration",
]
