"""Configuration models.

All models are frozen pydantic models; defaults come from ``retoken.constants``
and can therefore be shifted through environment variables.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .auth_token.types import TokenPair
from .constants import (
    CROSS_TAB_CHANNEL_NAME,
    REFRESH_CREDENTIALS,
    REFRESH_FAILURE_STATUSES,
    REFRESH_METHOD,
    RETOKEN_EXPIRATION_LEEWAY_SECONDS,
    RETOKEN_RETRY_DELAYS_MS,
    RETOKEN_SKIP_ON_CLIENT_ERROR,
    RETRY_STATUSES,
)
from .crosstab import LocalBroadcastChannel


def default_build_body(refresh_token: str) -> str:
    """Default refresh request body: ``{"refresh_token": "<token>"}``."""
    return json.dumps({"refresh_token": refresh_token})


def _validate_status_codes(codes: frozenset[int]) -> frozenset[int]:
    invalid = sorted(c for c in codes if not 100 <= c <= 599)
    if invalid:
        raise ValueError(f"invalid HTTP status codes: {invalid}")
    return codes


class RefreshEndpoint(BaseModel):
    """Describes the refresh request.

    Attributes:
        url: Full URL of the refresh endpoint.
        method: HTTP method for the refresh request.
        credentials: Credentials mode; ``include`` for cookie mode.
        headers: Extra headers merged over the JSON content type.
        build_body: Builds the request body from the refresh token. Only
            used when a refresh token getter is configured.
        parse_response: Maps the decoded JSON response to a TokenPair.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1)
    method: Literal["POST", "PUT"] = REFRESH_METHOD
    credentials: Literal["omit", "same-origin", "include"] = REFRESH_CREDENTIALS
    headers: dict[str, str] = Field(default_factory=dict)
    build_body: Callable[[str], Any] = default_build_body
    parse_response: Callable[[Any], TokenPair]

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class RetryConfig(BaseModel):
    """Retry behaviour of the refresh exchange.

    Attributes:
        delays: Milliseconds to wait before each retry; one retry per entry.
        skip_on_client_error: Give up immediately on 4xx refresh responses.
    """

    model_config = ConfigDict(frozen=True)

    delays: tuple[float, ...] = RETOKEN_RETRY_DELAYS_MS
    skip_on_client_error: bool = RETOKEN_SKIP_ON_CLIENT_ERROR

    @field_validator("delays")
    @classmethod
    def validate_delays(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        if any(d < 0 for d in v):
            raise ValueError("retry delays must be non-negative")
        return v


class CrossTabConfig(BaseModel):
    """Cross-instance logout synchronization.

    Attributes:
        enabled: Whether to broadcast and listen for logout.
        channel_name: Broadcast channel shared by cooperating instances.
        transport_factory: Builds the broadcast transport from the channel
            name; None disables the feature even when enabled.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    channel_name: str = CROSS_TAB_CHANNEL_NAME
    transport_factory: Callable[[str], Any] | None = LocalBroadcastChannel


class RetokenConfig(BaseModel):
    """Top-level configuration for ``Retoken``.

    Omitting ``get_refresh_token`` selects cookie mode: the refresh request
    carries no body and relies on the credentials mode.
    """

    model_config = ConfigDict(frozen=True)

    refresh_endpoint: RefreshEndpoint
    get_access_token: Callable[[], str | None]
    get_refresh_token: Callable[[], str | None] | None = None
    set_tokens: Callable[[TokenPair], None]
    clear_tokens: Callable[[], None]
    expiration_leeway: float = Field(default=RETOKEN_EXPIRATION_LEEWAY_SECONDS, ge=0)
    retry_statuses: frozenset[int] = RETRY_STATUSES
    refresh_failure_statuses: frozenset[int] = REFRESH_FAILURE_STATUSES
    retry: RetryConfig = Field(default_factory=RetryConfig)
    cross_tab: CrossTabConfig = Field(default_factory=CrossTabConfig)
    on_auth_failure: Callable[[], None] | None = None
    on_token_refresh: Callable[[TokenPair], None] | None = None
    transport: Callable[..., Awaitable[Any]] | None = None

    @field_validator("retry_statuses", "refresh_failure_statuses")
    @classmethod
    def validate_statuses(cls, v: frozenset[int]) -> frozenset[int]:
        return _validate_status_codes(v)

    @property
    def cookie_mode(self) -> bool:
        return self.get_refresh_token is None


__all__ = [
    "CrossTabConfig",
    "RefreshEndpoint",
    "RetokenConfig",
    "RetryConfig",
    "default_build_body",
]
