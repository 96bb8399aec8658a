"""Shared types for the auth_token package."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TokenPair:
    """Access/refresh token pair produced by a successful refresh exchange.

    Attributes:
        access_token: Short-lived bearer credential.
        refresh_token: Longer-lived credential exchanged for new access tokens.
    """

    access_token: str
    refresh_token: str

    def __repr__(self) -> str:
        # Never leak credentials through logs or tracebacks.
        return "TokenPair(access_token='***', refresh_token='***')"


TokenGetter = Callable[[], str | None]
RefreshTokenGetter = Callable[[], str | None]
TokenSetter = Callable[[TokenPair], None]
TokenClearer = Callable[[], None]
