"""
Fixtures for token-related data.
"""

import base64
import json
import time
from typing import Any

from retoken.auth_token.types import TokenPair

# Refresh endpoint answer used by most scenarios
REFRESH_SUCCESS = {
    "access_token": "new_access_token_12345",
    "refresh_token": "new_refresh_token_67890",
}

REFRESH_URL = "https://auth.example.com/token/refresh"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def make_token(payload: Any) -> str:
    """Build an unsigned JWT-shaped token around ``payload``."""
    header = _b64url(json.dumps({"alg": "HS256", "typ": "JWT"}).encode())
    body = _b64url(json.dumps(payload).encode())
    return f"{header}.{body}.signature"


def make_token_with_offset(seconds: float) -> str:
    """Token whose ``exp`` lies ``seconds`` from now (negative for expired)."""
    return make_token({"sub": "user-1", "exp": int(time.time() + seconds)})


def parse_token_pair(data: Any) -> TokenPair:
    return TokenPair(data["access_token"], data["refresh_token"])


class TokenStore:
    """In-memory token storage exposing the store capabilities as methods."""

    def __init__(self, access_token: str | None = None, refresh_token: str | None = None):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.set_calls: list[TokenPair] = []
        self.clear_calls = 0

    def get_access_token(self) -> str | None:
        return self.access_token

    def get_refresh_token(self) -> str | None:
        return self.refresh_token

    def set_tokens(self, tokens: TokenPair) -> None:
        self.set_calls.append(tokens)
        self.access_token = tokens.access_token
        self.refresh_token = tokens.refresh_token

    def clear_tokens(self) -> None:
        self.clear_calls += 1
        self.access_token = None
        self.refresh_token = None
