"""Token refresh coordination.

``refresher`` is not re-exported here because it depends on ``retoken.config``,
which itself imports ``types`` from this package.
"""

from .types import (  # noqa: F401
    RefreshTokenGetter,
    TokenClearer,
    TokenGetter,
    TokenPair,
    TokenSetter,
)

__all__ = ["TokenPair", "TokenGetter", "RefreshTokenGetter", "TokenSetter", "TokenClearer"]
