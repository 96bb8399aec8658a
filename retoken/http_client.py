"""
Default aiohttp transport used when the embedder injects none
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp

from .constants import HTTP_REQUEST_TIMEOUT_SECONDS
from .logs.logger import logger


class HttpResponse(Protocol):
    """Response shape consumed by the refresher and the request wrappers."""

    status: int

    def json(self) -> Awaitable[Any]: ...


class HttpTransport(Protocol):
    """Request-issuing capability: ``await transport(url, method=..., ...)``."""

    def __call__(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        credentials: str | None = None,
        **kwargs: Any,
    ) -> Awaitable[HttpResponse]: ...


@dataclass
class TransportResponse:
    """Fully read HTTP response.

    Attributes:
        status: HTTP status code.
        headers: Response headers.
        body: Raw response body.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    async def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)

    async def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is empty or not valid JSON.
        """
        return json.loads(self.body)


@dataclass
class SessionConfig:
    """Configuration for HTTP sessions"""

    timeout_total: float = HTTP_REQUEST_TIMEOUT_SECONDS
    max_connections: int = 100
    max_connections_per_host: int = 10
    headers: dict[str, str] | None = None


class AiohttpTransport:
    """HTTP transport backed by lazily created aiohttp sessions.

    Two sessions may exist: the regular one carrying a cookie jar, and a
    cookie-less one used for ``credentials="omit"``. Sessions are recreated
    when closed or when used from a different event loop.
    """

    def __init__(self, config: SessionConfig | None = None):
        self.config = config or SessionConfig()
        self._sessions: dict[bool, aiohttp.ClientSession] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._lock: asyncio.Lock | None = None

    def _bind_loop(self, current_loop: asyncio.AbstractEventLoop) -> asyncio.Lock:
        # Runs without awaiting, so binding is atomic within a loop.
        if self._loop is not current_loop or self._lock is None:
            if self._loop is not None:
                logger.log_event("transport", "loop_changed", level=logging.DEBUG)
                self._discard_cross_loop_sessions()
            self._loop = current_loop
            self._lock = asyncio.Lock()
        return self._lock

    def _discard_cross_loop_sessions(self) -> None:
        """Force close sessions created on another event loop.

        Their connections cannot be awaited from here, so connectors are
        closed synchronously and detached from the sessions.
        """
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            connector = session.connector
            try:
                if connector is not None and not connector.closed:
                    connector._close()
            except RuntimeError as e:
                # Transports bound to an already closed loop refuse to close.
                logger.log_event(
                    "transport",
                    "force_close_failed",
                    level=logging.DEBUG,
                    error=str(e),
                )
            finally:
                session.detach()

    async def get_session(self, *, with_cookies: bool = True) -> aiohttp.ClientSession:
        """Get or create the HTTP session for the requested cookie mode"""
        async with self._bind_loop(asyncio.get_running_loop()):
            session = self._sessions.get(with_cookies)
            if session is None or session.closed:
                session = self._create_session(with_cookies)
                self._sessions[with_cookies] = session
            return session

    def _create_session(self, with_cookies: bool) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(
            limit=self.config.max_connections,
            limit_per_host=self.config.max_connections_per_host,
        )
        session = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=self.config.timeout_total),
            headers=self.config.headers or {},
            cookie_jar=None if with_cookies else aiohttp.DummyCookieJar(),
        )
        logger.log_event(
            "transport", "session_created", level=logging.DEBUG, cookies=with_cookies
        )
        return session

    async def __call__(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        credentials: str | None = None,
        **kwargs: Any,
    ) -> TransportResponse:
        """Issue a request and return the fully read response.

        ``str``/``bytes`` bodies are sent verbatim; any other non-None body is
        serialized as JSON. Extra keyword arguments go to aiohttp unchanged.
        Network errors propagate as raised by aiohttp.
        """
        session = await self.get_session(with_cookies=credentials != "omit")
        if body is not None:
            if isinstance(body, str | bytes | bytearray):
                kwargs["data"] = body
            else:
                kwargs["json"] = body
        async with session.request(
            method, url, headers=dict(headers or {}), **kwargs
        ) as resp:
            payload = await resp.read()
            logger.log_event(
                "transport",
                "response",
                level=logging.DEBUG,
                method=method,
                status=resp.status,
            )
            return TransportResponse(resp.status, dict(resp.headers), payload)

    async def close(self) -> None:
        """Close all sessions and release connections"""
        if self._loop is not None and self._loop is not asyncio.get_running_loop():
            self._discard_cross_loop_sessions()
            return
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            if not session.closed:
                await session.close()
                logger.log_event("transport", "session_closed", level=logging.DEBUG)


__all__ = [
    "AiohttpTransport",
    "HttpResponse",
    "HttpTransport",
    "SessionConfig",
    "TransportResponse",
]
