"""Authenticated request wrappers with proactive and reactive token refresh."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Collection, Mapping
from typing import Any, TypeVar

from pydantic import TypeAdapter

from .auth_token.refresher import TokenRefresher
from .auth_token.types import TokenPair
from .config import RetokenConfig
from .constants import EXPECTED_JSON_STATUSES, HTTP_NO_CONTENT
from .crosstab import CrossTabSync, create_cross_tab_sync
from .errors.internal import RequestError
from .http_client import AiohttpTransport, HttpResponse, HttpTransport
from .jwt import is_expiring_soon, parse_expiration
from .logs.logger import logger

T = TypeVar("T")


class Retoken:
    """Bearer-token aware HTTP client facade.

    Wraps a transport so that every request carries the current access
    token, refreshes ahead of expiry, and retries once after an auth failure.
    """

    def __init__(
        self,
        config: RetokenConfig,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            config: Validated configuration.
            sleep: Awaitable sleep used between refresh retries.
        """
        self.config = config
        self._owns_transport = config.transport is None
        self._transport: HttpTransport = config.transport or AiohttpTransport()

        self._cross_tab: CrossTabSync | None = None
        if config.cross_tab.enabled:
            self._cross_tab = create_cross_tab_sync(
                config.cross_tab.channel_name,
                self._on_logout_received,
                config.cross_tab.transport_factory,
            )

        self.refresher = TokenRefresher(
            config.refresh_endpoint,
            self._transport,
            set_tokens=config.set_tokens,
            clear_tokens=config.clear_tokens,
            get_refresh_token=config.get_refresh_token,
            retry_delays=config.retry.delays,
            skip_on_client_error=config.retry.skip_on_client_error,
            refresh_failure_statuses=config.refresh_failure_statuses,
            on_auth_failure=self._on_refresh_auth_failure,
            on_token_refresh=config.on_token_refresh,
            sleep=sleep,
        )

    async def __aenter__(self) -> Retoken:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    def _on_logout_received(self) -> None:
        self.config.clear_tokens()
        if self.config.on_auth_failure is not None:
            self.config.on_auth_failure()

    def _on_refresh_auth_failure(self) -> None:
        try:
            if self.config.on_auth_failure is not None:
                self.config.on_auth_failure()
        finally:
            if self._cross_tab is not None:
                self._cross_tab.broadcast_logout()

    def is_token_expiring_soon(self) -> bool:
        """Check whether the stored access token is absent, invalid or about to expire."""
        return is_expiring_soon(
            self.config.get_access_token(), self.config.expiration_leeway
        )

    @staticmethod
    def parse_expiration(token: str) -> int | float | None:
        return parse_expiration(token)

    async def refresh(self) -> TokenPair:
        """Manually refresh tokens; joins an in-flight refresh if one exists.

        Raises:
            RefreshError: On terminal refresh failure.
        """
        return await self.refresher.refresh()

    def _build_headers(self, custom: Mapping[str, str] | None) -> dict[str, str]:
        headers = dict(custom or {})
        token = self.config.get_access_token()
        if token:
            for key in [k for k in headers if k.lower() == "authorization"]:
                del headers[key]
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(
        self, url: str, headers: Mapping[str, str] | None, **options: Any
    ) -> HttpResponse:
        return await self._transport(url, headers=self._build_headers(headers), **options)

    async def request_with_auth(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        credentials: str | None = None,
        skip_proactive_refresh: bool = False,
        skip_retry: bool = False,
        **kwargs: Any,
    ) -> HttpResponse:
        """Send a request with the current bearer token.

        Refreshes first when the token is expiring soon (failures ignored),
        and on a ``retry_statuses`` response refreshes and resends once. If
        that refresh fails, the original response is returned.

        Args:
            url: Request target.
            method: HTTP method.
            headers: Extra headers; the Authorization header is managed here.
            body: Request body passed to the transport.
            credentials: Credentials mode passed to the transport.
            skip_proactive_refresh: Do not refresh ahead of expiry.
            skip_retry: Do not refresh and resend on ``retry_statuses``.
            **kwargs: Extra transport options.

        Returns:
            The transport response.
        """
        if not skip_proactive_refresh and self.is_token_expiring_soon():
            logger.log_event("request", "proactive_refresh", level=logging.DEBUG)
            try:
                await self.refresher.refresh()
            except Exception as e:  # noqa: BLE001
                # The token may still be accepted; let the server decide.
                logger.log_event(
                    "request",
                    "proactive_refresh_failed",
                    level=logging.WARNING,
                    error_type=type(e).__name__,
                )

        options = {"method": method, "body": body, "credentials": credentials, **kwargs}
        response = await self._send(url, headers, **options)

        if skip_retry or response.status not in self.config.retry_statuses:
            return response

        logger.log_event("request", "reactive_refresh", status=response.status)
        try:
            await self.refresher.refresh()
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "request",
                "reactive_refresh_failed",
                level=logging.WARNING,
                status=response.status,
                error_type=type(e).__name__,
            )
            return response

        retried = await self._send(url, headers, **options)
        logger.log_event(
            "request", "retried", level=logging.DEBUG, status=retried.status
        )
        return retried

    async def request_json(
        self,
        url: str,
        *,
        expected_statuses: Collection[int] | None = None,
        model: type[T] | None = None,
        **options: Any,
    ) -> T | Any:
        """Send an authenticated request and decode the JSON response.

        Args:
            url: Request target.
            expected_statuses: Statuses treated as success (default 200, 201).
            model: Optional type to validate the decoded body against.
            **options: Forwarded to ``request_with_auth``.

        Returns:
            The decoded (and validated, if ``model`` is given) body, or None
            for 204 No Content.

        Raises:
            RequestError: If the status is not expected.
            pydantic.ValidationError: If the body does not match ``model``.
        """
        expected = (
            EXPECTED_JSON_STATUSES
            if expected_statuses is None
            else frozenset(expected_statuses)
        )
        response = await self.request_with_auth(url, **options)

        if response.status == HTTP_NO_CONTENT:
            return None

        if response.status not in expected:
            error_body: Any = None
            try:
                error_body = await response.json()
            except Exception:  # noqa: BLE001
                pass  # body is not JSON
            raise RequestError(
                f"Request failed with status {response.status}",
                response.status,
                error_body,
            )

        data = await response.json()
        if model is None:
            return data
        return TypeAdapter(model).validate_python(data)

    def broadcast_logout(self) -> None:
        """Tell other instances on the same channel to log out (no-op without cross-tab)."""
        if self._cross_tab is not None:
            self._cross_tab.broadcast_logout()

    def destroy(self) -> None:
        """Release the cross-tab channel."""
        if self._cross_tab is not None:
            self._cross_tab.destroy()
            self._cross_tab = None

    async def aclose(self) -> None:
        """Destroy and close the default transport if this client created it."""
        self.destroy()
        if self._owns_transport and isinstance(self._transport, AiohttpTransport):
            await self._transport.close()


def create_retoken(config: RetokenConfig | None = None, **kwargs: Any) -> Retoken:
    """Create a configured client.

    Args:
        config: A RetokenConfig; when omitted, one is built from ``kwargs``.
        **kwargs: RetokenConfig fields, used only when ``config`` is omitted.

    Returns:
        Retoken instance.

    Raises:
        TypeError: If both ``config`` and keyword fields are given.
        pydantic.ValidationError: If the configuration is invalid.
    """
    if config is not None and kwargs:
        raise TypeError("pass either a RetokenConfig or keyword fields, not both")
    if config is None:
        config = RetokenConfig(**kwargs)
    return Retoken(config)


__all__ = ["Retoken", "create_retoken"]
