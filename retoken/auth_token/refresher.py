"""Token refresh coordination: deduplication, retry and completion handling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Collection, Sequence

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from ..config import RefreshEndpoint
from ..constants import APPLICATION_JSON, REFRESH_FAILURE_STATUSES
from ..errors.handling import log_error
from ..errors.internal import RefreshError
from ..http_client import HttpTransport
from ..logs.logger import logger
from .types import RefreshTokenGetter, TokenClearer, TokenPair, TokenSetter


def _retrieve_outcome(task: asyncio.Task[TokenPair]) -> None:
    # Marks the failure as observed when every caller was cancelled;
    # it has already been logged by the task itself.
    if not task.cancelled():
        task.exception()


class TokenRefresher:
    """Performs refresh exchanges with at most one in flight at a time.

    Concurrent ``refresh()`` callers share a single task. The task clears the
    in-flight slot itself once the exchange has settled, so a caller arriving
    after settlement starts a new exchange instead of observing a stale one.
    """

    def __init__(
        self,
        endpoint: RefreshEndpoint,
        transport: HttpTransport,
        *,
        set_tokens: TokenSetter,
        clear_tokens: TokenClearer,
        get_refresh_token: RefreshTokenGetter | None = None,
        retry_delays: Sequence[float] = (),
        skip_on_client_error: bool = True,
        refresh_failure_statuses: Collection[int] = REFRESH_FAILURE_STATUSES,
        on_auth_failure: Callable[[], None] | None = None,
        on_token_refresh: Callable[[TokenPair], None] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the refresher.

        Args:
            endpoint: Refresh request description.
            transport: Request-issuing capability.
            set_tokens: Persists a freshly obtained TokenPair.
            clear_tokens: Wipes stored tokens on terminal failure.
            get_refresh_token: Reads the refresh token; None selects cookie mode.
            retry_delays: Milliseconds to wait before each retry.
            skip_on_client_error: Do not retry 4xx refresh responses.
            refresh_failure_statuses: Refresh statuses that are terminal.
            on_auth_failure: Called after tokens are cleared on terminal failure.
            on_token_refresh: Called after new tokens are persisted.
            sleep: Awaitable sleep in seconds used between retries.
        """
        self.endpoint = endpoint
        self._transport = transport
        self._set_tokens = set_tokens
        self._clear_tokens = clear_tokens
        self._get_refresh_token = get_refresh_token
        self._retry_delays = tuple(retry_delays)
        self._skip_on_client_error = skip_on_client_error
        self._refresh_failure_statuses = frozenset(refresh_failure_statuses)
        self._on_auth_failure = on_auth_failure
        self._on_token_refresh = on_token_refresh
        self._sleep = sleep
        self._in_flight: asyncio.Task[TokenPair] | None = None

    @property
    def cookie_mode(self) -> bool:
        return self._get_refresh_token is None

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    async def refresh(self) -> TokenPair:
        """Refresh the token pair, joining an in-flight refresh if one exists.

        Returns:
            The new TokenPair.

        Raises:
            RefreshError: If no refresh token is available (status 0) or the
                refresh endpoint answered with a terminal status.
            Exception: Transport or parsing errors of the last attempt,
                unchanged, once retries are exhausted.
        """
        if self._in_flight is not None:
            logger.log_event("refresh", "joined", level=logging.DEBUG)
            return await asyncio.shield(self._in_flight)

        refresh_token: str | None = None
        if self._get_refresh_token is not None:
            refresh_token = self._get_refresh_token()
            if not refresh_token:
                logger.log_event("refresh", "no_refresh_token", level=logging.WARNING)
                self._handle_auth_failure()
                raise RefreshError("No refresh token available", 0)

        logger.log_event(
            "refresh", "start", mode="cookie" if self.cookie_mode else "token"
        )
        # Check-and-set happens without an intervening await.
        task = asyncio.create_task(self._run(refresh_token))
        task.add_done_callback(_retrieve_outcome)
        self._in_flight = task
        return await asyncio.shield(task)

    async def _run(self, refresh_token: str | None) -> TokenPair:
        attempts = 0

        async def attempt_exchange() -> TokenPair:
            nonlocal attempts
            attempts += 1
            return await self._exchange(refresh_token)

        try:
            try:
                tokens = await self._build_retrying()(attempt_exchange)
                self._set_tokens(tokens)
                if self._on_token_refresh is not None:
                    self._on_token_refresh(tokens)
            except Exception as e:
                self._log_failure(e, attempts)
                self._handle_auth_failure()
                raise
            logger.log_event("refresh", "success", attempts=attempts)
            return tokens
        finally:
            self._in_flight = None

    def _build_retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(len(self._retry_delays) + 1),
            wait=self._wait_for_attempt,
            retry=retry_if_exception(self._is_retriable),
            before_sleep=self._before_sleep,
            sleep=self._sleep,
            reraise=True,
        )

    def _delay_seconds(self, attempt_number: int) -> float:
        # Tenacity computes the wait before checking the stop condition, so
        # the final attempt asks for a delay past the end of the sequence.
        index = attempt_number - 1
        if index >= len(self._retry_delays):
            return 0.0
        return self._retry_delays[index] / 1000

    def _wait_for_attempt(self, retry_state: RetryCallState) -> float:
        return self._delay_seconds(retry_state.attempt_number)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.log_event(
            "refresh",
            "retry",
            level=logging.WARNING,
            attempt=retry_state.attempt_number,
            max_attempts=len(self._retry_delays) + 1,
            wait_time=round(self._delay_seconds(retry_state.attempt_number), 3),
            error=str(error),
            error_type=type(error).__name__,
        )

    def _is_retriable(self, exc: BaseException) -> bool:
        if not isinstance(exc, Exception):
            return False
        if not isinstance(exc, RefreshError):
            # Transport and decoding failures are treated as transient.
            return True
        if exc.status in self._refresh_failure_statuses:
            return False
        if self._skip_on_client_error and 400 <= exc.status < 500:
            return False
        return True

    async def _exchange(self, refresh_token: str | None) -> TokenPair:
        endpoint = self.endpoint
        headers = {"Content-Type": APPLICATION_JSON, **endpoint.headers}
        body = endpoint.build_body(refresh_token) if refresh_token else None
        response = await self._transport(
            endpoint.url,
            method=endpoint.method,
            headers=headers,
            body=body,
            credentials=endpoint.credentials,
        )
        if not 200 <= response.status < 300:
            raise RefreshError(f"Refresh failed: {response.status}", response.status)
        data = await response.json()
        return endpoint.parse_response(data)

    def _log_failure(self, error: Exception, attempts: int) -> None:
        if isinstance(error, RefreshError):
            logger.log_event(
                "refresh",
                "give_up",
                level=logging.WARNING,
                attempts=attempts,
                status=error.status,
            )
            return
        log_error(
            "Token refresh failed",
            error,
            context={"attempts": attempts, "endpoint": self.endpoint.url},
            level=logging.WARNING,
        )

    def _handle_auth_failure(self) -> None:
        self._clear_tokens()
        if self._on_auth_failure is not None:
            self._on_auth_failure()
