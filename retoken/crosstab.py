"""Cross-instance logout synchronization.

A ``CrossTabSync`` wraps a publish/subscribe broadcast transport. The
transport is produced by a factory taking the channel name; when no factory
is available the sync is absent (``None``) and every cross-tab operation
becomes a no-op for the caller.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from .constants import LOGOUT_MESSAGE_TYPE
from .errors.handling import log_error
from .logs.logger import logger

MessageCallback = Callable[[Any], None]


class BroadcastTransport(Protocol):
    """Publish/subscribe channel shape expected by ``CrossTabSync``."""

    def publish(self, message: Any) -> None: ...

    def subscribe(self, callback: MessageCallback) -> None: ...

    def close(self) -> None: ...


BroadcastTransportFactory = Callable[[str], BroadcastTransport]


class LocalBroadcastChannel:
    """In-process named broadcast channel.

    Every open channel object sharing a name receives messages published by
    the others; the publishing object never receives its own message. A
    failing subscriber is logged and never reaches the publisher.
    """

    _registry: dict[str, list[LocalBroadcastChannel]] = defaultdict(list)

    def __init__(self, name: str) -> None:
        self.name = name
        self.closed = False
        self._callbacks: list[MessageCallback] = []
        self._registry[name].append(self)

    def publish(self, message: Any) -> None:
        if self.closed:
            raise RuntimeError(f"broadcast channel '{self.name}' is closed")
        for peer in list(self._registry.get(self.name, ())):
            if peer is not self:
                peer._deliver(message)

    def subscribe(self, callback: MessageCallback) -> None:
        self._callbacks.append(callback)

    def close(self) -> None:
        self.closed = True
        self._callbacks.clear()
        peers = self._registry.get(self.name)
        if peers and self in peers:
            peers.remove(self)
            if not peers:
                del self._registry[self.name]

    def _deliver(self, message: Any) -> None:
        for callback in list(self._callbacks):
            try:
                callback(message)
            except Exception as e:
                log_error(
                    "Broadcast subscriber failed",
                    e,
                    context={"channel": self.name},
                    level=logging.WARNING,
                )


class CrossTabSync:
    """Logout broadcaster/listener bound to one broadcast transport."""

    def __init__(
        self,
        channel_name: str,
        transport: BroadcastTransport,
        on_logout_received: Callable[[], None],
    ) -> None:
        self.channel_name = channel_name
        self._transport = transport
        self._on_logout_received = on_logout_received
        transport.subscribe(self._handle_message)

    def _handle_message(self, message: Any) -> None:
        if not isinstance(message, Mapping):
            return
        if message.get("type") != LOGOUT_MESSAGE_TYPE:
            return
        logger.log_event("crosstab", "logout_received", channel=self.channel_name)
        self._on_logout_received()

    def broadcast_logout(self) -> None:
        logger.log_event(
            "crosstab", "logout_broadcast", level=logging.DEBUG, channel=self.channel_name
        )
        self._transport.publish({"type": LOGOUT_MESSAGE_TYPE})

    def destroy(self) -> None:
        self._transport.close()
        logger.log_event(
            "crosstab", "destroyed", level=logging.DEBUG, channel=self.channel_name
        )


def create_cross_tab_sync(
    channel_name: str,
    on_logout_received: Callable[[], None],
    transport_factory: BroadcastTransportFactory | None = LocalBroadcastChannel,
) -> CrossTabSync | None:
    """Create a cross-tab synchronization instance.

    Args:
        channel_name: Name of the broadcast channel shared by all instances.
        on_logout_received: Called when another instance broadcasts logout.
        transport_factory: Builds the broadcast transport from the channel
            name. None means no broadcast primitive is available.

    Returns:
        CrossTabSync instance, or None when no transport is available.
    """
    if transport_factory is None:
        logger.log_event(
            "crosstab", "unavailable", level=logging.DEBUG, channel=channel_name
        )
        return None
    sync = CrossTabSync(channel_name, transport_factory(channel_name), on_logout_received)
    logger.log_event("crosstab", "enabled", level=logging.DEBUG, channel=channel_name)
    return sync


__all__ = [
    "BroadcastTransport",
    "BroadcastTransportFactory",
    "CrossTabSync",
    "LocalBroadcastChannel",
    "create_cross_tab_sync",
]
