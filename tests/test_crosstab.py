"""Tests for cross-instance logout synchronization."""

import logging
from unittest.mock import Mock

import pytest

from retoken.crosstab import CrossTabSync, LocalBroadcastChannel, create_cross_tab_sync


def test_create_without_factory_returns_none():
    assert create_cross_tab_sync("chan", Mock(), transport_factory=None) is None


def test_logout_message_reaches_other_instances():
    received_a = Mock()
    received_b = Mock()
    sync_a = create_cross_tab_sync("chan", received_a)
    create_cross_tab_sync("chan", received_b)

    sync_a.broadcast_logout()

    received_b.assert_called_once_with()
    received_a.assert_not_called()


def test_other_channel_names_are_isolated():
    received = Mock()
    sync_a = create_cross_tab_sync("chan-a", Mock())
    create_cross_tab_sync("chan-b", received)

    sync_a.broadcast_logout()

    received.assert_not_called()


@pytest.mark.parametrize(
    "message",
    [None, "LOGOUT", 42, {"type": "LOGIN"}, {"kind": "LOGOUT"}, {}],
)
def test_unrecognized_messages_are_ignored(message):
    received = Mock()
    create_cross_tab_sync("chan", received)
    sender = LocalBroadcastChannel("chan")

    sender.publish(message)

    received.assert_not_called()


def test_sync_accepts_injected_transport():
    transport = Mock()
    received = Mock()
    sync = CrossTabSync("chan", transport, received)

    handler = transport.subscribe.call_args.args[0]
    handler({"type": "LOGOUT"})
    received.assert_called_once_with()

    sync.broadcast_logout()
    transport.publish.assert_called_once_with({"type": "LOGOUT"})

    sync.destroy()
    transport.close.assert_called_once_with()


def test_factory_receives_channel_name():
    factory = Mock()
    create_cross_tab_sync("my-channel", Mock(), transport_factory=factory)
    factory.assert_called_once_with("my-channel")


def test_destroy_stops_delivery_and_closes_channel():
    received = Mock()
    sync_a = create_cross_tab_sync("chan", Mock())
    sync_b = create_cross_tab_sync("chan", received)

    sync_b.destroy()
    sync_a.broadcast_logout()

    received.assert_not_called()
    assert len(LocalBroadcastChannel._registry["chan"]) == 1


def test_publish_after_close_raises():
    channel = LocalBroadcastChannel("chan")
    channel.close()
    assert "chan" not in LocalBroadcastChannel._registry
    with pytest.raises(RuntimeError):
        channel.publish({"type": "LOGOUT"})


def test_failing_subscriber_is_isolated_from_publisher(caplog):
    received = Mock()
    failing = create_cross_tab_sync("chan", Mock(side_effect=ValueError("listener broke")))
    create_cross_tab_sync("chan", received)
    sender = create_cross_tab_sync("chan", Mock())

    with caplog.at_level(logging.WARNING, logger="retoken"):
        sender.broadcast_logout()

    received.assert_called_once_with()
    assert failing is not None
    assert "listener broke" in caplog.text
    assert "chan" in caplog.text
