"""
Tests for ChatBroadcaster.

Delivery is checked against the in-memory channel layer configured for
tests. Failure handling is checked with a stubbed layer.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.layers import get_channel_layer

from chat.broadcast import ChatBroadcaster
from chat.constants import ChatEvent
from core.exceptions import TransientBroadcastError


class TestGroupName:
    def test_group_name(self):
        assert ChatBroadcaster.group_name(42) == "chat-42"


class TestPublish:
    """Tests for ChatBroadcaster.publish and send."""

    def test_delivers_to_group_members(self):
        """
        A published event reaches every channel in the chat's group.

        Why it matters: ChatConsumer relies on the chat.event message shape
        to forward events to WebSocket clients.
        """

        async def scenario():
            layer = get_channel_layer()
            channel = await layer.new_channel()
            await layer.group_add(ChatBroadcaster.group_name(7), channel)

            delivered = await sync_to_async(ChatBroadcaster.publish)(
                7, ChatEvent.SEEN, {"reader": "bob", "count": 2}
            )
            message = await layer.receive(channel)
            await layer.group_discard(ChatBroadcaster.group_name(7), channel)
            return delivered, message

        delivered, message = async_to_sync(scenario)()

        assert delivered is True
        assert message == {
            "type": "chat.event",
            "event": ChatEvent.SEEN,
            "payload": {"reader": "bob", "count": 2},
        }

    def test_layer_error_is_swallowed(self, mocker):
        """
        publish reports a failing layer through its return value only.

        Why it matters: The write that triggered the event has already
        committed and must still be reported as successful.
        """
        layer = MagicMock()
        layer.group_send = AsyncMock(side_effect=ConnectionError("redis down"))
        mocker.patch("chat.broadcast.get_channel_layer", return_value=layer)

        assert ChatBroadcaster.publish(1, ChatEvent.TYPING, {"user": "ana", "typing": True}) is False

    def test_send_raises_on_layer_error(self, mocker):
        layer = MagicMock()
        layer.group_send = AsyncMock(side_effect=ConnectionError("redis down"))
        mocker.patch("chat.broadcast.get_channel_layer", return_value=layer)

        with pytest.raises(TransientBroadcastError):
            ChatBroadcaster.send(1, ChatEvent.TYPING, {"user": "ana", "typing": True})

    def test_slow_layer_times_out(self, mocker, settings):
        settings.CHAT_BROADCAST_TIMEOUT_SECONDS = 0.05

        async def hang(group, message):
            await asyncio.sleep(5)

        layer = MagicMock()
        layer.group_send = hang
        mocker.patch("chat.broadcast.get_channel_layer", return_value=layer)

        with pytest.raises(TransientBroadcastError, match="timed out"):
            ChatBroadcaster.send(1, ChatEvent.SEEN, {"reader": "bob", "count": 1})

    def test_missing_layer(self, mocker):
        mocker.patch("chat.broadcast.get_channel_layer", return_value=None)

        assert ChatBroadcaster.publish(1, ChatEvent.SEEN, {"reader": "bob", "count": 1}) is False
