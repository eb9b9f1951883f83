"""
Broadcasting of chat events over the channel layer.

Every chat has a channel group named "chat-{chat_id}". Services publish
state changes (new message, seen, typing, delete) to that group after the
corresponding write has committed; every ChatConsumer subscribed to the
chat forwards the event to its WebSocket.

Delivery is best-effort: a channel layer that is down or slow must never
fail or roll back the write that triggered the event. Publishing is
bounded by CHAT_BROADCAST_TIMEOUT_SECONDS and any failure is logged and
swallowed.

Related files:
    - consumers.py: ChatConsumer.chat_event receives what is published here
    - services.py: Callers (MessageService, TypingService)
    - constants.py: ChatEvent names, group prefix

Usage:
    from chat.broadcast import ChatBroadcaster
    from chat.constants import ChatEvent

    ChatBroadcaster.publish(chat.id, ChatEvent.SEEN, {"reader": "bob", "count": 2})
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

from chat.constants import BROADCAST_CONFIG
from core.exceptions import TransientBroadcastError

logger = logging.getLogger(__name__)


class ChatBroadcaster:
    """
    Publishes (chat_id, event, payload) to the chat's channel group.

    Methods:
        group_name: Channel group for a chat
        publish: Best-effort publish; returns whether the layer accepted it
        send: Publish that raises TransientBroadcastError on failure
    """

    @staticmethod
    def group_name(chat_id: int) -> str:
        """Channel group name for a chat, e.g. "chat-42"."""
        return f"{BROADCAST_CONFIG.GROUP_PREFIX}{chat_id}"

    @classmethod
    def send(cls, chat_id: int, event: str, payload: dict[str, Any]) -> None:
        """
        Publish an event, raising on failure.

        Raises:
            TransientBroadcastError: No channel layer configured, the layer
                raised, or the publish exceeded the timeout
        """
        channel_layer = get_channel_layer()
        if channel_layer is None:
            raise TransientBroadcastError("No channel layer configured")

        message = {
            "type": BROADCAST_CONFIG.HANDLER_TYPE,
            "event": event,
            "payload": payload,
        }
        timeout = settings.CHAT_BROADCAST_TIMEOUT_SECONDS

        async def _send():
            await asyncio.wait_for(
                channel_layer.group_send(cls.group_name(chat_id), message),
                timeout=timeout,
            )

        try:
            async_to_sync(_send)()
        except asyncio.TimeoutError as e:
            raise TransientBroadcastError(
                f"Broadcast of {event} to chat {chat_id} timed out after {timeout}s"
            ) from e
        except Exception as e:
            raise TransientBroadcastError(
                f"Broadcast of {event} to chat {chat_id} failed: {e}"
            ) from e

    @classmethod
    def publish(cls, chat_id: int, event: str, payload: dict[str, Any]) -> bool:
        """
        Publish an event without ever raising.

        The write that triggered the event has already committed; a failed
        publish is logged and reported through the return value only.

        Returns:
            True if the channel layer accepted the event, False otherwise
        """
        try:
            cls.send(chat_id, event, payload)
        except TransientBroadcastError as e:
            logger.warning(str(e), exc_info=True)
            return False

        logger.debug(f"Broadcast {event} to chat {chat_id}")
        return True
