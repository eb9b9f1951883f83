"""
WebSocket consumers for the chat application.

This module implements the WebSocket side of the chat broadcast channel:
a client subscribes to one chat and receives every event published for it.

Consumers:
    ChatConsumer: Subscribes a WebSocket to a chat's channel group

Authentication:
    Users are authenticated via JWT token passed as query parameter.
    JWTAuthMiddleware attaches the user to self.scope["user"].

Channel Groups:
    Each chat has a channel group named "chat-{chat_id}". Services publish
    to it through ChatBroadcaster after their writes commit.

Message Types (from client):
    - typing: {"type": "typing", "typing": true}

Messages (to client):
    - {"event": "new-message" | "seen" | "typing" | "delete-message", "data": {...}}
    - {"event": "error", "data": {"message": str}}
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.contrib.auth.models import AnonymousUser

from chat.broadcast import ChatBroadcaster
from chat.constants import BROADCAST_CONFIG, WS_CLOSE_CODES, ChatEvent
from chat.models import Chat, Participant

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for one chat's realtime events.

    Handles:
        - Connection authentication and participant check
        - Joining/leaving the chat's channel group
        - Forwarding broadcast events to the client
        - Typing indicators sent over the socket

    Attributes:
        chat_id: Id of the connected chat
        group_name: Channel layer group name for the chat
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.chat_id: int | None = None
        self.group_name: str | None = None

    async def connect(self):
        """
        Handle WebSocket connection.

        Validates:
            1. User is authenticated
            2. Chat exists
            3. User is a participant in the chat

        On success, joins the channel group and accepts the connection.
        """
        self.chat_id = self.scope["url_route"]["kwargs"]["chat_id"]
        user = self.scope.get("user")

        if not user or isinstance(user, AnonymousUser):
            logger.warning(f"Rejected unauthenticated connection to chat {self.chat_id}")
            await self.close(code=WS_CLOSE_CODES.UNAUTHENTICATED)
            return

        if not await self._chat_exists():
            logger.warning(f"User {user.pk} tried to connect to non-existent chat {self.chat_id}")
            await self.close(code=WS_CLOSE_CODES.CHAT_NOT_FOUND)
            return

        if not await self._is_user_participant(user):
            logger.warning(f"User {user.pk} is not a participant in chat {self.chat_id}")
            await self.close(code=WS_CLOSE_CODES.NOT_PARTICIPANT)
            return

        self.group_name = ChatBroadcaster.group_name(self.chat_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)

        # Browsers drop the socket unless an offered subprotocol is echoed
        subprotocols = self.scope.get("subprotocols") or []
        await self.accept(subprotocol="jwt" if subprotocols[:1] == ["jwt"] else None)
        logger.info(f"User {user.pk} connected to chat {self.chat_id}")

    async def disconnect(self, close_code):
        """Leave the channel group if one was joined."""
        if self.group_name:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            user = self.scope.get("user")
            logger.info(f"User {getattr(user, 'pk', 'anonymous')} disconnected from chat {self.chat_id}")

    async def receive_json(self, content):
        """
        Handle incoming WebSocket messages.

        Expected message format:
            {"type": "typing", "typing": true}

        Sending, seen and delete go through the REST API so that they are
        persisted before being broadcast.
        """
        message_type = content.get("type") if isinstance(content, dict) else None

        if message_type == "typing":
            await self._handle_typing(content)
        else:
            await self.send_json(
                {
                    "event": "error",
                    "data": {"message": f"Unknown message type: {message_type}"},
                }
            )

    async def _handle_typing(self, content):
        """Relay a typing indicator to every subscriber of the chat."""
        user = self.scope["user"]
        await self.channel_layer.group_send(
            self.group_name,
            {
                "type": BROADCAST_CONFIG.HANDLER_TYPE,
                "event": ChatEvent.TYPING,
                "payload": {"user": user.pk, "typing": bool(content.get("typing", True))},
            },
        )

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Forwards the event to the WebSocket client unchanged.
        """
        await self.send_json(
            {
                "event": event["event"],
                "data": event["payload"],
            }
        )

    @database_sync_to_async
    def _chat_exists(self) -> bool:
        return Chat.objects.filter(pk=self.chat_id).exists()

    @database_sync_to_async
    def _is_user_participant(self, user) -> bool:
        return Participant.objects.filter(chat_id=self.chat_id, user=user).exists()
