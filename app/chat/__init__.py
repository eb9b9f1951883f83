"""
Chat app for real-time messaging.

This app handles:
- Chats (direct and group)
- Message sending, history, seen state and deletion
- WebSocket real-time updates
- Typing indicators

Related apps:
    - authentication: User model for participants

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.
    See broadcast.py for how services publish events.

Usage:
    from chat.services import ChatService, MessageService

    chat = ChatService.get_or_create_direct_chat("ana", "bob").data
    message = MessageService.send_message(chat.id, sender="ana", text="Hello!").data
"""
