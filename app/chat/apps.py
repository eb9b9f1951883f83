"""
Chat application configuration.

This app provides the chat system with:
- Direct (1:1) and group chats
- Text and voice messages with seen state and soft deletion
- Realtime events over Django Channels
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
