"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message operations (content limits, voice clips, previews)
- Broadcast events and channel group naming
- WebSocket close codes

Limits that operators tune per deployment come from Django settings
(CHAT_MAX_MESSAGE_LENGTH, CHAT_MAX_VOICE_BYTES, CHAT_BROADCAST_TIMEOUT_SECONDS).
Import example:
    from chat.constants import MESSAGE_CONFIG, ChatEvent
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Preview stored on Chat.last_message
    PREVIEW_MAX_LENGTH: Final[int] = 255
    VOICE_PREVIEW: Final[str] = "[Voice message]"

    # Placeholder returned instead of deleted content
    DELETED_PLACEHOLDER: Final[str] = "This message was deleted"

    # Voice clip storage
    VOICE_UPLOAD_DIR: Final[str] = "voices"
    VOICE_FILE_EXTENSION: Final[str] = ".webm"
    VOICE_CONTENT_TYPES: Final[tuple] = (
        "audio/webm",
        "audio/ogg",
        "audio/mpeg",
        "audio/mp4",
        "audio/wav",
        "application/octet-stream",
    )


# =============================================================================
# Group Configuration
# =============================================================================


class GROUP_CONFIG:
    """Configuration for group chats."""

    MAX_NAME_LENGTH: Final[int] = 100
    # Distinct members besides the admin (3+ participants in total)
    MIN_OTHER_MEMBERS: Final[int] = 2


# =============================================================================
# Broadcast Configuration
# =============================================================================


class ChatEvent:
    """
    Event names published on a chat's channel group.

    Payloads:
        NEW_MESSAGE: the full serialized message
        SEEN: {"reader": str, "count": int}
        TYPING: {"user": str, "typing": bool}
        DELETE_MESSAGE: {"messageId": int}
    """

    NEW_MESSAGE: Final[str] = "new-message"
    SEEN: Final[str] = "seen"
    TYPING: Final[str] = "typing"
    DELETE_MESSAGE: Final[str] = "delete-message"


class BROADCAST_CONFIG:
    """Configuration for the channel layer fan-out."""

    GROUP_PREFIX: Final[str] = "chat-"
    # Channels dispatches group messages to ChatConsumer.chat_event
    HANDLER_TYPE: Final[str] = "chat.event"


# =============================================================================
# WebSocket Configuration
# =============================================================================


class WS_CLOSE_CODES:
    """Application close codes sent by ChatConsumer."""

    UNAUTHENTICATED: Final[int] = 4001
    NOT_PARTICIPANT: Final[int] = 4003
    CHAT_NOT_FOUND: Final[int] = 4004
