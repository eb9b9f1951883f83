"""
Serializers for chat API.

This module provides serializers for the chat system:
- Chat serializers (read, list with unread)
- Message serializer (read, with soft-delete handling)
- Request serializers for every chat endpoint

Serializer Hierarchy:
    ChatSerializer: Chat with participant names
    ChatListSerializer: ChatSerializer + unread count

    MessageSerializer: Message with soft-delete handling (also the
        new-message event payload)

    DirectChatRequestSerializer, GroupCreateSerializer,
    GroupRenameSerializer, ChatListQuerySerializer: Chat directory input
    MessageCreateSerializer, VoiceMessageSerializer, MessageListQuerySerializer,
    MarkSeenSerializer, MessageDeleteSerializer: Message pipeline input
    TypingSerializer: Typing indicator input

Design Decisions:
    - Read and write serializers are separate for clarity
    - Field names on the wire are camelCase; model fields are snake_case
    - Users are referenced by name and chats/messages by integer id
    - Deleted messages keep their position and metadata, text and voice
      are blanked
"""

from __future__ import annotations

from rest_framework import serializers

from chat.models import Chat, Message


# =============================================================================
# Read Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Serializer for a message.

    Used for API responses and as the payload of the new-message event.

    Soft Delete Handling:
        When deleted_for_everyone is set, text and voice are returned empty.
    """

    chatId = serializers.IntegerField(source="chat_id", read_only=True)
    sender = serializers.CharField(source="sender_id", read_only=True)
    receiver = serializers.CharField(source="receiver_id", read_only=True, allow_null=True)
    text = serializers.SerializerMethodField()
    voice = serializers.SerializerMethodField()
    deletedForEveryone = serializers.BooleanField(
        source="deleted_for_everyone", read_only=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "chatId",
            "sender",
            "receiver",
            "text",
            "voice",
            "seen",
            "deletedForEveryone",
            "sequence",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_text(self, obj: Message) -> str:
        return "" if obj.deleted_for_everyone else obj.text

    def get_voice(self, obj: Message) -> str:
        return "" if obj.deleted_for_everyone else obj.voice


class ChatSerializer(serializers.ModelSerializer):
    """
    Serializer for a chat.

    participants lists names in join order (the admin first for groups).
    Expects memberships to be prefetched when serializing many chats.
    """

    participants = serializers.SerializerMethodField()
    isGroup = serializers.BooleanField(source="is_group", read_only=True)
    admin = serializers.CharField(source="admin_id", read_only=True, allow_null=True)
    lastMessage = serializers.CharField(source="last_message", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Chat
        fields = [
            "id",
            "participants",
            "isGroup",
            "name",
            "admin",
            "lastMessage",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_participants(self, obj: Chat) -> list[str]:
        return obj.participant_names()


class ChatListSerializer(ChatSerializer):
    """
    Chat as it appears in a user's chat list.

    unread is set on each chat by ChatService.list_chats().
    """

    unread = serializers.IntegerField(read_only=True, default=0)

    class Meta(ChatSerializer.Meta):
        fields = ChatSerializer.Meta.fields + ["unread"]
        read_only_fields = fields


# =============================================================================
# Chat Directory Requests
# =============================================================================


class ChatListQuerySerializer(serializers.Serializer):
    """Query parameters for GET chats/."""

    user = serializers.CharField(max_length=64, trim_whitespace=False)


class DirectChatRequestSerializer(serializers.Serializer):
    """Request body for opening a direct chat."""

    user1 = serializers.CharField(max_length=64, trim_whitespace=False)
    user2 = serializers.CharField(max_length=64, trim_whitespace=False)


class GroupCreateSerializer(serializers.Serializer):
    """
    Request body for creating a group.

    The name may be blank here; the service reports NAME_REQUIRED for it.
    """

    name = serializers.CharField(max_length=200, allow_blank=True)
    admin = serializers.CharField(max_length=64, trim_whitespace=False)
    members = serializers.ListField(
        child=serializers.CharField(max_length=64, trim_whitespace=False),
        allow_empty=True,
    )


class GroupRenameSerializer(serializers.Serializer):
    """Request body for renaming a group."""

    chatId = serializers.IntegerField()
    name = serializers.CharField(max_length=200, allow_blank=True)
    admin = serializers.CharField(max_length=64, trim_whitespace=False)


# =============================================================================
# Message Pipeline Requests
# =============================================================================


class MessageListQuerySerializer(serializers.Serializer):
    """Query parameters for GET messages/."""

    chatId = serializers.IntegerField()


class MessageCreateSerializer(serializers.Serializer):
    """
    Request body for sending a text message.

    receiver is optional: direct chats derive it, groups ignore it.
    """

    chatId = serializers.IntegerField()
    sender = serializers.CharField(max_length=64, trim_whitespace=False)
    receiver = serializers.CharField(
        max_length=64,
        trim_whitespace=False,
        required=False,
        allow_null=True,
        allow_blank=True,
    )
    text = serializers.CharField(
        required=False,
        allow_blank=True,
        trim_whitespace=False,
        default="",
    )


class VoiceMessageSerializer(serializers.Serializer):
    """Multipart request body for sending a voice clip."""

    audio = serializers.FileField()
    chatId = serializers.IntegerField()
    sender = serializers.CharField(max_length=64, trim_whitespace=False)
    receiver = serializers.CharField(
        max_length=64,
        trim_whitespace=False,
        required=False,
        allow_null=True,
        allow_blank=True,
    )


class MarkSeenSerializer(serializers.Serializer):
    """
    Request body for marking messages as seen.

    The reader is named `reader`; `receiver` and `user` are accepted as
    aliases, in that order of precedence.
    """

    READER_FIELDS = ("reader", "receiver", "user")

    chatId = serializers.IntegerField()
    reader = serializers.CharField(max_length=64, required=False, allow_blank=True, trim_whitespace=False)
    receiver = serializers.CharField(max_length=64, required=False, allow_blank=True, trim_whitespace=False)
    user = serializers.CharField(max_length=64, required=False, allow_blank=True, trim_whitespace=False)

    def validate(self, attrs):
        for field_name in self.READER_FIELDS:
            value = attrs.get(field_name)
            if value:
                return {"chatId": attrs["chatId"], "reader": value}
        raise serializers.ValidationError({"reader": ["This field is required."]})


class MessageDeleteSerializer(serializers.Serializer):
    """
    Request body for deleting a message for everyone.

    When `user` is given it must be the sender of the message.
    """

    messageId = serializers.IntegerField()
    user = serializers.CharField(
        max_length=64,
        trim_whitespace=False,
        required=False,
        allow_null=True,
        allow_blank=True,
    )


class TypingSerializer(serializers.Serializer):
    """Request body for the typing indicator."""

    chatId = serializers.IntegerField()
    user = serializers.CharField(max_length=64, trim_whitespace=False)
    typing = serializers.BooleanField(default=True)
