"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) chats between exactly two users
- Group chats with a single admin

Models:
    Chat: Container for messages between participants
    Participant: Membership of a user in a chat
    DirectChatPair: Helper for enforcing uniqueness of direct chats
    Message: Text or voice message within a chat

Design Decisions:
    - Users are referenced by name (the User primary key)
    - Membership is fixed at creation; there is no join/leave flow
    - Messages are append-only; only `seen` and `deleted_for_everyone` change,
      and both only ever move from False to True
    - Soft delete keeps the row and its position in the timeline while the
      API blanks the content
    - Each chat hands out a monotonic `sequence` to its messages so that two
      messages created in the same instant still have a total order
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Q

from chat.constants import MESSAGE_CONFIG
from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class Chat(BaseModel):
    """
    A direct or group chat.

    Chat Types:
        Direct: exactly 2 participants, no name required, unique per user pair
                (enforced via DirectChatPair).
        Group: 3+ participants, a non-empty name and an admin who alone may
               rename it.

    Fields:
        is_group: Whether this is a group chat
        name: Group name (empty for direct chats)
        admin: Group admin (null for direct chats)
        last_message: Preview of the most recent message
        message_seq: Last sequence number handed out to a message

    Relationships:
        participants: User objects through Participant
        memberships: Participant records for this chat
        messages: All Message records for this chat
        direct_pair: DirectChatPair if this is a direct chat

    Ordering:
        updated_at descending, so the chat with the latest activity comes
        first in a user's chat list.
    """

    is_group = models.BooleanField(
        default=False,
        db_index=True,
        help_text="True for group chats, False for direct chats",
    )

    name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Name for group chats (empty for direct)",
    )

    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="administered_chats",
        help_text="Group admin; only this user may rename the group",
    )

    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="Participant",
        related_name="chats",
        help_text="Users taking part in this chat",
    )

    last_message = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Preview of the latest message (denormalized for chat lists)",
    )

    message_seq = models.PositiveBigIntegerField(
        default=0,
        help_text="Last sequence number assigned to a message in this chat",
    )

    class Meta:
        db_table = "chat_chat"
        ordering = ["-updated_at"]
        indexes = [
            models.Index(
                fields=["-updated_at"],
                name="chat_chat_updated_idx",
            ),
        ]

    def __str__(self) -> str:
        if self.is_group:
            return f"Group: {self.name}" if self.name else f"Group({self.pk})"
        return f"Direct({self.pk})"

    def participant_names(self) -> list[str]:
        """
        Names of the participants in join order.

        Uses the prefetched memberships when available.
        """
        return [m.user_id for m in self.memberships.all()]

    def has_participant(self, user: User | str) -> bool:
        name = user if isinstance(user, str) else user.pk
        return name in self.participant_names()

    def other_participant(self, user: User | str) -> str | None:
        """
        For a direct chat, the name of the participant that is not `user`.

        Returns None for groups or when `user` is not a participant.
        """
        if self.is_group:
            return None
        name = user if isinstance(user, str) else user.pk
        names = self.participant_names()
        if name not in names:
            return None
        others = [n for n in names if n != name]
        return others[0] if others else None


class Participant(models.Model):
    """
    Membership of a user in a chat.

    The join order is preserved: for groups the admin is the first
    participant, followed by the members in request order.

    Constraints:
        - UniqueConstraint(chat, user): a user appears once per chat
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Chat this membership belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_memberships",
        help_text="Participating user",
    )

    position = models.PositiveSmallIntegerField(
        default=0,
        help_text="Join order within the chat",
    )

    joined_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user was added to this chat",
    )

    class Meta:
        db_table = "chat_participant"
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["chat", "user"],
                name="unique_chat_participant",
            ),
        ]
        indexes = [
            # A user's chats
            models.Index(
                fields=["user", "chat"],
                name="chat_part_user_chat_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Participant: {self.user_id} in {self.chat_id}"


class DirectChatPair(models.Model):
    """
    Enforces uniqueness of direct chats between two users.

    Stores the two participant names in canonical order (lower name first)
    so that, regardless of who opens the chat, only one direct chat can
    exist per pair. Two concurrent creators race on the unique constraint;
    the loser re-reads the winner's chat.

    Fields:
        chat: The direct chat (OneToOne, serves as PK)
        user_low: Participant whose name sorts first
        user_high: Participant whose name sorts second

    Constraints:
        - UniqueConstraint(user_low, user_high): One chat per pair

    The order comes from canonical() (Python codepoint order). The database
    never compares the two names.
    """

    chat = models.OneToOneField(
        Chat,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct chat this pair represents",
    )

    user_low = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="Participant whose name sorts first",
    )

    user_high = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="Participant whose name sorts second",
    )

    class Meta:
        db_table = "chat_direct_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_low", "user_high"],
                name="unique_direct_chat_pair",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_low_id}, {self.user_high_id})"

    @staticmethod
    def canonical(name_a: str, name_b: str) -> tuple[str, str]:
        """Return the pair in canonical (sorted) order."""
        return (name_a, name_b) if name_a < name_b else (name_b, name_a)


class Message(BaseModel):
    """
    A message within a chat.

    A message carries either text or a voice clip URL. In direct chats the
    receiver is the other participant; group messages have no receiver.

    Lifecycle:
        - Created with seen=False and the next per-chat sequence number
        - seen: False -> True when the receiver marks the chat as seen
        - deleted_for_everyone: False -> True on soft delete; content is kept
          in the database but blanked in API responses

    Fields:
        chat: Chat this message belongs to
        sender: User who sent the message
        receiver: Recipient in a direct chat (null for group messages)
        text: Message text (may be empty for voice messages)
        voice: URL of the voice clip in blob storage (may be empty)
        seen / seen_at: Read state of the message for its receiver
        deleted_for_everyone / deleted_at: Soft delete state
        sequence: Position within the chat, assigned at write time

    Ordering:
        (created_at, sequence) ascending.
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Chat this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="received_messages",
        help_text="Recipient in a direct chat (null for group messages)",
    )

    text = models.TextField(
        blank=True,
        default="",
        help_text="Message text (may be empty when a voice clip is attached)",
    )

    voice = models.CharField(
        max_length=500,
        blank=True,
        default="",
        help_text="URL of the voice clip (empty for text messages)",
    )

    seen = models.BooleanField(
        default=False,
        help_text="Whether the receiver has seen this message",
    )

    seen_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the receiver marked this message as seen",
    )

    deleted_for_everyone = models.BooleanField(
        default=False,
        help_text="Soft delete flag; content is hidden from all participants",
    )

    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the message was deleted",
    )

    sequence = models.PositiveBigIntegerField(
        default=0,
        help_text="Monotonic position within the chat",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "sequence"]
        indexes = [
            # Timeline of a chat
            models.Index(
                fields=["chat", "created_at", "sequence"],
                name="chat_msg_chat_timeline_idx",
            ),
            # Unread counts and mark-seen
            models.Index(
                fields=["receiver", "chat"],
                name="chat_msg_unread_idx",
                condition=Q(seen=False),
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["chat", "sequence"],
                name="unique_message_sequence_per_chat",
            ),
        ]

    def __str__(self) -> str:
        if self.deleted_for_everyone:
            preview = "[deleted]"
        elif self.is_voice:
            preview = "[voice]"
        else:
            preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        return f"{self.sender_id}: {preview}"

    @property
    def is_voice(self) -> bool:
        """A voice clip with no accompanying text."""
        return bool(self.voice) and not self.text

    def preview_text(self) -> str:
        """Text shown as the chat's last message for this message."""
        if self.is_voice:
            return MESSAGE_CONFIG.VOICE_PREVIEW
        return self.text[: MESSAGE_CONFIG.PREVIEW_MAX_LENGTH]
