"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on chats and messages and the events they broadcast.

Services:
    ChatService: Chat directory (direct chats, groups, rename, chat list)
    MessageService: Message pipeline (send text/voice, list, mark seen, delete)
    TypingService: Typing indicator relay (no persistence)

Design Principles:
    - Services are stateless (use class methods)
    - Users are passed by name, chats and messages by id, exactly as the
      client sent them
    - Expected failures return ServiceResult.failure()
    - Store failures raise TransientStoreError and nothing is broadcast
    - Events are published after the write's transaction block has exited;
      a failed publish never undoes the write

Usage:
    from chat.services import ChatService, MessageService

    result = ChatService.get_or_create_direct_chat("ana", "bob")
    if result.success:
        chat = result.data

    result = MessageService.send_message(chat.id, sender="ana", text="hi")
"""

from __future__ import annotations

import secrets
import time
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import IntegrityError
from django.db.models import Count
from django.utils import timezone

from authentication.models import User
from core.exceptions import ExternalServiceError
from core.services import BaseService, ServiceResult

from chat.broadcast import ChatBroadcaster
from chat.constants import GROUP_CONFIG, MESSAGE_CONFIG, ChatEvent
from chat.models import Chat, DirectChatPair, Message, Participant
from chat.serializers import MessageSerializer

if TYPE_CHECKING:
    from django.core.files.uploadedfile import UploadedFile
    from django.db.models import QuerySet


def _missing_users(names: list[str]) -> list[str]:
    """Names from `names` that have no User row, in request order."""
    found = set(User.objects.filter(name__in=names).values_list("name", flat=True))
    return [name for name in names if name not in found]


class ChatService(BaseService):
    """
    Service for the chat directory.

    Methods:
        get_or_create_direct_chat: The single direct chat of a user pair
        create_group_chat: New group with an admin and 2+ other members
        rename_group: Rename a group (admin only, silent no-op otherwise)
        list_chats: A user's chats, most recently active first, with unread
    """

    @classmethod
    def get_or_create_direct_chat(cls, user1: str, user2: str) -> ServiceResult[Chat]:
        """
        Return the direct chat between two users, creating it if absent.

        Direct chats are unique per unordered user pair: calling this with
        (a, b) or (b, a), any number of times and concurrently, yields the
        same chat.

        Implementation:
            1. Validate users are present, different and known
            2. Canonicalize order (lower name first)
            3. Look up existing DirectChatPair
            4. If not found, create chat + pair + participants in a transaction
            5. If a concurrent request created the pair first, the unique
               constraint rejects this insert; re-read and return theirs

        Error codes:
            VALIDATION_ERROR: a user name is missing
            SAME_USER: both names are the same user
            USER_NOT_FOUND: a user does not exist
        """
        validation = cls.validate_required(user1=user1, user2=user2)
        if validation is not None:
            return validation

        if user1 == user2:
            return ServiceResult.failure(
                "Cannot create a direct chat with yourself",
                error_code="SAME_USER",
            )

        with cls.store_errors():
            missing = _missing_users([user1, user2])
        if missing:
            return ServiceResult.failure(
                f"User not found: {', '.join(missing)}",
                error_code="USER_NOT_FOUND",
            )

        user_low, user_high = DirectChatPair.canonical(user1, user2)

        with cls.store_errors():
            existing = cls._find_direct_chat(user_low, user_high)
        if existing:
            cls.get_logger().debug(
                f"Found existing direct chat {existing.pk} between {user_low} and {user_high}"
            )
            return ServiceResult.success(existing)

        try:
            with cls.atomic():
                chat = Chat.objects.create(is_group=False)
                DirectChatPair.objects.create(
                    chat=chat,
                    user_low_id=user_low,
                    user_high_id=user_high,
                )
                Participant.objects.bulk_create(
                    [
                        Participant(chat=chat, user_id=user1, position=0),
                        Participant(chat=chat, user_id=user2, position=1),
                    ]
                )
        except IntegrityError:
            with cls.store_errors():
                existing = cls._find_direct_chat(user_low, user_high)
            if existing is None:
                raise
            cls.get_logger().info(
                f"Direct chat between {user_low} and {user_high} created concurrently, "
                f"returning {existing.pk}"
            )
            return ServiceResult.success(existing)

        cls.get_logger().info(
            f"Created direct chat {chat.pk} between {user_low} and {user_high}"
        )
        return ServiceResult.success(chat)

    @staticmethod
    def _find_direct_chat(user_low: str, user_high: str) -> Chat | None:
        pair = (
            DirectChatPair.objects.select_related("chat")
            .filter(user_low_id=user_low, user_high_id=user_high)
            .first()
        )
        return pair.chat if pair else None

    @classmethod
    def create_group_chat(
        cls,
        name: str,
        admin: str,
        members: list[str] | None,
    ) -> ServiceResult[Chat]:
        """
        Create a new group chat.

        The admin becomes the first participant, followed by the members in
        request order. Duplicate member names and the admin's own name are
        ignored when counting members.

        Args:
            name: Group name (required, trimmed)
            admin: Name of the creating user
            members: Names of the other members (at least 2 distinct)

        Returns:
            ServiceResult with the new Chat

        Error codes:
            VALIDATION_ERROR: admin missing
            NAME_REQUIRED: group name empty
            NAME_TOO_LONG: group name exceeds the limit
            TOO_FEW_MEMBERS: fewer than 2 distinct members besides the admin
            USER_NOT_FOUND: admin or a member does not exist
        """
        name = name.strip() if name else ""
        if not name:
            return ServiceResult.failure(
                "Group name is required",
                error_code="NAME_REQUIRED",
            )
        if len(name) > GROUP_CONFIG.MAX_NAME_LENGTH:
            return ServiceResult.failure(
                f"Group name cannot exceed {GROUP_CONFIG.MAX_NAME_LENGTH} characters",
                error_code="NAME_TOO_LONG",
            )

        validation = cls.validate_required(admin=admin)
        if validation is not None:
            return validation

        others: list[str] = []
        for member in members or []:
            if member and member != admin and member not in others:
                others.append(member)

        if len(others) < GROUP_CONFIG.MIN_OTHER_MEMBERS:
            return ServiceResult.failure(
                "A group needs at least 3 participants",
                error_code="TOO_FEW_MEMBERS",
            )

        participants = [admin, *others]
        with cls.store_errors():
            missing = _missing_users(participants)
        if missing:
            return ServiceResult.failure(
                f"User not found: {', '.join(missing)}",
                error_code="USER_NOT_FOUND",
                errors={"members": [f"Unknown user: {n}" for n in missing]},
            )

        with cls.atomic():
            chat = Chat.objects.create(is_group=True, name=name, admin_id=admin)
            Participant.objects.bulk_create(
                [
                    Participant(chat=chat, user_id=user_name, position=position)
                    for position, user_name in enumerate(participants)
                ]
            )

        cls.get_logger().info(
            f"Created group {chat.pk} '{name}' with {len(participants)} participants"
        )
        return ServiceResult.success(chat)

    @classmethod
    def rename_group(
        cls,
        chat_id: int,
        new_name: str,
        requester: str,
    ) -> ServiceResult[bool]:
        """
        Rename a group chat.

        Only the group admin may rename. A rename requested by anyone else
        succeeds without changing anything; the result data tells the
        caller whether the name was applied.

        Returns:
            ServiceResult with True if renamed, False for the no-op

        Error codes:
            VALIDATION_ERROR: chat id or requester missing
            NAME_REQUIRED: new name empty
            NAME_TOO_LONG: new name exceeds the limit
            CHAT_NOT_FOUND: no such chat
        """
        validation = cls.validate_required(chat_id=chat_id, requester=requester)
        if validation is not None:
            return validation

        new_name = new_name.strip() if new_name else ""
        if not new_name:
            return ServiceResult.failure(
                "Group name is required",
                error_code="NAME_REQUIRED",
            )
        if len(new_name) > GROUP_CONFIG.MAX_NAME_LENGTH:
            return ServiceResult.failure(
                f"Group name cannot exceed {GROUP_CONFIG.MAX_NAME_LENGTH} characters",
                error_code="NAME_TOO_LONG",
            )

        with cls.store_errors():
            exists = Chat.objects.filter(pk=chat_id).exists()
        if not exists:
            return ServiceResult.failure(
                "Chat not found",
                error_code="CHAT_NOT_FOUND",
            )

        # Conditional update: the admin check and the write are one statement
        with cls.atomic():
            updated = Chat.objects.filter(
                pk=chat_id,
                is_group=True,
                admin_id=requester,
            ).update(name=new_name, updated_at=timezone.now())

        if updated:
            cls.get_logger().info(f"Group {chat_id} renamed to '{new_name}' by {requester}")
        else:
            cls.get_logger().info(
                f"Ignored rename of chat {chat_id} by non-admin {requester}"
            )
        return ServiceResult.success(bool(updated))

    @classmethod
    def list_chats(cls, user: str) -> ServiceResult[list[Chat]]:
        """
        List the chats a user participates in.

        Ordered by last activity (updated_at) descending. Each chat gets an
        `unread` attribute: the number of messages in it addressed to `user`
        that are not yet seen. Unread counts for all chats come from a
        single grouped query.

        Error codes:
            VALIDATION_ERROR: user missing
        """
        validation = cls.validate_required(user=user)
        if validation is not None:
            return validation

        with cls.store_errors():
            chats = list(
                Chat.objects.filter(memberships__user_id=user)
                .prefetch_related("memberships")
                .order_by("-updated_at", "-id")
            )
            unread_counts = dict(
                Message.objects.filter(
                    chat_id__in=[chat.pk for chat in chats],
                    receiver_id=user,
                    seen=False,
                )
                .order_by()
                .values("chat_id")
                .annotate(n=Count("id"))
                .values_list("chat_id", "n")
            )

        for chat in chats:
            chat.unread = unread_counts.get(chat.pk, 0)

        return ServiceResult.success(chats)


class MessageService(BaseService):
    """
    Service for the message pipeline.

    Methods:
        send_message: Persist a text (or voice URL) message and broadcast it
        send_voice: Store an uploaded clip, then send it as a voice message
        list_messages: A chat's timeline in (created_at, sequence) order
        mark_seen: Mark a reader's unseen messages in a chat as seen
        soft_delete: Hide a message's content for everyone
    """

    @classmethod
    def _resolve_route(
        cls,
        chat_id: int,
        sender: str,
        receiver: str | None,
    ) -> ServiceResult[tuple[Chat, str | None]]:
        """
        Load the chat and work out the receiver of a new message.

        Direct chats: the receiver defaults to the other participant and
        must be a participant other than the sender. Groups: no receiver.

        Error codes:
            VALIDATION_ERROR: chat id or sender missing
            CHAT_NOT_FOUND: no such chat
            NOT_PARTICIPANT: sender or receiver is not in the chat
        """
        validation = cls.validate_required(chat_id=chat_id, sender=sender)
        if validation is not None:
            return validation

        with cls.store_errors():
            chat = Chat.objects.prefetch_related("memberships").filter(pk=chat_id).first()
        if chat is None:
            return ServiceResult.failure(
                "Chat not found",
                error_code="CHAT_NOT_FOUND",
            )

        if not chat.has_participant(sender):
            return ServiceResult.failure(
                "Sender is not a participant in this chat",
                error_code="NOT_PARTICIPANT",
            )

        if chat.is_group:
            return ServiceResult.success((chat, None))

        if not receiver:
            receiver = chat.other_participant(sender)
        if receiver == sender or not chat.has_participant(receiver):
            return ServiceResult.failure(
                "Receiver is not a participant in this chat",
                error_code="NOT_PARTICIPANT",
            )

        return ServiceResult.success((chat, receiver))

    @classmethod
    def _append(
        cls,
        chat: Chat,
        sender: str,
        receiver: str | None,
        text: str,
        voice: str,
    ) -> Message:
        """
        Persist a message and move the chat's preview and activity time.

        The chat row is locked to hand out the next sequence number, so
        messages of one chat never share a sequence.
        """
        with cls.atomic():
            locked = Chat.objects.select_for_update().get(pk=chat.pk)
            locked.message_seq += 1
            message = Message.objects.create(
                chat=locked,
                sender_id=sender,
                receiver_id=receiver,
                text=text,
                voice=voice,
                sequence=locked.message_seq,
            )
            locked.last_message = message.preview_text()
            locked.save(update_fields=["message_seq", "last_message", "updated_at"])

        cls.get_logger().debug(
            f"{sender} sent message {message.pk} (seq {message.sequence}) to chat {chat.pk}"
        )

        ChatBroadcaster.publish(
            chat.pk,
            ChatEvent.NEW_MESSAGE,
            dict(MessageSerializer(message).data),
        )
        return message

    @classmethod
    def send_message(
        cls,
        chat_id: int,
        sender: str,
        text: str = "",
        receiver: str | None = None,
        voice: str = "",
    ) -> ServiceResult[Message]:
        """
        Send a message to a chat.

        Exactly one of `text` (non-blank) and `voice` (a stored clip URL)
        must be given. The message is persisted unseen, the chat's
        last_message/updated_at move, and a new-message event carrying the
        serialized message is broadcast to the chat.

        Args:
            chat_id: Target chat
            sender: Name of the sending participant
            text: Message text
            receiver: Receiver name (direct chats; derived when omitted)
            voice: URL of an already stored voice clip

        Returns:
            ServiceResult with the new Message

        Error codes:
            VALIDATION_ERROR: chat id or sender missing, or both text and voice
            EMPTY_MESSAGE: neither text nor voice
            MESSAGE_TOO_LONG: text exceeds CHAT_MAX_MESSAGE_LENGTH
            CHAT_NOT_FOUND: no such chat
            NOT_PARTICIPANT: sender or receiver is not in the chat
        """
        text = text or ""
        has_text = bool(text.strip())
        if not has_text and not voice:
            return ServiceResult.failure(
                "Message must have text or a voice clip",
                error_code="EMPTY_MESSAGE",
            )
        if has_text and voice:
            return ServiceResult.failure(
                "A message carries either text or a voice clip, not both",
                error_code="VALIDATION_ERROR",
            )
        if len(text) > settings.CHAT_MAX_MESSAGE_LENGTH:
            return ServiceResult.failure(
                f"Message cannot exceed {settings.CHAT_MAX_MESSAGE_LENGTH} characters",
                error_code="MESSAGE_TOO_LONG",
            )

        route = cls._resolve_route(chat_id, sender, receiver)
        if not route.success:
            return route
        chat, receiver = route.data

        message = cls._append(chat, sender, receiver, text if has_text else "", voice)
        return ServiceResult.success(message)

    @classmethod
    def send_voice(
        cls,
        chat_id: int,
        sender: str,
        audio: UploadedFile,
        receiver: str | None = None,
    ) -> ServiceResult[Message]:
        """
        Store an uploaded voice clip and send it as a message.

        The clip is written to the default storage under
        voices/<timestamp>-<token>.webm and its URL becomes the message's
        `voice`. The routing checks run before anything is stored; if the
        message cannot be persisted the stored clip is removed again.

        Error codes:
            EMPTY_MESSAGE: no clip or an empty one
            VOICE_TOO_LARGE: clip exceeds CHAT_MAX_VOICE_BYTES
            UNSUPPORTED_VOICE_TYPE: content type is not an audio type
            plus the routing codes of send_message
        """
        if audio is None or not audio.size:
            return ServiceResult.failure(
                "Voice clip is empty",
                error_code="EMPTY_MESSAGE",
            )
        if audio.size > settings.CHAT_MAX_VOICE_BYTES:
            return ServiceResult.failure(
                f"Voice clip cannot exceed {settings.CHAT_MAX_VOICE_BYTES} bytes",
                error_code="VOICE_TOO_LARGE",
            )
        content_type = getattr(audio, "content_type", None)
        if content_type and content_type not in MESSAGE_CONFIG.VOICE_CONTENT_TYPES:
            return ServiceResult.failure(
                f"Unsupported voice clip type: {content_type}",
                error_code="UNSUPPORTED_VOICE_TYPE",
            )

        route = cls._resolve_route(chat_id, sender, receiver)
        if not route.success:
            return route
        chat, receiver = route.data

        path = cls._store_voice_clip(audio)
        try:
            message = cls._append(chat, sender, receiver, "", default_storage.url(path))
        except Exception:
            default_storage.delete(path)
            raise

        return ServiceResult.success(message)

    @classmethod
    def _store_voice_clip(cls, audio: UploadedFile) -> str:
        """
        Save a clip to the default storage and return its storage path.

        Raises:
            ExternalServiceError: The storage backend rejected the write
        """
        filename = (
            f"{MESSAGE_CONFIG.VOICE_UPLOAD_DIR}/"
            f"{int(time.time() * 1000)}-{secrets.token_hex(8)}"
            f"{MESSAGE_CONFIG.VOICE_FILE_EXTENSION}"
        )
        try:
            path = default_storage.save(filename, audio)
        except OSError as exc:
            cls.get_logger().error(f"Could not store voice clip: {exc}", exc_info=True)
            raise ExternalServiceError(
                "Voice storage is unavailable",
                error_code="VOICE_STORAGE_UNAVAILABLE",
            ) from exc

        cls.get_logger().debug(f"Stored voice clip at {path}")
        return path

    @classmethod
    def list_messages(cls, chat_id: int) -> ServiceResult[QuerySet[Message]]:
        """
        A chat's messages in timeline order.

        Ordered by (created_at, sequence) ascending. Deleted messages stay
        in place; serializers blank their content.

        Error codes:
            VALIDATION_ERROR: chat id missing
            CHAT_NOT_FOUND: no such chat
        """
        validation = cls.validate_required(chat_id=chat_id)
        if validation is not None:
            return validation

        with cls.store_errors():
            exists = Chat.objects.filter(pk=chat_id).exists()
        if not exists:
            return ServiceResult.failure(
                "Chat not found",
                error_code="CHAT_NOT_FOUND",
            )

        return ServiceResult.success(
            Message.objects.filter(chat_id=chat_id).order_by("created_at", "sequence")
        )

    @classmethod
    def mark_seen(cls, chat_id: int, reader: str) -> ServiceResult[int]:
        """
        Mark every unseen message addressed to `reader` in a chat as seen.

        Messages sent by the reader, and messages to other receivers, are
        untouched. Idempotent: a repeated call updates nothing. A seen event
        {reader, count} is broadcast only when something changed.

        Returns:
            ServiceResult with the number of messages marked

        Error codes:
            VALIDATION_ERROR: chat id or reader missing
            CHAT_NOT_FOUND: no such chat
        """
        validation = cls.validate_required(chat_id=chat_id, reader=reader)
        if validation is not None:
            return validation

        with cls.store_errors():
            exists = Chat.objects.filter(pk=chat_id).exists()
        if not exists:
            return ServiceResult.failure(
                "Chat not found",
                error_code="CHAT_NOT_FOUND",
            )

        now = timezone.now()
        with cls.atomic():
            count = Message.objects.filter(
                chat_id=chat_id,
                receiver_id=reader,
                seen=False,
            ).update(seen=True, seen_at=now, updated_at=now)

        if count:
            cls.get_logger().debug(f"{reader} saw {count} message(s) in chat {chat_id}")
            ChatBroadcaster.publish(
                chat_id,
                ChatEvent.SEEN,
                {"reader": reader, "count": count},
            )

        return ServiceResult.success(count)

    @classmethod
    def soft_delete(
        cls,
        message_id: int,
        requester: str | None = None,
    ) -> ServiceResult[bool]:
        """
        Delete a message for everyone.

        The row stays in the timeline with deleted_for_everyone set; the API
        blanks its text and voice. The flag is set with a conditional update,
        so only the first of several calls broadcasts delete-message. If the
        message is the chat's latest, the chat preview is replaced as well.

        Args:
            message_id: Message to delete
            requester: When given, must be the sender of the message

        Returns:
            ServiceResult with True if this call deleted it, False if it
            was already deleted

        Error codes:
            VALIDATION_ERROR: message id missing
            MESSAGE_NOT_FOUND: no such message
            PERMISSION_DENIED: requester is not the sender
        """
        validation = cls.validate_required(message_id=message_id)
        if validation is not None:
            return validation

        with cls.store_errors():
            message = Message.objects.filter(pk=message_id).first()
        if message is None:
            return ServiceResult.failure(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
            )

        if requester is not None and message.sender_id != requester:
            cls.get_logger().info(
                f"{requester} tried to delete message {message_id} sent by {message.sender_id}"
            )
            return ServiceResult.failure(
                "Only the sender can delete this message",
                error_code="PERMISSION_DENIED",
            )

        now = timezone.now()
        with cls.atomic():
            changed = Message.objects.filter(
                pk=message_id,
                deleted_for_everyone=False,
            ).update(deleted_for_everyone=True, deleted_at=now, updated_at=now)
            if changed:
                Chat.objects.filter(
                    pk=message.chat_id,
                    message_seq=message.sequence,
                ).update(last_message=MESSAGE_CONFIG.DELETED_PLACEHOLDER)

        if changed:
            cls.get_logger().info(f"Message {message_id} deleted for everyone")
            ChatBroadcaster.publish(
                message.chat_id,
                ChatEvent.DELETE_MESSAGE,
                {"messageId": message.pk},
            )

        return ServiceResult.success(bool(changed))


class TypingService(BaseService):
    """
    Relay of typing indicators.

    Typing state is never stored and calls are not coalesced: each call is
    one typing event on the chat's channel group.
    """

    @classmethod
    def set_typing(
        cls,
        chat_id: int,
        user: str,
        typing: bool = True,
    ) -> ServiceResult[bool]:
        """
        Broadcast that `user` started or stopped typing in a chat.

        Returns:
            ServiceResult with whether the channel layer accepted the event

        Error codes:
            VALIDATION_ERROR: chat id or user missing
        """
        validation = cls.validate_required(chat_id=chat_id, user=user)
        if validation is not None:
            return validation

        delivered = ChatBroadcaster.publish(
            chat_id,
            ChatEvent.TYPING,
            {"user": user, "typing": bool(typing)},
        )
        return ServiceResult.success(delivered)
