"""
Initial chat schema.

Models created:
    - Chat: direct or group chat with preview and sequence counter
    - Participant: membership (unique per chat and user)
    - DirectChatPair: one row per direct chat, unique per user pair
    - Message: text or voice message with seen and soft-delete state
"""

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Chat",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "is_group",
                    models.BooleanField(
                        db_index=True,
                        default=False,
                        help_text="True for group chats, False for direct chats",
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Name for group chats (empty for direct)",
                        max_length=100,
                    ),
                ),
                (
                    "last_message",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Preview of the latest message (denormalized for chat lists)",
                        max_length=255,
                    ),
                ),
                (
                    "message_seq",
                    models.PositiveBigIntegerField(
                        default=0,
                        help_text="Last sequence number assigned to a message in this chat",
                    ),
                ),
                (
                    "admin",
                    models.ForeignKey(
                        blank=True,
                        help_text="Group admin; only this user may rename the group",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="administered_chats",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_chat",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="Participant",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "position",
                    models.PositiveSmallIntegerField(
                        default=0,
                        help_text="Join order within the chat",
                    ),
                ),
                (
                    "joined_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        help_text="When the user was added to this chat",
                    ),
                ),
                (
                    "chat",
                    models.ForeignKey(
                        help_text="Chat this membership belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="chat.chat",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Participating user",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chat_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_participant",
                "ordering": ["position", "id"],
            },
        ),
        migrations.AddField(
            model_name="chat",
            name="participants",
            field=models.ManyToManyField(
                help_text="Users taking part in this chat",
                related_name="chats",
                through="chat.Participant",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        migrations.CreateModel(
            name="DirectChatPair",
            fields=[
                (
                    "chat",
                    models.OneToOneField(
                        help_text="The direct chat this pair represents",
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="direct_pair",
                        serialize=False,
                        to="chat.chat",
                    ),
                ),
                (
                    "user_low",
                    models.ForeignKey(
                        help_text="Participant whose name sorts first",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user_high",
                    models.ForeignKey(
                        help_text="Participant whose name sorts second",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_direct_pair",
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "text",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Message text (may be empty when a voice clip is attached)",
                    ),
                ),
                (
                    "voice",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="URL of the voice clip (empty for text messages)",
                        max_length=500,
                    ),
                ),
                (
                    "seen",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the receiver has seen this message",
                    ),
                ),
                (
                    "seen_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the receiver marked this message as seen",
                        null=True,
                    ),
                ),
                (
                    "deleted_for_everyone",
                    models.BooleanField(
                        default=False,
                        help_text="Soft delete flag; content is hidden from all participants",
                    ),
                ),
                (
                    "deleted_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the message was deleted",
                        null=True,
                    ),
                ),
                (
                    "sequence",
                    models.PositiveBigIntegerField(
                        default=0,
                        help_text="Monotonic position within the chat",
                    ),
                ),
                (
                    "chat",
                    models.ForeignKey(
                        help_text="Chat this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.chat",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "receiver",
                    models.ForeignKey(
                        blank=True,
                        help_text="Recipient in a direct chat (null for group messages)",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "sequence"],
            },
        ),
        migrations.AddIndex(
            model_name="chat",
            index=models.Index(fields=["-updated_at"], name="chat_chat_updated_idx"),
        ),
        migrations.AddIndex(
            model_name="participant",
            index=models.Index(fields=["user", "chat"], name="chat_part_user_chat_idx"),
        ),
        migrations.AddConstraint(
            model_name="participant",
            constraint=models.UniqueConstraint(
                fields=("chat", "user"),
                name="unique_chat_participant",
            ),
        ),
        migrations.AddConstraint(
            model_name="directchatpair",
            constraint=models.UniqueConstraint(
                fields=("user_low", "user_high"),
                name="unique_direct_chat_pair",
            ),
        ),
        migrations.AddIndex(
            model_name="message",
            index=models.Index(
                fields=["chat", "created_at", "sequence"],
                name="chat_msg_chat_timeline_idx",
            ),
        ),
        migrations.AddIndex(
            model_name="message",
            index=models.Index(
                condition=models.Q(("seen", False)),
                fields=["receiver", "chat"],
                name="chat_msg_unread_idx",
            ),
        ),
        migrations.AddConstraint(
            model_name="message",
            constraint=models.UniqueConstraint(
                fields=("chat", "sequence"),
                name="unique_message_sequence_per_chat",
            ),
        ),
    ]
