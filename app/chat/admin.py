"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Chat management (with participants inline)
- Direct pair inspection
- Message moderation
"""

from django.contrib import admin

from chat.models import Chat, DirectChatPair, Message, Participant


class ParticipantInline(admin.TabularInline):
    """Inline display of participants in chat admin."""

    model = Participant
    extra = 0
    readonly_fields = ["joined_at"]
    raw_id_fields = ["user"]


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    """Admin interface for Chat model."""

    list_display = [
        "id",
        "is_group",
        "name",
        "admin",
        "last_message",
        "created_at",
        "updated_at",
    ]
    list_filter = ["is_group", "created_at"]
    search_fields = ["name", "id"]
    readonly_fields = ["created_at", "updated_at", "message_seq", "last_message"]
    raw_id_fields = ["admin"]
    inlines = [ParticipantInline]
    ordering = ["-updated_at"]


@admin.register(DirectChatPair)
class DirectChatPairAdmin(admin.ModelAdmin):
    """Admin interface for DirectChatPair model."""

    list_display = ["chat", "user_low", "user_high"]
    raw_id_fields = ["chat", "user_low", "user_high"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "chat",
        "sender",
        "receiver",
        "content_preview",
        "seen",
        "deleted_for_everyone",
        "created_at",
    ]
    list_filter = ["seen", "deleted_for_everyone", "created_at"]
    search_fields = ["text", "sender__name"]
    readonly_fields = ["created_at", "updated_at", "seen_at", "deleted_at", "sequence"]
    raw_id_fields = ["chat", "sender", "receiver"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        if obj.is_voice:
            return "[voice]"
        max_length = 50
        if len(obj.text) > max_length:
            return obj.text[:max_length] + "..."
        return obj.text
