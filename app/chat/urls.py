"""
URL configuration for chat API.

URL Structure:
    Chats:
        /chats/                GET (?user=), POST
        /groups/               POST
        /groups/rename/        POST

    Messages:
        /messages/             GET (?chatId=), POST
        /messages/voice/       POST
        /messages/seen/        POST
        /messages/delete/      POST

    Typing:
        /typing/               POST

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import path

from chat.views import (
    ChatListCreateView,
    GroupCreateView,
    GroupRenameView,
    MarkSeenView,
    MessageDeleteView,
    MessageListCreateView,
    TypingView,
    VoiceMessageView,
)

app_name = "chat"

urlpatterns = [
    path("chats/", ChatListCreateView.as_view(), name="chats"),
    path("groups/", GroupCreateView.as_view(), name="group-create"),
    path("groups/rename/", GroupRenameView.as_view(), name="group-rename"),
    path("messages/", MessageListCreateView.as_view(), name="messages"),
    path("messages/voice/", VoiceMessageView.as_view(), name="message-voice"),
    path("messages/seen/", MarkSeenView.as_view(), name="messages-seen"),
    path("messages/delete/", MessageDeleteView.as_view(), name="message-delete"),
    path("typing/", TypingView.as_view(), name="typing"),
]
