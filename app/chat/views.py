"""
API views for the chat system.

This module provides REST API endpoints for the chat system:
- Chat directory: list chats, open direct chats, create and rename groups
- Message pipeline: list, send text/voice, mark seen, delete for everyone
- Typing indicator

URL Structure:
    /api/v1/chat/chats/              GET (?user=), POST
    /api/v1/chat/groups/             POST
    /api/v1/chat/groups/rename/      POST
    /api/v1/chat/messages/           GET (?chatId=), POST
    /api/v1/chat/messages/voice/     POST (multipart)
    /api/v1/chat/messages/seen/      POST
    /api/v1/chat/messages/delete/    POST
    /api/v1/chat/typing/             POST

Design Decisions:
    - Plain APIViews: every endpoint is one service call
    - The acting user is named in the request body or query string; the
      endpoints do not require an Authorization header
    - Request shape is validated by serializers (400 with field errors)
      before the service is called
    - Service failures map to HTTP status via core.responses
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.pagination import MessageCursorPagination
from chat.serializers import (
    ChatListQuerySerializer,
    ChatListSerializer,
    ChatSerializer,
    DirectChatRequestSerializer,
    GroupCreateSerializer,
    GroupRenameSerializer,
    MarkSeenSerializer,
    MessageCreateSerializer,
    MessageDeleteSerializer,
    MessageListQuerySerializer,
    MessageSerializer,
    TypingSerializer,
    VoiceMessageSerializer,
)
from chat.services import ChatService, MessageService, TypingService
from core.responses import failure_response


class ChatAPIView(APIView):
    """Base for chat endpoints: identity travels in the request."""

    permission_classes = [AllowAny]
    authentication_classes = []


# =============================================================================
# Chat Directory
# =============================================================================


class ChatListCreateView(ChatAPIView):
    """
    List a user's chats or open a direct chat.

    GET /api/v1/chat/chats/?user=<name>
    POST /api/v1/chat/chats/ {"user1": ..., "user2": ...}
    """

    @extend_schema(
        operation_id="list_chats",
        summary="List chats",
        description=(
            "Chats the user participates in, most recently active first, "
            "each with the number of unseen messages addressed to the user."
        ),
        parameters=[
            OpenApiParameter(
                name="user",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description="Name of the user whose chats to list",
                required=True,
            ),
        ],
        responses={
            200: OpenApiResponse(response=ChatListSerializer(many=True)),
            400: OpenApiResponse(description="user missing"),
        },
        tags=["Chat - Chats"],
    )
    def get(self, request):
        query = ChatListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        result = ChatService.list_chats(query.validated_data["user"])
        if not result.success:
            return failure_response(result)

        return Response({"chats": ChatListSerializer(result.data, many=True).data})

    @extend_schema(
        operation_id="open_direct_chat",
        summary="Open direct chat",
        description="Return the direct chat between two users, creating it if needed.",
        request=DirectChatRequestSerializer,
        responses={
            200: OpenApiResponse(response=ChatSerializer),
            400: OpenApiResponse(description="Missing users or same user twice"),
            404: OpenApiResponse(description="User not found"),
        },
        tags=["Chat - Chats"],
    )
    def post(self, request):
        serializer = DirectChatRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.get_or_create_direct_chat(
            serializer.validated_data["user1"],
            serializer.validated_data["user2"],
        )
        if not result.success:
            return failure_response(result)

        return Response({"chat": ChatSerializer(result.data).data})


class GroupCreateView(ChatAPIView):
    """
    Create a group chat.

    POST /api/v1/chat/groups/ {"name": ..., "admin": ..., "members": [...]}
    """

    @extend_schema(
        operation_id="create_group",
        summary="Create group",
        request=GroupCreateSerializer,
        responses={
            201: OpenApiResponse(response=ChatSerializer),
            400: OpenApiResponse(description="Name missing or fewer than 3 participants"),
            404: OpenApiResponse(description="User not found"),
        },
        tags=["Chat - Chats"],
    )
    def post(self, request):
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.create_group_chat(
            name=serializer.validated_data["name"],
            admin=serializer.validated_data["admin"],
            members=serializer.validated_data["members"],
        )
        if not result.success:
            return failure_response(result)

        return Response(
            {"chat": ChatSerializer(result.data).data},
            status=status.HTTP_201_CREATED,
        )


class GroupRenameView(ChatAPIView):
    """
    Rename a group chat.

    POST /api/v1/chat/groups/rename/ {"chatId": ..., "name": ..., "admin": ...}

    A rename by anyone but the admin succeeds with updated=false.
    """

    @extend_schema(
        operation_id="rename_group",
        summary="Rename group",
        request=GroupRenameSerializer,
        responses={
            200: OpenApiResponse(description="{success, updated}"),
            400: OpenApiResponse(description="Name missing"),
            404: OpenApiResponse(description="Chat not found"),
        },
        tags=["Chat - Chats"],
    )
    def post(self, request):
        serializer = GroupRenameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.rename_group(
            chat_id=serializer.validated_data["chatId"],
            new_name=serializer.validated_data["name"],
            requester=serializer.validated_data["admin"],
        )
        if not result.success:
            return failure_response(result)

        return Response({"success": True, "updated": result.data})


# =============================================================================
# Message Pipeline
# =============================================================================


class MessageListCreateView(ChatAPIView):
    """
    List a chat's messages or send a text message.

    GET /api/v1/chat/messages/?chatId=<id>[&cursor=...&page_size=...]
    POST /api/v1/chat/messages/ {"chatId", "sender", "receiver"?, "text"}
    """

    pagination_class = MessageCursorPagination

    @extend_schema(
        operation_id="list_messages",
        summary="List messages",
        description=(
            "Messages of a chat, oldest first. Without cursor/page_size all "
            "messages are returned; with either, the list is cursor-paginated."
        ),
        parameters=[
            OpenApiParameter(
                name="chatId",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=True,
            ),
            OpenApiParameter(
                name="cursor",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
            ),
            OpenApiParameter(
                name="page_size",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Messages per page (default 50, max 100)",
                required=False,
            ),
        ],
        responses={
            200: OpenApiResponse(response=MessageSerializer(many=True)),
            400: OpenApiResponse(description="chatId missing or invalid"),
            404: OpenApiResponse(description="Chat not found"),
        },
        tags=["Chat - Messages"],
    )
    def get(self, request):
        query = MessageListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        result = MessageService.list_messages(query.validated_data["chatId"])
        if not result.success:
            return failure_response(result)

        if not MessageCursorPagination.is_requested(request):
            return Response({"messages": MessageSerializer(result.data, many=True).data})

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(result.data, request, view=self)
        return Response(
            {
                "messages": MessageSerializer(page, many=True).data,
                "next": paginator.get_next_link(),
                "previous": paginator.get_previous_link(),
            }
        )

    @extend_schema(
        operation_id="send_message",
        summary="Send message",
        request=MessageCreateSerializer,
        responses={
            201: OpenApiResponse(response=MessageSerializer),
            400: OpenApiResponse(description="Empty message or not a participant"),
            404: OpenApiResponse(description="Chat not found"),
        },
        tags=["Chat - Messages"],
    )
    def post(self, request):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = MessageService.send_message(
            chat_id=data["chatId"],
            sender=data["sender"],
            text=data["text"],
            receiver=data.get("receiver") or None,
        )
        if not result.success:
            return failure_response(result)

        return Response(
            {"message": MessageSerializer(result.data).data},
            status=status.HTTP_201_CREATED,
        )


class VoiceMessageView(ChatAPIView):
    """
    Send a voice clip.

    POST /api/v1/chat/messages/voice/ (multipart: audio, chatId, sender, receiver?)
    """

    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        operation_id="send_voice_message",
        summary="Send voice message",
        request={"multipart/form-data": VoiceMessageSerializer},
        responses={
            201: OpenApiResponse(response=MessageSerializer),
            400: OpenApiResponse(description="Missing/oversized clip or not a participant"),
            404: OpenApiResponse(description="Chat not found"),
        },
        tags=["Chat - Messages"],
    )
    def post(self, request):
        serializer = VoiceMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = MessageService.send_voice(
            chat_id=data["chatId"],
            sender=data["sender"],
            audio=data["audio"],
            receiver=data.get("receiver") or None,
        )
        if not result.success:
            return failure_response(result)

        return Response(
            {"message": MessageSerializer(result.data).data},
            status=status.HTTP_201_CREATED,
        )


class MarkSeenView(ChatAPIView):
    """
    Mark a reader's messages in a chat as seen.

    POST /api/v1/chat/messages/seen/ {"chatId", "reader"}
    `receiver` and `user` are accepted in place of `reader`.
    """

    @extend_schema(
        operation_id="mark_messages_seen",
        summary="Mark messages seen",
        request=MarkSeenSerializer,
        responses={
            200: OpenApiResponse(description="{success, updated}"),
            400: OpenApiResponse(description="chatId or reader missing"),
            404: OpenApiResponse(description="Chat not found"),
        },
        tags=["Chat - Messages"],
    )
    def post(self, request):
        serializer = MarkSeenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MessageService.mark_seen(
            chat_id=serializer.validated_data["chatId"],
            reader=serializer.validated_data["reader"],
        )
        if not result.success:
            return failure_response(result)

        return Response({"success": True, "updated": result.data})


class MessageDeleteView(ChatAPIView):
    """
    Delete a message for everyone.

    POST /api/v1/chat/messages/delete/ {"messageId", "user"?}
    """

    @extend_schema(
        operation_id="delete_message",
        summary="Delete message for everyone",
        request=MessageDeleteSerializer,
        responses={
            200: OpenApiResponse(description="{success}"),
            400: OpenApiResponse(description="messageId missing"),
            403: OpenApiResponse(description="user is not the sender"),
            404: OpenApiResponse(description="Message not found"),
        },
        tags=["Chat - Messages"],
    )
    def post(self, request):
        serializer = MessageDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MessageService.soft_delete(
            message_id=serializer.validated_data["messageId"],
            requester=serializer.validated_data.get("user") or None,
        )
        if not result.success:
            return failure_response(result)

        return Response({"success": True})


# =============================================================================
# Typing
# =============================================================================


class TypingView(ChatAPIView):
    """
    Typing indicator.

    POST /api/v1/chat/typing/ {"chatId", "user", "typing"}
    """

    @extend_schema(
        operation_id="set_typing",
        summary="Typing indicator",
        description="Broadcast a typing event to the chat. Nothing is stored.",
        request=TypingSerializer,
        responses={
            200: OpenApiResponse(description="{success}"),
            400: OpenApiResponse(description="chatId or user missing"),
        },
        tags=["Chat - Typing"],
    )
    def post(self, request):
        serializer = TypingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = TypingService.set_typing(
            chat_id=serializer.validated_data["chatId"],
            user=serializer.validated_data["user"],
            typing=serializer.validated_data["typing"],
        )
        if not result.success:
            return failure_response(result)

        return Response({"success": True})
