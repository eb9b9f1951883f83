"""
OpenAPI schema customizations for drf-spectacular.

This module provides hooks to customize the generated OpenAPI schema,
mainly tag descriptions for better documentation organization in ReDoc.

Tag naming follows the pattern: [App Name] - [Group Name]
Examples:
- Auth (login/register, user search)
- Chat - Chats (direct and group chats)
- Chat - Messages (send, list, seen, delete)
- Chat - Typing (ephemeral typing signal)
"""

TAG_DESCRIPTIONS = [
    {
        "name": "Auth",
        "description": (
            "Name + secret login. The first login with an unused name "
            "registers it. Also exact-name user search."
        ),
    },
    {
        "name": "Chat - Chats",
        "description": (
            "Direct chats (one per user pair), group chats, renaming, and "
            "chat lists with per-user unread counts."
        ),
    },
    {
        "name": "Chat - Messages",
        "description": (
            "Append-only text and voice messages, seen receipts, and "
            "delete-for-everyone. Every change is broadcast on chat-{chatId}."
        ),
    },
    {
        "name": "Chat - Typing",
        "description": "Typing indicators relayed to the chat channel without persistence.",
    },
]


def group_auth_endpoints(result, generator, request, public):
    """
    Postprocessing hook to group API endpoints by function.

    Endpoints under /auth/ without an explicit tag are grouped under
    "Auth"; chat views set their tags via @extend_schema.
    """
    paths = result.get("paths", {})

    for path, methods in paths.items():
        for method, operation in methods.items():
            if not isinstance(operation, dict):
                continue

            operation_id = operation.get("operationId", "")
            if operation_id.startswith("auth_") and not operation.get("tags"):
                operation["tags"] = ["Auth"]

    result["tags"] = TAG_DESCRIPTIONS

    return result
