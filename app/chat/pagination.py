"""
Pagination classes for chat API.

Message lists are returned whole by default. When the client sends a
`cursor` or `page_size` query parameter, MessageCursorPagination pages the
same timeline instead.

Cursor-based pagination keeps pages stable while new messages arrive.

Design Decisions:
    - Messages ordered oldest-first for natural reading flow
    - The cursor sits on created_at; messages sharing that timestamp are
      skipped with a small offset, and sequence only orders the rows
"""

from rest_framework.pagination import CursorPagination


class MessageCursorPagination(CursorPagination):
    """
    Cursor pagination for message lists.

    Orders messages oldest-first, matching the unpaginated timeline.

    Default: 50 messages per page
    Maximum: 100 messages per page

    Query parameters:
        cursor: Encoded cursor for position
        page_size: Number of messages (optional override)
    """

    page_size = 50
    max_page_size = 100
    page_size_query_param = "page_size"
    ordering = ("created_at", "sequence")
    cursor_query_param = "cursor"

    @classmethod
    def is_requested(cls, request) -> bool:
        """Whether the request asked for a paginated response."""
        return (
            cls.cursor_query_param in request.query_params
            or cls.page_size_query_param in request.query_params
        )
