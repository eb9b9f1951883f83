"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A single DRF exception handler that hides backing-service failures

Exception Hierarchy:
    BaseApplicationError (base)
    └── ExternalServiceError - Store, transport or blob storage failures (500)
        ├── TransientStoreError - Database write or read failed
        └── TransientBroadcastError - Channel layer publish failed

Usage:
    from core.exceptions import TransientStoreError

    try:
        ...
    except DatabaseError as exc:
        raise TransientStoreError("Could not persist message") from exc

Note:
    Expected failures inside services (missing input, unknown chat, not a
    participant) are returned as ServiceResult.failure() instead (see
    core.services). These exceptions are only for backing-service failures
    that must abort the request.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status used by api_exception_handler
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ExternalServiceError(BaseApplicationError):
    """
    Raised when a backing service call fails.

    Note:
        Log the original error for debugging but don't expose
        internal details to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"


class TransientStoreError(ExternalServiceError):
    """
    Raised when the database fails or times out during a request.

    Fatal to the request: nothing is broadcast. The client may retry the
    whole action.
    """

    default_error_code: str = "STORE_UNAVAILABLE"


class TransientBroadcastError(ExternalServiceError):
    """
    Raised when publishing to the channel layer fails or times out.

    Never escapes a request after the data was persisted; the broadcaster
    logs and swallows it.
    """

    default_error_code: str = "BROADCAST_UNAVAILABLE"


def api_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    DRF exception handler that understands BaseApplicationError.

    Application errors answer with a generic body; the cause is only logged.

    Configured as REST_FRAMEWORK["EXCEPTION_HANDLER"]. DRF's own exceptions
    (serializer validation, parse errors, throttling) are delegated to the
    default handler unchanged.
    """
    if isinstance(exc, BaseApplicationError):
        view = context.get("view")
        view_name = view.__class__.__name__ if view else "unknown"
        logger.error(
            f"{view_name} failed: {exc}",
            exc_info=exc.__cause__ or exc,
        )
        return Response(
            {"error": "Server error", "error_code": exc.error_code},
            status=exc.status_code,
        )

    return exception_handler(exc, context)
