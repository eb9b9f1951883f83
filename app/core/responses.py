"""
Response helpers for turning failed ServiceResults into DRF responses.

Views call failure_response(result) instead of hard-coding a status per
call site. Error codes not listed here fall back to 400, except codes
ending in _NOT_FOUND which map to 404.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import status
from rest_framework.response import Response

if TYPE_CHECKING:
    from core.services import ServiceResult

ERROR_CODE_STATUS = {
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "NAME_TAKEN": status.HTTP_409_CONFLICT,
    "CONFLICT": status.HTTP_409_CONFLICT,
}


def status_for(error_code: str | None) -> int:
    """Return the HTTP status for a service error code."""
    if not error_code:
        return status.HTTP_400_BAD_REQUEST
    if error_code in ERROR_CODE_STATUS:
        return ERROR_CODE_STATUS[error_code]
    if error_code.endswith("_NOT_FOUND"):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


def failure_response(result: ServiceResult) -> Response:
    """
    Build the error response for a failed ServiceResult.

    Example:
        result = ChatService.create_group(...)
        if not result.success:
            return failure_response(result)
    """
    return Response(result.to_response(), status=status_for(result.error_code))
