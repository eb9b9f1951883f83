"""
Tests for error responses.

These tests verify:
- Mapping of service error codes to HTTP status
- api_exception_handler for backing-service errors and DRF errors
"""

from __future__ import annotations

import pytest
from rest_framework import exceptions, status

from core.exceptions import (
    ExternalServiceError,
    TransientBroadcastError,
    TransientStoreError,
    api_exception_handler,
)
from core.responses import failure_response, status_for
from core.services import ServiceResult


class TestStatusFor:
    """Test status_for error code mapping."""

    @pytest.mark.parametrize(
        "error_code,expected",
        [
            ("VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST),
            ("TOO_FEW_MEMBERS", status.HTTP_400_BAD_REQUEST),
            ("NOT_PARTICIPANT", status.HTTP_400_BAD_REQUEST),
            ("UNAUTHORIZED", status.HTTP_401_UNAUTHORIZED),
            ("PERMISSION_DENIED", status.HTTP_403_FORBIDDEN),
            ("CHAT_NOT_FOUND", status.HTTP_404_NOT_FOUND),
            ("USER_NOT_FOUND", status.HTTP_404_NOT_FOUND),
            ("NAME_TAKEN", status.HTTP_409_CONFLICT),
            (None, status.HTTP_400_BAD_REQUEST),
        ],
    )
    def test_mapping(self, error_code, expected):
        assert status_for(error_code) == expected

    def test_failure_response(self):
        result = ServiceResult.failure("Message not found", error_code="MESSAGE_NOT_FOUND")

        response = failure_response(result)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {
            "error": "Message not found",
            "error_code": "MESSAGE_NOT_FOUND",
        }


class TestApiExceptionHandler:
    """Test api_exception_handler."""

    def test_storage_error_keeps_its_code(self):
        exc = ExternalServiceError("bucket unreachable", error_code="VOICE_STORAGE_UNAVAILABLE")

        response = api_exception_handler(exc, {})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {"error": "Server error", "error_code": "VOICE_STORAGE_UNAVAILABLE"}

    def test_broadcast_error_default_code(self):
        response = api_exception_handler(TransientBroadcastError("layer down"), {})

        assert response.data["error_code"] == "BROADCAST_UNAVAILABLE"

    def test_store_error_hides_cause(self):
        """
        Store failures answer 500 with a generic body.

        Why it matters: Driver messages can leak hostnames and SQL.
        """
        try:
            raise TransientStoreError("could not connect to server at 10.0.0.5") from OSError("refused")
        except TransientStoreError as caught:
            exc = caught

        response = api_exception_handler(exc, {})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {"error": "Server error", "error_code": "STORE_UNAVAILABLE"}

    def test_drf_errors_use_default_handler(self):
        exc = exceptions.ValidationError({"name": ["This field is required."]})

        response = api_exception_handler(exc, {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"name": ["This field is required."]}
