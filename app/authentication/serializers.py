"""
Serializers for authentication.

This module provides DRF serializers for:
- User (read operations, embedded in chat payloads)
- Login request (name + secret)
- User search request

Security:
    - The secret is write-only and never echoed back
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for User model (read operations).

    Only public fields; the hashed secret is never exposed.
    """

    createdAt = serializers.DateTimeField(source="date_joined", read_only=True)

    class Meta:
        model = User
        fields = [
            "name",
            "createdAt",
        ]
        read_only_fields = fields


class LoginSerializer(serializers.Serializer):
    """Request body for login/register."""

    name = serializers.CharField(
        max_length=64,
        trim_whitespace=False,
        help_text="Case-sensitive user name",
    )
    secret = serializers.CharField(
        max_length=128,
        write_only=True,
        trim_whitespace=False,
        help_text="Secret for this name (sets it on first login)",
    )


class UserSearchSerializer(serializers.Serializer):
    """Request body for exact-name user search."""

    name = serializers.CharField(max_length=64, trim_whitespace=False)
