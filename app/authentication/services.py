"""
Authentication services.

This module provides the AuthService class: the session gate in front of
the chat system. A login either authenticates an existing name or claims
an unused one (first-come registration).

Related files:
    - models.py: User
    - views.py: LoginView, UserSearchView

Security:
    - Secrets are checked with check_password() (salted hash comparison)
    - Name claims race on the User primary key; the loser gets NAME_TAKEN
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import IntegrityError
from rest_framework_simplejwt.tokens import RefreshToken

from core.services import BaseService, ServiceResult

from authentication.models import User


@dataclass
class LoginOutcome:
    """Result of a successful login: the user and whether it was just created."""

    user: User
    created: bool


class AuthService(BaseService):
    """
    Login-or-register and user lookup.

    Methods:
        login: Authenticate an existing name or register an unused one
        search_user: Exact-name lookup
        issue_tokens: JWT pair for WebSocket subscriptions

    Usage:
        result = AuthService.login("ana", "s3cret")
        if result.success:
            user = result.data.user
    """

    @classmethod
    def login(cls, name: str, secret: str) -> ServiceResult[LoginOutcome]:
        """
        Authenticate or register a user by name.

        If a user named `name` exists, `secret` must match or the call
        fails with UNAUTHORIZED. Otherwise a user is created with the given
        name and secret.

        Args:
            name: Case-sensitive user name
            secret: Raw secret

        Returns:
            ServiceResult with LoginOutcome

        Error codes:
            VALIDATION_ERROR: name or secret missing
            UNAUTHORIZED: secret does not match the stored one
            NAME_TAKEN: another request claimed the name concurrently
        """
        validation = cls.validate_required(name=name, secret=secret)
        if validation is not None:
            return validation

        with cls.store_errors():
            user = User.objects.filter(name=name).first()

        if user is not None:
            if not user.is_active or not user.check_password(secret):
                cls.get_logger().info(f"Rejected login for user {name}")
                return ServiceResult.failure(
                    "Wrong secret",
                    error_code="UNAUTHORIZED",
                )
            return ServiceResult.success(LoginOutcome(user=user, created=False))

        try:
            with cls.atomic():
                user = User.objects.create_user(name=name, secret=secret)
        except IntegrityError:
            cls.get_logger().info(f"Lost registration race for name {name}")
            return ServiceResult.failure(
                "This name already exists, choose a unique name",
                error_code="NAME_TAKEN",
            )

        cls.get_logger().info(f"Registered user {name}")
        return ServiceResult.success(LoginOutcome(user=user, created=True))

    @classmethod
    def search_user(cls, name: str) -> ServiceResult[User]:
        """
        Find a user by exact name.

        Error codes:
            VALIDATION_ERROR: name missing
            USER_NOT_FOUND: no user with that name
        """
        validation = cls.validate_required(name=name)
        if validation is not None:
            return validation

        with cls.store_errors():
            user = User.objects.filter(name=name, is_active=True).first()

        if user is None:
            return ServiceResult.failure(
                "User not found",
                error_code="USER_NOT_FOUND",
            )
        return ServiceResult.success(user)

    @staticmethod
    def issue_tokens(user: User) -> dict[str, str]:
        """Create a JWT access/refresh pair for the user."""
        refresh = RefreshToken.for_user(user)
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }
