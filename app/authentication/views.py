"""
Authentication views.

This module provides API views for:
- Login/register by name + secret (first login claims the name)
- Exact-name user search

Related files:
    - serializers.py: Request/response serialization
    - services.py: AuthService business logic
    - urls.py: URL routing

Note:
    Both endpoints are public: they are how a client obtains an identity.
    The JWT pair returned by login authenticates WebSocket subscriptions
    (see chat.middleware).
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import (
    LoginSerializer,
    UserSearchSerializer,
    UserSerializer,
)
from authentication.services import AuthService
from core.responses import failure_response


class LoginView(APIView):
    """
    Log in or register.

    POST /api/v1/auth/login/

    Payload:
        name: User name (case-sensitive)
        secret: Secret for the name

    Responses:
        200: {"message", "user", "tokens"} for an existing user
        201: same shape when the name was just registered
        400: missing fields
        401: wrong secret
        409: name claimed concurrently by another request
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        operation_id="auth_login",
        summary="Log in or register",
        description=(
            "Authenticate with a name and secret. If the name is unused it is "
            "registered with the given secret."
        ),
        request=LoginSerializer,
        responses={
            200: OpenApiResponse(description="Logged in"),
            201: OpenApiResponse(description="Registered"),
            400: OpenApiResponse(description="Name and secret required"),
            401: OpenApiResponse(description="Wrong secret"),
            409: OpenApiResponse(description="Name already taken"),
        },
        tags=["Auth"],
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.login(
            name=serializer.validated_data["name"],
            secret=serializer.validated_data["secret"],
        )
        if not result.success:
            return failure_response(result)

        outcome = result.data
        return Response(
            {
                "message": "User registered" if outcome.created else "Login successful",
                "user": UserSerializer(outcome.user).data,
                "tokens": AuthService.issue_tokens(outcome.user),
            },
            status=status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK,
        )


class UserSearchView(APIView):
    """
    Find a user by exact name.

    POST /api/v1/auth/search/

    Payload:
        name: User name to look up
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        operation_id="auth_search",
        summary="Search user by name",
        request=UserSearchSerializer,
        responses={
            200: OpenApiResponse(response=UserSerializer, description="User found"),
            404: OpenApiResponse(description="User not found"),
        },
        tags=["Auth"],
    )
    def post(self, request):
        serializer = UserSearchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.search_user(serializer.validated_data["name"])
        if not result.success:
            return failure_response(result)

        return Response({"user": UserSerializer(result.data).data})
