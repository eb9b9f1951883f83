"""
Test configuration and fixtures for authentication tests.

This module provides:
- User fixtures
- An API client for the public auth endpoints

Usage:
    def test_example(user, api_client):
        response = api_client.post(
            "/api/v1/auth/login/",
            {"name": user.name, "secret": DEFAULT_SECRET},
            format="json",
        )
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a basic active user with the default secret."""
    return UserFactory(name="ana")


@pytest.fixture
def deactivated_user(db):
    """Create a deactivated user (is_active=False)."""
    return UserFactory(name="ghost", is_active=False)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()
