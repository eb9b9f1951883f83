"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures (ana, bob, carol, dave)
- Chat fixtures (direct and group)
- A mock of the broadcaster for asserting published events
- API client for the chat endpoints

Usage:
    def test_example(direct_chat, ana, published):
        MessageService.send_message(direct_chat.id, sender=ana.name, text="hi")
        published.assert_called_once()
"""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from chat.tests.factories import DirectChatFactory, GroupChatFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def ana(db):
    return UserFactory(name="ana")


@pytest.fixture
def bob(db):
    return UserFactory(name="bob")


@pytest.fixture
def carol(db):
    return UserFactory(name="carol")


@pytest.fixture
def dave(db):
    """A user who is not in any of the fixture chats."""
    return UserFactory(name="dave")


# =============================================================================
# Chat Fixtures
# =============================================================================


@pytest.fixture
def direct_chat(ana, bob):
    """Direct chat between ana and bob."""
    return DirectChatFactory(users=(ana, bob))


@pytest.fixture
def group_chat(ana, bob, carol):
    """Group "Team" administered by ana with bob and carol."""
    return GroupChatFactory(name="Team", admin=ana, members=[bob, carol])


# =============================================================================
# Broadcast Fixtures
# =============================================================================


@pytest.fixture
def published(mocker):
    """
    Replace ChatBroadcaster.publish with a mock.

    Calls are (chat_id, event, payload).
    """
    return mocker.patch("chat.services.ChatBroadcaster.publish", return_value=True)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()
