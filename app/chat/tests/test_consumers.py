"""
Tests for ChatConsumer and JWTAuthMiddleware.

Each test drives a WebsocketCommunicator inside a single event loop via
async_to_sync. Database access from the consumer happens in other
threads, so these tests use transactional database access.
"""

import pytest
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from authentication.services import AuthService
from authentication.tests.factories import UserFactory
from chat.constants import WS_CLOSE_CODES, ChatEvent
from chat.middleware import JWTAuthMiddleware
from chat.routing import websocket_urlpatterns
from chat.services import MessageService, TypingService
from chat.tests.factories import DirectChatFactory

application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))


def access_token(user):
    return AuthService.issue_tokens(user)["access"]


def connect(chat_id, token=None, subprotocols=None):
    path = f"/ws/chat/{chat_id}/"
    if token:
        path = f"{path}?token={token}"
    return WebsocketCommunicator(application, path, subprotocols=subprotocols)


@pytest.mark.django_db(transaction=True)
class TestConnect:
    """Tests for ChatConsumer.connect."""

    def test_participant_connects(self, direct_chat, ana):
        async def scenario():
            communicator = connect(direct_chat.pk, access_token(ana))
            connected, _ = await communicator.connect()
            await communicator.disconnect()
            return connected

        assert async_to_sync(scenario)() is True

    def test_token_in_subprotocol(self, direct_chat, ana):
        async def scenario():
            communicator = connect(
                direct_chat.pk, subprotocols=["jwt", access_token(ana)]
            )
            accepted = await communicator.connect()
            await communicator.disconnect()
            return accepted

        assert async_to_sync(scenario)() == (True, "jwt")

    @pytest.mark.parametrize("token", [None, "not-a-jwt"])
    def test_rejects_unauthenticated(self, direct_chat, token):
        async def scenario():
            communicator = connect(direct_chat.pk, token)
            return await communicator.connect()

        connected, code = async_to_sync(scenario)()

        assert connected is False
        assert code == WS_CLOSE_CODES.UNAUTHENTICATED

    def test_rejects_inactive_user(self, direct_chat, ana):
        token = access_token(ana)
        ana.is_active = False
        ana.save(update_fields=["is_active"])

        async def scenario():
            return await connect(direct_chat.pk, token).connect()

        connected, code = async_to_sync(scenario)()

        assert connected is False
        assert code == WS_CLOSE_CODES.UNAUTHENTICATED

    def test_rejects_unknown_chat(self, ana):
        async def scenario():
            return await connect(999999, access_token(ana)).connect()

        connected, code = async_to_sync(scenario)()

        assert connected is False
        assert code == WS_CLOSE_CODES.CHAT_NOT_FOUND

    def test_rejects_non_participant(self, direct_chat, dave):
        """
        Only participants may subscribe to a chat's events.

        Why it matters: Events carry message content.
        """

        async def scenario():
            return await connect(direct_chat.pk, access_token(dave)).connect()

        connected, code = async_to_sync(scenario)()

        assert connected is False
        assert code == WS_CLOSE_CODES.NOT_PARTICIPANT


@pytest.mark.django_db(transaction=True)
class TestEventForwarding:
    """Events published by the services reach subscribed sockets."""

    def test_new_message_and_seen(self, direct_chat, ana, bob):
        """
        bob's socket receives ana's message, and ana's receives bob's seen.

        Why it matters: This is the live update path of the conversation.
        """

        async def scenario():
            ana_socket = connect(direct_chat.pk, access_token(ana))
            bob_socket = connect(direct_chat.pk, access_token(bob))
            await ana_socket.connect()
            await bob_socket.connect()

            await database_sync_to_async(MessageService.send_message)(
                direct_chat.pk, sender="ana", text="hi"
            )
            new_message = await bob_socket.receive_json_from(timeout=2)
            await ana_socket.receive_json_from(timeout=2)

            await database_sync_to_async(MessageService.mark_seen)(direct_chat.pk, "bob")
            seen = await ana_socket.receive_json_from(timeout=2)

            await ana_socket.disconnect()
            await bob_socket.disconnect()
            return new_message, seen

        new_message, seen = async_to_sync(scenario)()

        assert new_message["event"] == ChatEvent.NEW_MESSAGE
        assert new_message["data"]["text"] == "hi"
        assert new_message["data"]["sender"] == "ana"
        assert new_message["data"]["receiver"] == "bob"
        assert seen == {"event": ChatEvent.SEEN, "data": {"reader": "bob", "count": 1}}

    def test_delete_message(self, direct_chat, ana, bob):
        async def scenario():
            bob_socket = connect(direct_chat.pk, access_token(bob))
            await bob_socket.connect()

            result = await database_sync_to_async(MessageService.send_message)(
                direct_chat.pk, sender="ana", text="oops"
            )
            await bob_socket.receive_json_from(timeout=2)
            await database_sync_to_async(MessageService.soft_delete)(result.data.pk, "ana")
            event = await bob_socket.receive_json_from(timeout=2)

            await bob_socket.disconnect()
            return result.data.pk, event

        message_id, event = async_to_sync(scenario)()

        assert event == {"event": ChatEvent.DELETE_MESSAGE, "data": {"messageId": message_id}}

    def test_other_chats_not_received(self, direct_chat, ana, bob, carol):
        other = DirectChatFactory(users=(ana, carol))

        async def scenario():
            bob_socket = connect(direct_chat.pk, access_token(bob))
            await bob_socket.connect()

            await database_sync_to_async(MessageService.send_message)(
                other.pk, sender="ana", text="not for bob"
            )
            nothing = await bob_socket.receive_nothing(timeout=0.2)

            await bob_socket.disconnect()
            return nothing

        assert async_to_sync(scenario)() is True

    def test_typing_from_rest(self, direct_chat, ana, bob):
        async def scenario():
            bob_socket = connect(direct_chat.pk, access_token(bob))
            await bob_socket.connect()

            await database_sync_to_async(TypingService.set_typing)(direct_chat.pk, "ana", True)
            event = await bob_socket.receive_json_from(timeout=2)

            await bob_socket.disconnect()
            return event

        assert async_to_sync(scenario)() == {
            "event": ChatEvent.TYPING,
            "data": {"user": "ana", "typing": True},
        }


@pytest.mark.django_db(transaction=True)
class TestReceive:
    """Tests for messages sent by the client over the socket."""

    def test_typing_over_socket(self, direct_chat, ana, bob):
        async def scenario():
            ana_socket = connect(direct_chat.pk, access_token(ana))
            bob_socket = connect(direct_chat.pk, access_token(bob))
            await ana_socket.connect()
            await bob_socket.connect()

            await ana_socket.send_json_to({"type": "typing", "typing": False})
            event = await bob_socket.receive_json_from(timeout=2)

            await ana_socket.disconnect()
            await bob_socket.disconnect()
            return event

        assert async_to_sync(scenario)() == {
            "event": ChatEvent.TYPING,
            "data": {"user": "ana", "typing": False},
        }

    def test_unknown_type_gets_error(self, direct_chat, ana):
        async def scenario():
            socket = connect(direct_chat.pk, access_token(ana))
            await socket.connect()

            await socket.send_json_to({"type": "send", "text": "hi"})
            reply = await socket.receive_json_from(timeout=2)

            await socket.disconnect()
            return reply

        reply = async_to_sync(scenario)()

        assert reply["event"] == "error"
        assert "send" in reply["data"]["message"]


@pytest.mark.django_db(transaction=True)
class TestJWTAuthMiddleware:
    """Tests for token lookup in JWTAuthMiddleware."""

    def test_query_token_wins_over_subprotocol(self, direct_chat, ana, dave):
        async def scenario():
            communicator = connect(
                direct_chat.pk,
                token=access_token(ana),
                subprotocols=["jwt", access_token(dave)],
            )
            connected, _ = await communicator.connect()
            await communicator.disconnect()
            return connected

        assert async_to_sync(scenario)() is True

    def test_token_of_deleted_user(self, direct_chat):
        ghost = UserFactory(name="ghost")
        token = access_token(ghost)
        ghost.delete()

        async def scenario():
            return await connect(direct_chat.pk, token).connect()

        connected, code = async_to_sync(scenario)()

        assert connected is False
        assert code == WS_CLOSE_CODES.UNAUTHENTICATED
