"""
Tests for chat models.

This module tests:
- Chat participant helpers
- DirectChatPair canonical ordering and constraints
- Message preview text and ordering
"""

import pytest
from django.db import IntegrityError, transaction

from authentication.tests.factories import UserFactory
from chat.constants import MESSAGE_CONFIG
from chat.models import Chat, DirectChatPair, Message
from chat.tests.factories import DirectChatFactory, GroupChatFactory, MessageFactory


@pytest.mark.django_db
class TestChatParticipants:
    """Tests for Chat.participant_names, has_participant and other_participant."""

    def test_participant_names_in_join_order(self, ana, bob, carol):
        """
        Group participants are listed admin first, then members.

        Why it matters: Clients render the member list in this order and
        the admin is identified by being first.
        """
        chat = GroupChatFactory(admin=carol, members=[ana, bob])

        assert chat.participant_names() == ["carol", "ana", "bob"]

    def test_has_participant_accepts_user_or_name(self, direct_chat, ana, dave):
        """Membership can be checked with a User or a bare name."""
        assert direct_chat.has_participant(ana)
        assert direct_chat.has_participant("bob")
        assert not direct_chat.has_participant(dave)

    def test_other_participant_in_direct_chat(self, direct_chat, ana, bob):
        """
        The other participant of a direct chat is the implied receiver.

        Why it matters: Messages sent without a receiver are routed to it.
        """
        assert direct_chat.other_participant(ana) == "bob"
        assert direct_chat.other_participant(bob) == "ana"

    def test_other_participant_none_for_group_or_stranger(self, group_chat, direct_chat, ana, dave):
        assert group_chat.other_participant(ana) is None
        assert direct_chat.other_participant(dave) is None

    def test_str(self, direct_chat, group_chat):
        assert str(direct_chat) == f"Direct({direct_chat.pk})"
        assert str(group_chat) == "Group: Team"


@pytest.mark.django_db
class TestDirectChatPair:
    """Tests for DirectChatPair."""

    def test_canonical_orders_names(self):
        assert DirectChatPair.canonical("bob", "ana") == ("ana", "bob")
        assert DirectChatPair.canonical("ana", "bob") == ("ana", "bob")

    def test_second_chat_for_same_pair_rejected(self, direct_chat, ana, bob):
        """
        The database refuses a second direct chat for the same pair.

        Why it matters: Concurrent get-or-create calls rely on this
        constraint to converge on a single chat.
        """
        other = Chat.objects.create(is_group=False)

        with pytest.raises(IntegrityError), transaction.atomic():
            DirectChatPair.objects.create(chat=other, user_low=ana, user_high=bob)

    def test_canonical_uses_codepoint_order(self):
        """Upper-case names sort before lower-case ones."""
        assert DirectChatPair.canonical("ana", "Zed") == ("Zed", "ana")
        assert DirectChatPair.canonical("Zed", "ana") == ("Zed", "ana")

    def test_upper_case_name_stored_as_low(self, ana):
        """
        A pair whose low name is upper-case is accepted by the database.

        Why it matters: Collations that ignore case would order "ana" before
        "Zed" and must not reject the pair.
        """
        zed = UserFactory(name="Zed")
        chat = Chat.objects.create(is_group=False)

        pair = DirectChatPair.objects.create(chat=chat, user_low=zed, user_high=ana)

        assert str(pair) == "DirectPair(Zed, ana)"


@pytest.mark.django_db
class TestMessage:
    """Tests for Message helpers and ordering."""

    def test_preview_text_for_text_message(self, direct_chat, ana):
        message = MessageFactory(chat=direct_chat, sender=ana, text="hello there")

        assert message.preview_text() == "hello there"

    def test_preview_text_truncated(self, direct_chat, ana):
        message = MessageFactory(chat=direct_chat, sender=ana, text="x" * 400)

        assert len(message.preview_text()) == MESSAGE_CONFIG.PREVIEW_MAX_LENGTH

    def test_preview_text_for_voice_message(self, direct_chat, ana):
        """
        Voice messages show a fixed preview in the chat list.

        Why it matters: A voice message has no text to preview.
        """
        message = MessageFactory(
            chat=direct_chat,
            sender=ana,
            text="",
            voice="/media/voices/1-abc.webm",
        )

        assert message.is_voice
        assert message.preview_text() == MESSAGE_CONFIG.VOICE_PREVIEW
        assert str(message) == "ana: [voice]"

    def test_text_wins_over_voice_clip(self, direct_chat, ana):
        message = MessageFactory(
            chat=direct_chat,
            sender=ana,
            text="listen",
            voice="/media/voices/1-abc.webm",
        )

        assert not message.is_voice
        assert message.preview_text() == "listen"
        assert str(message) == "ana: listen"

    def test_sequence_unique_per_chat(self, direct_chat, ana):
        MessageFactory(chat=direct_chat, sender=ana, sequence=1)

        with pytest.raises(IntegrityError), transaction.atomic():
            MessageFactory(chat=direct_chat, sender=ana, sequence=1)

    def test_same_sequence_allowed_in_other_chat(self, direct_chat, group_chat, ana):
        MessageFactory(chat=direct_chat, sender=ana, sequence=1)
        MessageFactory(chat=group_chat, sender=ana, sequence=1)

        assert Message.objects.filter(sequence=1).count() == 2

    def test_default_ordering_is_timeline(self, direct_chat, ana, bob):
        first = MessageFactory(chat=direct_chat, sender=ana)
        second = MessageFactory(chat=direct_chat, sender=bob)

        assert list(Message.objects.filter(chat=direct_chat)) == [first, second]

    def test_str_hides_deleted_content(self, direct_chat, ana):
        message = MessageFactory(
            chat=direct_chat,
            sender=ana,
            text="secret",
            deleted_for_everyone=True,
        )

        assert str(message) == "ana: [deleted]"


@pytest.mark.django_db
class TestDirectChatFactory:
    def test_creates_pair_and_participants(self, ana, bob):
        chat = DirectChatFactory(users=(bob, ana))

        assert chat.participant_names() == ["bob", "ana"]
        assert chat.direct_pair.user_low_id == "ana"
        assert chat.direct_pair.user_high_id == "bob"
