"""
Tests for chat services.

This module tests:
- ConversationService: find-or-create uniqueness, participant lookups
- MessageService: send paths, error codes, the chat gate, read tracking
- InterestService: the express-interest shortcut
- SyncService: the polling snapshot

Testing Philosophy:
    Tests assert on ServiceResult outcomes and database state. Live pushes
    are not part of the service layer and are covered in test_views.py.
"""

from datetime import timedelta
from unittest import mock

import pytest
from django.db import DatabaseError
from django.utils import timezone

from chat.constants import INTEREST_CONFIG, MESSAGE_CONFIG, POLLING_CONFIG, SYNC_CONFIG
from chat.models import Conversation, Message
from chat.services import (
    ConversationService,
    InterestService,
    MessageService,
    SyncService,
)
from chat.tests.factories import ConversationFactory, MessageFactory
from listings.tests.factories import ItemFactory


# =============================================================================
# ConversationService
# =============================================================================


class TestFindOrCreate:
    """Tests for ConversationService.find_or_create()."""

    def test_creates_conversation(self, item, buyer, seller):
        result = ConversationService.find_or_create(item.id, buyer.id, seller.id)

        assert result.success
        assert (result.data.item_id, result.data.buyer_id, result.data.seller_id) == (
            item.id,
            buyer.id,
            seller.id,
        )

    def test_repeat_call_returns_same_conversation(self, item, buyer, seller):
        first = ConversationService.find_or_create(item.id, buyer.id, seller.id)
        second = ConversationService.find_or_create(item.id, buyer.id, seller.id)

        assert first.data.id == second.data.id
        assert Conversation.objects.count() == 1

    def test_lost_race_returns_winning_row(self, conversation, item, buyer, seller):
        """
        A concurrent request inserted the row between our lookup and insert.

        Why it matters: Both first contacts must end up in one conversation
        instead of one of them failing.
        """
        with mock.patch.object(
            Conversation.objects,
            "get_by_item_and_buyer",
            side_effect=[None, conversation],
        ):
            result = ConversationService.find_or_create(item.id, buyer.id, seller.id)

        assert result.success
        assert result.data.id == conversation.id
        assert Conversation.objects.count() == 1

    def test_seller_cannot_be_buyer(self, item, seller):
        result = ConversationService.find_or_create(item.id, seller.id, seller.id)

        assert not result.success
        assert result.error_code == "INVALID_OPERATION"
        assert not Conversation.objects.exists()


class TestGetForParticipant:
    def test_participants_can_fetch(self, conversation, buyer, seller):
        assert ConversationService.get_for_participant(conversation.id, buyer.id).success
        assert ConversationService.get_for_participant(conversation.id, seller.id).success

    def test_outsider_gets_not_found(self, conversation, outsider):
        result = ConversationService.get_for_participant(conversation.id, outsider.id)

        assert result.error_code == "NOT_FOUND"

    def test_unknown_conversation(self, buyer):
        result = ConversationService.get_for_participant(999_999, buyer.id)

        assert result.error_code == "NOT_FOUND"


class TestListForUser:
    def test_annotates_unread_count_per_user(self, engaged_conversation, buyer, seller):
        buyer_row = ConversationService.list_for_user(buyer.id).get()
        seller_row = ConversationService.list_for_user(seller.id).get()

        assert buyer_row.unread_count == 1
        assert seller_row.unread_count == 1


# =============================================================================
# MessageService.send
# =============================================================================


class TestSendMessage:
    """Tests for MessageService.send()."""

    def test_seller_reply_into_existing_conversation(self, conversation, seller, buyer):
        result = MessageService.send(
            sender=seller,
            item_id=conversation.item_id,
            receiver_id=buyer.id,
            content="Hi, still available",
        )

        assert result.success
        message = result.data.message
        assert message.conversation_id == conversation.id
        assert (message.sender_id, message.receiver_id) == (seller.id, buyer.id)
        assert message.read is False

    def test_send_refreshes_conversation_summary(self, conversation, seller, buyer):
        result = MessageService.send(
            sender=seller,
            item_id=conversation.item_id,
            receiver_id=buyer.id,
            content="  Hi, still available  ",
        )

        stored = Conversation.objects.get(pk=conversation.pk)
        assert result.data.message.content == "Hi, still available"
        assert stored.last_message == "Hi, still available"
        assert stored.last_message_at == result.data.message.created_at
        assert stored.updated_at == result.data.message.created_at

    def test_buyer_send_after_seller_engaged(self, engaged_conversation, buyer, seller):
        result = MessageService.send(
            sender=buyer,
            item_id=engaged_conversation.item_id,
            receiver_id=seller.id,
            content="Can I pick it up tomorrow?",
            conversation_id=engaged_conversation.id,
        )

        assert result.success
        assert result.data.conversation.id == engaged_conversation.id

    def test_buyer_without_conversation_resolves_by_item(self, engaged_conversation, buyer, seller):
        result = MessageService.send(
            sender=buyer,
            item_id=engaged_conversation.item_id,
            receiver_id=seller.id,
            content="Still there?",
        )

        assert result.data.conversation.id == engaged_conversation.id

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_empty_content_is_invalid(self, conversation, seller, buyer, content):
        result = MessageService.send(
            sender=seller,
            item_id=conversation.item_id,
            receiver_id=buyer.id,
            content=content,
        )

        assert result.error_code == "INVALID_ARGUMENT"
        assert "content" in result.errors
        assert not Message.objects.exists()

    def test_oversized_content_is_invalid(self, conversation, seller, buyer):
        result = MessageService.send(
            sender=seller,
            item_id=conversation.item_id,
            receiver_id=buyer.id,
            content="x" * (MESSAGE_CONFIG.MAX_CONTENT_LENGTH + 1),
        )

        assert result.error_code == "INVALID_ARGUMENT"

    def test_unknown_item_is_not_found(self, seller, buyer):
        result = MessageService.send(
            sender=seller, item_id=999_999, receiver_id=buyer.id, content="Hello"
        )

        assert result.error_code == "NOT_FOUND"

    def test_outsider_cannot_post_into_conversation(self, engaged_conversation, outsider, seller):
        result = MessageService.send(
            sender=outsider,
            item_id=engaged_conversation.item_id,
            receiver_id=seller.id,
            content="Let me in",
            conversation_id=engaged_conversation.id,
        )

        assert result.error_code == "NOT_FOUND"

    def test_item_must_match_conversation(self, engaged_conversation, seller, buyer):
        other_item = ItemFactory(seller=seller)

        result = MessageService.send(
            sender=seller,
            item_id=other_item.id,
            receiver_id=buyer.id,
            content="Wrong thread",
            conversation_id=engaged_conversation.id,
        )

        assert result.error_code == "INVALID_ARGUMENT"

    def test_receiver_must_be_other_participant(self, engaged_conversation, buyer, outsider):
        result = MessageService.send(
            sender=buyer,
            item_id=engaged_conversation.item_id,
            receiver_id=outsider.id,
            content="Misrouted",
            conversation_id=engaged_conversation.id,
        )

        assert result.error_code == "INVALID_ARGUMENT"

    def test_seller_cannot_open_conversation(self, item, seller, outsider):
        """
        Sellers reply to buyers who contacted them; they never start a thread.
        """
        result = MessageService.send(
            sender=seller, item_id=item.id, receiver_id=outsider.id, content="Want my bike?"
        )

        assert result.error_code == "INVALID_OPERATION"
        assert not Conversation.objects.exists()

    def test_database_failure_stores_nothing(self, conversation, seller, buyer):
        with mock.patch.object(Message.objects, "create", side_effect=DatabaseError("down")):
            result = MessageService.send(
                sender=seller,
                item_id=conversation.item_id,
                receiver_id=buyer.id,
                content="Hello",
            )

        assert result.error_code == "STORE_UNAVAILABLE"
        assert not Message.objects.exists()
        assert Conversation.objects.get(pk=conversation.pk).last_message == ""


class TestChatGate:
    """The buyer-waits-for-seller rule."""

    def test_buyer_blocked_before_seller_posts(self, conversation, buyer, seller):
        MessageFactory(conversation=conversation)

        result = MessageService.send(
            sender=buyer,
            item_id=conversation.item_id,
            receiver_id=seller.id,
            content="Hello again?",
            conversation_id=conversation.id,
        )

        assert result.error_code == "INVALID_OPERATION"
        assert Message.objects.count() == 1

    def test_seller_allowed_in_fresh_conversation(self, conversation, buyer, seller):
        assert MessageService.can_send(conversation, seller.id)
        assert not MessageService.can_send(conversation, buyer.id)

    def test_first_buyer_message_does_not_create_conversation(self, item, buyer, seller):
        """
        Why it matters: A rejected send must leave no empty conversation
        behind in the seller's inbox.
        """
        result = MessageService.send(
            sender=buyer, item_id=item.id, receiver_id=seller.id, content="Hello"
        )

        assert result.error_code == "INVALID_OPERATION"
        assert not Conversation.objects.exists()

    def test_outsider_can_never_send(self, engaged_conversation, outsider):
        assert not MessageService.can_send(engaged_conversation, outsider.id)

    def test_gate_disabled_lets_buyer_open_conversation(self, settings, item, buyer, seller):
        settings.CHAT_GATE_ENABLED = False

        result = MessageService.send(
            sender=buyer, item_id=item.id, receiver_id=seller.id, content="Hello"
        )

        assert result.success
        assert result.data.conversation.buyer_id == buyer.id
        assert MessageService.can_send(result.data.conversation, buyer.id)


# =============================================================================
# Read tracking
# =============================================================================


class TestMarkConversationRead:
    def test_marks_only_reader_messages(self, engaged_conversation, buyer, seller):
        result = MessageService.mark_conversation_read(engaged_conversation.id, buyer.id)

        assert result.data == 1
        assert MessageService.unread_count_for_user(buyer.id) == 0
        assert MessageService.unread_count_for_user(seller.id) == 1

    def test_repeat_is_zero_not_error(self, engaged_conversation, buyer):
        MessageService.mark_conversation_read(engaged_conversation.id, buyer.id)

        result = MessageService.mark_conversation_read(engaged_conversation.id, buyer.id)

        assert result.success
        assert result.data == 0

    def test_outsider_gets_not_found(self, engaged_conversation, outsider):
        result = MessageService.mark_conversation_read(engaged_conversation.id, outsider.id)

        assert result.error_code == "NOT_FOUND"
        assert Message.objects.filter(read=True).count() == 0

    def test_database_failure_is_retryable(self, engaged_conversation, buyer):
        with mock.patch.object(
            Message.objects, "mark_as_read", side_effect=DatabaseError("down")
        ):
            result = MessageService.mark_conversation_read(engaged_conversation.id, buyer.id)

        assert result.error_code == "STORE_UNAVAILABLE"


class TestUnreadCount:
    def test_counts_across_conversations(self, seller, buyer, outsider):
        first = ConversationFactory(item=ItemFactory(seller=seller), buyer=buyer)
        second = ConversationFactory(item=ItemFactory(seller=seller), buyer=outsider)
        MessageFactory.create_batch(2, conversation=first)
        MessageFactory(conversation=second)
        MessageFactory(conversation=second, read=True)

        assert MessageService.unread_count_for_user(seller.id) == 3

    def test_drops_by_exactly_the_marked_messages(self, seller, buyer, outsider):
        first = ConversationFactory(item=ItemFactory(seller=seller), buyer=buyer)
        second = ConversationFactory(item=ItemFactory(seller=seller), buyer=outsider)
        MessageFactory.create_batch(2, conversation=first)
        MessageFactory(conversation=second)
        before = MessageService.unread_count_for_user(seller.id)

        marked = MessageService.mark_conversation_read(first.id, seller.id).data

        assert MessageService.unread_count_for_user(seller.id) == before - marked == 1


class TestListForConversation:
    def test_returns_messages_in_order(self, engaged_conversation, buyer):
        result = MessageService.list_for_conversation(engaged_conversation.id, buyer.id)

        assert [m.content for m in result.data] == ["Is it still available?", "Yes, it is"]

    def test_outsider_gets_not_found(self, engaged_conversation, outsider):
        result = MessageService.list_for_conversation(engaged_conversation.id, outsider.id)

        assert result.error_code == "NOT_FOUND"


# =============================================================================
# InterestService
# =============================================================================


class TestExpressInterest:
    def test_opens_conversation_with_standard_message(self, item, buyer, seller):
        result = InterestService.express(item, buyer)

        assert result.success
        conversation = result.data.conversation
        assert (conversation.buyer_id, conversation.seller_id) == (buyer.id, seller.id)
        assert conversation.last_message == INTEREST_CONFIG.CONVERSATION_SUMMARY
        message = result.data.message
        assert message.content == INTEREST_CONFIG.MESSAGE_CONTENT
        assert (message.sender_id, message.receiver_id) == (buyer.id, seller.id)

    def test_repeat_reuses_conversation_and_appends(self, item, buyer):
        first = InterestService.express(item, buyer)
        second = InterestService.express(item, buyer)

        assert first.data.conversation.id == second.data.conversation.id
        assert Message.objects.filter(conversation=first.data.conversation).count() == 2
        stored = Conversation.objects.get(pk=first.data.conversation.id)
        assert stored.updated_at == second.data.message.created_at

    def test_seller_cannot_express_interest(self, item, seller):
        result = InterestService.express(item, seller)

        assert result.error_code == "INVALID_OPERATION"
        assert not Conversation.objects.exists()
        assert not Message.objects.exists()

    def test_database_failure_leaves_nothing(self, item, buyer):
        with mock.patch.object(Message.objects, "create", side_effect=DatabaseError("down")):
            result = InterestService.express(item, buyer)

        assert result.error_code == "STORE_UNAVAILABLE"
        assert not Conversation.objects.exists()


# =============================================================================
# SyncService
# =============================================================================


class TestSnapshot:
    def test_snapshot_contents(self, engaged_conversation, buyer):
        snapshot = SyncService.snapshot(buyer.id)

        assert snapshot["unreadCount"] == 1
        assert list(snapshot["conversations"]) == [engaged_conversation]
        assert snapshot["polling"] == {
            "conversationsSeconds": POLLING_CONFIG.CONVERSATIONS_SECONDS,
            "messagesSeconds": POLLING_CONFIG.MESSAGES_SECONDS,
            "unreadSeconds": POLLING_CONFIG.UNREAD_SECONDS,
        }

    def test_since_filters_stale_conversations(self, engaged_conversation, buyer):
        later = timezone.now() + timedelta(hours=1)

        snapshot = SyncService.snapshot(buyer.id, since=later)

        assert list(snapshot["conversations"]) == []
        assert snapshot["unreadCount"] == 1

    def test_since_cursor_overlaps_late_commits(self, engaged_conversation, buyer):
        """
        A conversation stamped just before the cursor still comes back.

        Why it matters: A send stamps updated_at before it commits. A poll
        running in between hands out a later serverTime, and a strict
        ``updated_at > since`` would hide that conversation until its next
        message.
        """
        cursor = SyncService.snapshot(buyer.id)["serverTime"]
        Conversation.objects.filter(pk=engaged_conversation.pk).update(
            updated_at=cursor - timedelta(seconds=1)
        )

        snapshot = SyncService.snapshot(buyer.id, since=cursor)

        assert list(snapshot["conversations"]) == [engaged_conversation]

    def test_since_cursor_overlap_is_bounded(self, engaged_conversation, buyer):
        cursor = timezone.now()
        Conversation.objects.filter(pk=engaged_conversation.pk).update(
            updated_at=cursor - timedelta(seconds=SYNC_CONFIG.CURSOR_OVERLAP_SECONDS + 5)
        )

        snapshot = SyncService.snapshot(buyer.id, since=cursor)

        assert list(snapshot["conversations"]) == []


# =============================================================================
# End-to-end scenarios
# =============================================================================


class TestMessagingScenario:
    """Interest, seller reply, buyer follow-up, then reading."""

    def test_full_flow(self, item, buyer, seller):
        opened = InterestService.express(item, buyer)
        conversation = opened.data.conversation
        assert not MessageService.can_send(conversation, buyer.id)

        again = InterestService.express(item, buyer)
        assert again.data.conversation.id == conversation.id

        reply = MessageService.send(
            sender=seller,
            item_id=item.id,
            receiver_id=buyer.id,
            content="Hi, still available",
            conversation_id=conversation.id,
        )
        assert reply.success
        assert MessageService.can_send(conversation, buyer.id)

        follow_up = MessageService.send(
            sender=buyer,
            item_id=item.id,
            receiver_id=seller.id,
            content="Great, can I see it today?",
            conversation_id=conversation.id,
        )
        assert follow_up.success

        MessageService.mark_conversation_read(conversation.id, buyer.id)
        assert MessageService.unread_count_for_user(buyer.id) == 0
        assert MessageService.unread_count_for_user(seller.id) == 3
        assert Message.objects.filter(receiver=seller, read=True).count() == 0
