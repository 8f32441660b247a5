"""
Messaging service layer.

This module provides the business logic for buyer/seller messaging,
encapsulating every write to conversations and messages.

Services:
    ConversationService: Find-or-create and activity bookkeeping
    MessageService: Send, read tracking, unread counts, the chat gate
    InterestService: The "I'm interested" shortcut from a listing
    SyncService: Snapshot served to polling clients

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - A message and its conversation summary are written in one transaction;
      database failures surface as STORE_UNAVAILABLE with nothing persisted
    - Services never push live events; callers publish after success
      (see chat.realtime)

Usage:
    from chat.services import MessageService

    result = MessageService.send(
        sender=user,
        item_id=item.id,
        receiver_id=item.seller_id,
        content="Is this still available?",
    )
    if result.success:
        publish_new_message(result.data.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from chat.constants import INTEREST_CONFIG, MESSAGE_CONFIG, POLLING_CONFIG, SYNC_CONFIG
from chat.models import Conversation, Message
from core.services import BaseService, ServiceResult
from listings.models import Item

if TYPE_CHECKING:
    from datetime import datetime

    from django.db.models import QuerySet

    from authentication.models import User


@dataclass(frozen=True)
class SentMessage:
    """A stored message together with the conversation it landed in."""

    message: Message
    conversation: Conversation


# =============================================================================
# Conversations
# =============================================================================


class ConversationService(BaseService):
    """
    Service for conversation lookups and bookkeeping.

    Methods:
        find_or_create: Resolve the unique conversation for (item, buyer)
        record_activity: Refresh summary fields after a new message
        get_for_participant: Fetch a conversation the user takes part in
        list_for_user: Inbox, most recently active first
    """

    @classmethod
    def find_or_create(
        cls,
        item_id: int,
        buyer_id: int,
        seller_id: int,
    ) -> ServiceResult[Conversation]:
        """
        Return the conversation for (item, buyer), creating it if needed.

        Implementation:
            1. Reject a seller acting as buyer on their own item
            2. Look up by (item, buyer); return it unchanged if found
            3. Otherwise insert inside a savepoint; if a concurrent request
               won the race the unique constraint fires and the winner's row
               is returned instead

        Error codes:
            INVALID_OPERATION: buyer and seller are the same user
        """
        if buyer_id == seller_id:
            return ServiceResult.failure(
                "Sellers cannot express interest in their own item",
                error_code="INVALID_OPERATION",
            )

        conversation = Conversation.objects.get_by_item_and_buyer(item_id, buyer_id)
        if conversation is not None:
            return ServiceResult.success(conversation)

        try:
            with transaction.atomic():
                conversation = Conversation.objects.create(
                    item_id=item_id,
                    buyer_id=buyer_id,
                    seller_id=seller_id,
                )
        except IntegrityError:
            conversation = Conversation.objects.get_by_item_and_buyer(item_id, buyer_id)
            if conversation is None:
                raise
            cls.get_logger().debug(
                f"Lost create race for item {item_id} buyer {buyer_id}; "
                f"using conversation {conversation.id}"
            )
            return ServiceResult.success(conversation)

        cls.get_logger().info(
            f"Created conversation {conversation.id} for item {item_id} "
            f"between buyer {buyer_id} and seller {seller_id}"
        )
        return ServiceResult.success(conversation)

    @classmethod
    def record_activity(cls, conversation: Conversation, last_message: str, at: datetime) -> None:
        """Set updated_at, last_message and last_message_at to the new activity."""
        conversation.record_activity(last_message, at)

    @classmethod
    def get_for_participant(
        cls,
        conversation_id: int,
        user_id: int,
    ) -> ServiceResult[Conversation]:
        """
        Fetch a conversation the user is buyer or seller in.

        Conversations the user is not part of are reported exactly like
        missing ones so their existence is not leaked.

        Error codes:
            NOT_FOUND: No such conversation, or the user is not a participant
        """
        conversation = (
            Conversation.objects.for_user(user_id)
            .select_related("item")
            .filter(pk=conversation_id)
            .first()
        )
        if conversation is None:
            return ServiceResult.failure("Conversation not found", error_code="NOT_FOUND")
        return ServiceResult.success(conversation)

    @classmethod
    def list_for_user(cls, user_id: int) -> QuerySet[Conversation]:
        return (
            Conversation.objects.for_user(user_id)
            .with_unread_count(user_id)
            .select_related("item")
        )


# =============================================================================
# Messages
# =============================================================================


class MessageService(BaseService):
    """
    Service for message delivery and read tracking.

    Methods:
        send: Store a message and refresh its conversation
        mark_conversation_read: Flip read flags for the reader
        unread_count_for_user: Badge count across all conversations
        can_send: The chat gate
        list_for_conversation: Ordered history for a participant
    """

    @classmethod
    def send(
        cls,
        sender: User,
        item_id: int,
        receiver_id: int,
        content: str,
        conversation_id: int | None = None,
    ) -> ServiceResult[SentMessage]:
        """
        Send a message about an item.

        Conversation resolution:
            - With ``conversation_id``: that conversation, which the sender
              must take part in.
            - Without it, a buyer's message goes to (item, sender).
            - Without it, a seller's message goes to (item, receiver);
              sellers reply to existing conversations, they never open one.

        The receiver must be the other participant. When the chat gate is
        enabled a buyer can only send after the seller has posted; the gate
        is checked before anything is written, so a rejected first message
        never creates a conversation.

        Returns:
            ServiceResult with SentMessage

        Error codes:
            INVALID_ARGUMENT: Missing/empty/oversized content, wrong receiver
                or an item that does not match the conversation
            NOT_FOUND: Unknown item or conversation
            INVALID_OPERATION: Chat gate closed, or a seller with no
                conversation to reply to
            STORE_UNAVAILABLE: The database failed; nothing was stored
        """
        validation = cls.validate_required(
            item_id=item_id,
            receiver_id=receiver_id,
            content=content,
        )
        if validation is not None:
            return validation

        content = content.strip()
        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message content cannot exceed {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code="INVALID_ARGUMENT",
            )

        item = Item.objects.filter(pk=item_id).first()
        if item is None:
            return ServiceResult.failure("Item not found", error_code="NOT_FOUND")

        is_seller = sender.pk == item.seller_id
        if conversation_id is not None:
            result = ConversationService.get_for_participant(conversation_id, sender.pk)
            if not result.success:
                return result
            conversation = result.data
            if conversation.item_id != item.pk:
                return ServiceResult.failure(
                    "Item does not match the conversation",
                    error_code="INVALID_ARGUMENT",
                )
        elif is_seller:
            conversation = Conversation.objects.get_by_item_and_buyer(item.pk, receiver_id)
            if conversation is None:
                return ServiceResult.failure(
                    "Sellers can only reply to buyers who contacted them",
                    error_code="INVALID_OPERATION",
                )
        else:
            conversation = Conversation.objects.get_by_item_and_buyer(item.pk, sender.pk)

        expected_receiver = (
            conversation.other_participant_id(sender.pk)
            if conversation is not None
            else item.seller_id
        )
        if receiver_id != expected_receiver:
            return ServiceResult.failure(
                "Receiver is not the other participant of this conversation",
                error_code="INVALID_ARGUMENT",
            )

        if not cls._gate_allows(conversation, sender.pk):
            return ServiceResult.failure(
                "You can message the seller once they have replied",
                error_code="INVALID_OPERATION",
            )

        try:
            with cls.atomic():
                if conversation is None:
                    result = ConversationService.find_or_create(
                        item.pk, sender.pk, item.seller_id
                    )
                    if not result.success:
                        return result
                    conversation = result.data

                message = Message.objects.create(
                    conversation=conversation,
                    sender=sender,
                    receiver_id=receiver_id,
                    item=item,
                    content=content,
                )
                ConversationService.record_activity(
                    conversation, content, message.created_at
                )
        except DatabaseError as e:
            return cls.handle_exception(e, f"Sending message from user {sender.pk}")

        cls.get_logger().debug(
            f"User {sender.pk} sent message {message.id} to user {receiver_id} "
            f"in conversation {conversation.id}"
        )
        return ServiceResult.success(SentMessage(message=message, conversation=conversation))

    @classmethod
    def mark_conversation_read(
        cls,
        conversation_id: int,
        reader_id: int,
    ) -> ServiceResult[int]:
        """
        Mark every unread message addressed to the reader as read.

        Idempotent: with nothing unread the result is 0, not an error.
        Messages addressed to the other participant are untouched.

        Returns:
            ServiceResult with the number of messages newly marked

        Error codes:
            NOT_FOUND: Unknown conversation or reader not a participant
            STORE_UNAVAILABLE: The database failed
        """
        result = ConversationService.get_for_participant(conversation_id, reader_id)
        if not result.success:
            return result

        try:
            marked = Message.objects.mark_as_read(conversation_id, reader_id)
        except DatabaseError as e:
            return cls.handle_exception(e, f"Marking conversation {conversation_id} read")

        if marked:
            cls.get_logger().info(
                f"User {reader_id} read {marked} message(s) in conversation {conversation_id}"
            )
        return ServiceResult.success(marked)

    @classmethod
    def unread_count_for_user(cls, user_id: int) -> int:
        """Messages addressed to the user that are still unread, across all conversations."""
        return Message.objects.unread_for(user_id).count()

    @classmethod
    def can_send(cls, conversation: Conversation, user_id: int) -> bool:
        """
        Whether ``user_id`` may post into ``conversation`` right now.

        Non-participants can never send. With CHAT_GATE_ENABLED off every
        participant can send.
        """
        if not conversation.is_participant(user_id):
            return False
        return cls._gate_allows(conversation, user_id)

    @classmethod
    def list_for_conversation(
        cls,
        conversation_id: int,
        user_id: int,
    ) -> ServiceResult[QuerySet[Message]]:
        """Messages of a conversation the user takes part in, oldest first."""
        result = ConversationService.get_for_participant(conversation_id, user_id)
        if not result.success:
            return result
        return ServiceResult.success(Message.objects.for_conversation(conversation_id))

    @staticmethod
    def _gate_allows(conversation: Conversation | None, user_id: int) -> bool:
        if not settings.CHAT_GATE_ENABLED:
            return True
        if conversation is None:
            # A conversation that does not exist yet has no seller messages
            return False
        return conversation.can_send(user_id)


# =============================================================================
# Interest
# =============================================================================


class InterestService(BaseService):
    """Express interest in a listing on behalf of a buyer."""

    @classmethod
    def express(cls, item: Item, buyer: User) -> ServiceResult[SentMessage]:
        """
        Open (or reuse) the buyer's conversation about ``item`` and add the
        standard interest message addressed to the seller.

        Repeating the call reuses the same conversation, appends another
        interest message and refreshes the summary. The chat gate does not
        apply; this is how a buyer signals the seller in the first place.

        Error codes:
            INVALID_OPERATION: The buyer is the item's seller
            STORE_UNAVAILABLE: The database failed; nothing was stored
        """
        if buyer.pk == item.seller_id:
            return ServiceResult.failure(
                "Sellers cannot express interest in their own item",
                error_code="INVALID_OPERATION",
            )

        try:
            with cls.atomic():
                result = ConversationService.find_or_create(item.pk, buyer.pk, item.seller_id)
                if not result.success:
                    return result
                conversation = result.data

                message = Message.objects.create(
                    conversation=conversation,
                    sender=buyer,
                    receiver_id=item.seller_id,
                    item=item,
                    content=INTEREST_CONFIG.MESSAGE_CONTENT,
                )
                ConversationService.record_activity(
                    conversation,
                    INTEREST_CONFIG.CONVERSATION_SUMMARY,
                    message.created_at,
                )
        except DatabaseError as e:
            return cls.handle_exception(e, f"Recording interest of user {buyer.pk}")

        cls.get_logger().info(
            f"User {buyer.pk} expressed interest in item {item.pk} "
            f"(conversation {conversation.id})"
        )
        return ServiceResult.success(SentMessage(message=message, conversation=conversation))


# =============================================================================
# Polling
# =============================================================================


class SyncService(BaseService):
    """Builds the snapshot returned to polling clients."""

    @classmethod
    def snapshot(cls, user_id: int, since: datetime | None = None) -> dict:
        """
        Current inbox state for a user.

        Args:
            user_id: The polling user
            since: Cursor from a previous snapshot's serverTime. When given,
                only conversations updated after it (less
                SYNC_CONFIG.CURSOR_OVERLAP_SECONDS) are listed

        Returns:
            Dict with serverTime, unreadCount, conversations and the polling
            intervals clients should use
        """
        server_time = timezone.now()
        conversations = ConversationService.list_for_user(user_id)
        if since is not None:
            overlap = timedelta(seconds=SYNC_CONFIG.CURSOR_OVERLAP_SECONDS)
            conversations = conversations.updated_since(since - overlap)

        return {
            "serverTime": server_time,
            "unreadCount": MessageService.unread_count_for_user(user_id),
            "conversations": conversations,
            "polling": {
                "conversationsSeconds": POLLING_CONFIG.CONVERSATIONS_SECONDS,
                "messagesSeconds": POLLING_CONFIG.MESSAGES_SECONDS,
                "unreadSeconds": POLLING_CONFIG.UNREAD_SECONDS,
            },
        }
