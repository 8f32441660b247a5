"""
Messaging models.

This module defines the persistent side of buyer/seller messaging:
- Conversation: The unique thread between one buyer and one seller about one item
- Message: A chat line inside a conversation, with a recipient-side read flag

Invariants:
    - At most one Conversation per (item, buyer); enforced by a unique
      constraint so concurrent first contacts converge on one row.
    - Message.read only ever goes from False to True.
    - Conversation.last_message / last_message_at are a cache of the newest
      message; the Message table is the source of truth.

Related files:
    - services.py: ConversationService, MessageService, InterestService
    - registry.py / broadcast.py: Live delivery (not persisted)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Count, Q

from core.managers import BaseQuerySet
from core.models import BaseModel

if TYPE_CHECKING:
    from datetime import datetime


# =============================================================================
# QuerySets
# =============================================================================


class ConversationQuerySet(BaseQuerySet):
    """
    Conversation lookups.

    Usage:
        Conversation.objects.get_by_item_and_buyer(item_id, buyer_id)
        Conversation.objects.for_user(user_id)
    """

    def get_by_item_and_buyer(self, item_id: int, buyer_id: int) -> Conversation | None:
        return self.filter(item_id=item_id, buyer_id=buyer_id).first()

    def for_user(self, user_id: int) -> ConversationQuerySet:
        """Conversations where the user is buyer or seller, most recently active first."""
        return self.filter(Q(buyer_id=user_id) | Q(seller_id=user_id)).order_by(
            "-updated_at", "-id"
        )

    def with_unread_count(self, user_id: int) -> ConversationQuerySet:
        """Annotate ``unread_count``: messages to ``user_id`` not yet read."""
        return self.annotate(
            unread_count=Count(
                "messages",
                filter=Q(messages__receiver_id=user_id, messages__read=False),
            )
        )


class MessageQuerySet(BaseQuerySet):
    """
    Message lookups and the read-tracking update.

    Usage:
        Message.objects.for_conversation(conversation_id)
        Message.objects.unread_for(user_id).count()
        Message.objects.mark_as_read(conversation_id, reader_id)
    """

    def for_conversation(self, conversation_id: int) -> MessageQuerySet:
        """Messages in insertion order (ascending created_at)."""
        return self.filter(conversation_id=conversation_id).order_by("created_at", "id")

    def unread_for(self, user_id: int) -> MessageQuerySet:
        return self.filter(receiver_id=user_id, read=False)

    def mark_as_read(self, conversation_id: int, receiver_id: int) -> int:
        """
        Flip read to True for the reader's unread messages in a conversation.

        Returns:
            Number of messages newly marked (0 when nothing was unread)
        """
        return self.filter(
            conversation_id=conversation_id,
            receiver_id=receiver_id,
            read=False,
        ).update(read=True)


# =============================================================================
# Models
# =============================================================================


class Conversation(BaseModel):
    """
    All messages between one buyer and one seller about one item.

    Fields:
        item: The listing being discussed
        buyer: The user who opened contact
        seller: The item's seller at the time of first contact
        last_message: Body of the most recent message (denormalized)
        last_message_at: When the most recent message was sent
        updated_at: Bumped on every new message
    """

    item = models.ForeignKey(
        "listings.Item",
        on_delete=models.CASCADE,
        related_name="conversations",
    )
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="buying_conversations",
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="selling_conversations",
    )
    last_message = models.TextField(blank=True, default="")
    last_message_at = models.DateTimeField(null=True, blank=True)

    objects = ConversationQuerySet.as_manager()

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "buyer"],
                name="unique_conversation_per_item_buyer",
            ),
        ]

    def __str__(self):
        return f"Conversation {self.pk} (item {self.item_id}, buyer {self.buyer_id})"

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.buyer_id, self.seller_id)

    def other_participant_id(self, user_id: int) -> int:
        """The participant who is not ``user_id``."""
        return self.seller_id if user_id == self.buyer_id else self.buyer_id

    def seller_has_engaged(self) -> bool:
        """Whether the seller has sent at least one message here."""
        return self.messages.filter(sender_id=self.seller_id).exists()

    def can_send(self, user_id: int) -> bool:
        """
        Chat gate: sellers may always send; buyers only once the seller has
        posted in the conversation.
        """
        return user_id == self.seller_id or self.seller_has_engaged()

    def record_activity(self, last_message: str, at: datetime) -> None:
        """
        Refresh the summary fields after a message is stored.

        Writes ``updated_at`` explicitly with a queryset update because the
        field is auto_now and would otherwise be replaced by save().
        """
        Conversation.objects.filter(pk=self.pk).update(
            updated_at=at,
            last_message=last_message,
            last_message_at=at,
        )
        self.updated_at = at
        self.last_message = last_message
        self.last_message_at = at


class Message(BaseModel):
    """
    One chat line.

    Content is immutable once created; only the recipient-side ``read`` flag
    changes, and only from False to True.
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    item = models.ForeignKey(
        "listings.Item",
        on_delete=models.CASCADE,
        related_name="messages",
    )
    content = models.TextField()
    read = models.BooleanField(default=False)

    objects = MessageQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["conversation", "created_at"],
                name="message_conversation_idx",
            ),
            # Unread badge polling only ever scans unread rows
            models.Index(
                fields=["receiver"],
                condition=Q(read=False),
                name="message_unread_idx",
            ),
        ]

    def __str__(self):
        return f"Message {self.pk} in conversation {self.conversation_id}"
