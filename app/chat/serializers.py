"""
Serializers for the chat API and live channel payloads.

Field names are camelCase because the same shapes are pushed over the live
channel (``message:new``) and returned by the polling endpoints; clients
reconcile both sources against one another by message id.

Serializers:
    - MessageSerializer: A single message
    - ConversationSerializer: Conversation summary for the inbox
    - SendMessageSerializer: POST /chat/messages/ input
    - MarkReadSerializer: PUT /chat/messages/read/ input
    - ConversationQuerySerializer / SyncQuerySerializer: Query parameters
    - PollingIntervalsSerializer / SyncSerializer: Polling contract output
"""

from __future__ import annotations

from rest_framework import serializers

from chat.constants import MESSAGE_CONFIG
from chat.models import Conversation, Message


# =============================================================================
# Model Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Message representation shared by HTTP responses and live events.

    Example:
        {
            "id": 12,
            "conversationId": 3,
            "senderId": 7,
            "receiverId": 4,
            "itemId": 9,
            "content": "Is this still available?",
            "createdAt": "2026-01-05T10:15:00Z",
            "read": false
        }
    """

    conversationId = serializers.IntegerField(source="conversation_id", read_only=True)
    senderId = serializers.IntegerField(source="sender_id", read_only=True)
    receiverId = serializers.IntegerField(source="receiver_id", read_only=True)
    itemId = serializers.IntegerField(source="item_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversationId",
            "senderId",
            "receiverId",
            "itemId",
            "content",
            "createdAt",
            "read",
        ]
        read_only_fields = fields


class ConversationSerializer(serializers.ModelSerializer):
    """
    Conversation summary.

    ``unreadCount`` is only populated when the queryset was annotated with
    ``with_unread_count``; otherwise it is 0.
    """

    itemId = serializers.IntegerField(source="item_id", read_only=True)
    itemTitle = serializers.CharField(source="item.title", read_only=True)
    buyerId = serializers.IntegerField(source="buyer_id", read_only=True)
    sellerId = serializers.IntegerField(source="seller_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    lastMessage = serializers.CharField(source="last_message", read_only=True)
    lastMessageAt = serializers.DateTimeField(source="last_message_at", read_only=True)
    unreadCount = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = [
            "id",
            "itemId",
            "itemTitle",
            "buyerId",
            "sellerId",
            "createdAt",
            "updatedAt",
            "lastMessage",
            "lastMessageAt",
            "unreadCount",
        ]
        read_only_fields = fields

    def get_unreadCount(self, obj) -> int:
        return getattr(obj, "unread_count", 0)


# =============================================================================
# Input Serializers
# =============================================================================


class SendMessageSerializer(serializers.Serializer):
    """
    Input for sending a message.

    ``content`` may be blank here; the service rejects empty content with
    INVALID_ARGUMENT so the error code matches the live channel's.
    """

    itemId = serializers.IntegerField()
    receiverId = serializers.IntegerField()
    content = serializers.CharField(
        allow_blank=True,
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
    )
    conversationId = serializers.IntegerField(required=False, allow_null=True)


class MarkReadSerializer(serializers.Serializer):
    """Input for marking a conversation read."""

    conversationId = serializers.IntegerField()
    markAsRead = serializers.BooleanField()

    def validate_markAsRead(self, value):
        if not value:
            raise serializers.ValidationError("markAsRead must be true.")
        return value


class ConversationQuerySerializer(serializers.Serializer):
    conversationId = serializers.IntegerField(required=False)


class SyncQuerySerializer(serializers.Serializer):
    since = serializers.DateTimeField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================


class MarkReadResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    marked = serializers.IntegerField()


class SendMessageResponseSerializer(serializers.Serializer):
    message = MessageSerializer()
    conversation = ConversationSerializer()


class UnreadCountSerializer(serializers.Serializer):
    unreadCount = serializers.IntegerField()


class CanSendSerializer(serializers.Serializer):
    canSend = serializers.BooleanField()


class PollingIntervalsSerializer(serializers.Serializer):
    """How often clients re-fetch each resource, in seconds."""

    conversationsSeconds = serializers.FloatField()
    messagesSeconds = serializers.FloatField()
    unreadSeconds = serializers.FloatField()


class SyncSerializer(serializers.Serializer):
    """
    Polling snapshot.

    Example:
        {
            "serverTime": "2026-01-05T10:15:00Z",
            "unreadCount": 2,
            "conversations": [...],
            "polling": {"conversationsSeconds": 5.0, "messagesSeconds": 2.0, "unreadSeconds": 15.0}
        }
    """

    serverTime = serializers.DateTimeField()
    unreadCount = serializers.IntegerField()
    conversations = ConversationSerializer(many=True)
    polling = PollingIntervalsSerializer()
