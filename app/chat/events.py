"""
Builders for live channel frames.

Every frame is a JSON object with a ``type`` discriminator:

    {"type": "connected"}
    {"type": "message:new", "conversationId": 3, "itemId": 9, "message": {...}}
    {"type": "typing", "conversationId": 3, "userId": 7, "isTyping": true}
    {"type": "presence", "userId": 7, "lastSeen": "2026-01-05T10:15:00Z"}

Timestamps are rendered the same way DRF renders them in HTTP responses so
live and polled copies of the same record compare equal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rest_framework import serializers

from chat.constants import EVENT_TYPES
from chat.serializers import MessageSerializer

if TYPE_CHECKING:
    from datetime import datetime

    from chat.models import Message

_timestamp = serializers.DateTimeField()


def connected() -> dict[str, Any]:
    return {"type": EVENT_TYPES.CONNECTED}


def message_new(message: Message) -> dict[str, Any]:
    return {
        "type": EVENT_TYPES.MESSAGE_NEW,
        "conversationId": message.conversation_id,
        "itemId": message.item_id,
        "message": MessageSerializer(message).data,
    }


def typing(conversation_id: int, user_id: int, is_typing: bool) -> dict[str, Any]:
    return {
        "type": EVENT_TYPES.TYPING,
        "conversationId": conversation_id,
        "userId": user_id,
        "isTyping": is_typing,
    }


def presence(user_id: int, last_seen: datetime) -> dict[str, Any]:
    return {
        "type": EVENT_TYPES.PRESENCE,
        "userId": user_id,
        "lastSeen": _timestamp.to_representation(last_seen),
    }
