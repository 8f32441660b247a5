"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation browsing
- Message moderation
"""

from django.contrib import admin

from chat.models import Conversation, Message


class MessageInline(admin.TabularInline):
    """Inline display of messages in conversation admin."""

    model = Message
    extra = 0
    fields = ["sender", "receiver", "content", "read", "created_at"]
    readonly_fields = ["created_at"]
    raw_id_fields = ["sender", "receiver"]
    ordering = ["created_at"]


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "item",
        "buyer",
        "seller",
        "last_message_at",
        "updated_at",
    ]
    list_filter = ["created_at"]
    search_fields = ["item__title", "buyer__email", "seller__email", "id"]
    readonly_fields = ["created_at", "updated_at", "last_message", "last_message_at"]
    raw_id_fields = ["item", "buyer", "seller"]
    inlines = [MessageInline]
    ordering = ["-updated_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = ["id", "conversation", "sender", "receiver", "read", "created_at"]
    list_filter = ["read", "created_at"]
    search_fields = ["content", "sender__email", "receiver__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["conversation", "sender", "receiver", "item"]
    ordering = ["-created_at"]
