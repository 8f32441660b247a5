"""
Chat application configuration.

This app provides buyer/seller messaging with:
- One conversation per (item, buyer)
- Recipient-side read tracking and unread counts
- A live channel for new-message, typing and presence events
- A polling contract that keeps clients consistent without the live channel
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """
    Configuration for the chat application.

    Owns the process-wide ConnectionRegistry and BroadcastRouter; both are
    created once when the app registry is ready.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    def ready(self):
        from chat.broadcast import BroadcastRouter
        from chat.registry import ConnectionRegistry

        self.registry = ConnectionRegistry()
        self.router = BroadcastRouter(self.registry)
