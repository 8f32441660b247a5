"""
URL configuration for chat API.

URL Structure:
    Conversations:
        /conversations/                   GET (?conversationId=)
        /conversations/{id}/can-send/     GET

    Messages:
        /messages/                        POST
        /messages/read/                   PUT

    Polling:
        /unread-count/                    GET
        /sync/                            GET (?since=)

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
The live channel is routed separately in chat.routing.
"""

from django.urls import path

from chat.views import (
    CanSendView,
    ConversationListView,
    MarkReadView,
    SendMessageView,
    SyncView,
    UnreadCountView,
)

app_name = "chat"

urlpatterns = [
    path("conversations/", ConversationListView.as_view(), name="conversation-list"),
    path(
        "conversations/<int:pk>/can-send/",
        CanSendView.as_view(),
        name="conversation-can-send",
    ),
    path("messages/", SendMessageView.as_view(), name="message-send"),
    path("messages/read/", MarkReadView.as_view(), name="message-read"),
    path("unread-count/", UnreadCountView.as_view(), name="unread-count"),
    path("sync/", SyncView.as_view(), name="sync"),
]
