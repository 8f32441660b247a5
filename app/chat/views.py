"""
API views for buyer/seller messaging.

This module provides REST API endpoints for the chat system:
- ConversationListView: Inbox, or one conversation's history
- SendMessageView: Send a message (pushes message:new to the receiver)
- MarkReadView: Mark a conversation read for the caller
- UnreadCountView: Badge count
- SyncView: Polling snapshot and intervals
- CanSendView: Chat gate check for one conversation

URL Structure:
    /api/v1/chat/conversations/                  GET (?conversationId=)
    /api/v1/chat/conversations/{id}/can-send/    GET
    /api/v1/chat/messages/                       POST
    /api/v1/chat/messages/read/                  PUT
    /api/v1/chat/unread-count/                   GET
    /api/v1/chat/sync/                           GET (?since=)

Design Decisions:
    - All writes go through the service layer
    - Live pushes happen after the write has committed; a push that reaches
      nobody is fine, clients catch up by polling
    - Conversations the caller is not part of answer 404
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.realtime import publish_new_message
from chat.serializers import (
    CanSendSerializer,
    ConversationQuerySerializer,
    ConversationSerializer,
    MarkReadResponseSerializer,
    MarkReadSerializer,
    MessageSerializer,
    SendMessageResponseSerializer,
    SendMessageSerializer,
    SyncQuerySerializer,
    SyncSerializer,
    UnreadCountSerializer,
)
from chat.services import ConversationService, MessageService, SyncService
from core.views import service_error_response, validation_error_response


# =============================================================================
# Conversations
# =============================================================================


class ConversationListView(APIView):
    """
    List the caller's conversations, most recently active first.

    GET /api/v1/chat/conversations/
    GET /api/v1/chat/conversations/?conversationId=3

    With ``conversationId`` the response is that conversation's messages in
    ascending order instead.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_conversations",
        summary="List conversations or one conversation's messages",
        tags=["Chat"],
        parameters=[
            OpenApiParameter(
                "conversationId",
                OpenApiTypes.INT,
                description="Return this conversation's messages instead",
            ),
        ],
    )
    def get(self, request):
        query = ConversationQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_error_response(query.errors)

        conversation_id = query.validated_data.get("conversationId")
        if conversation_id is not None:
            result = MessageService.list_for_conversation(conversation_id, request.user.pk)
            if not result.success:
                return service_error_response(result)
            return Response(
                {
                    "conversationId": conversation_id,
                    "messages": MessageSerializer(result.data, many=True).data,
                }
            )

        conversations = ConversationService.list_for_user(request.user.pk)
        return Response(
            {"conversations": ConversationSerializer(conversations, many=True).data}
        )


class CanSendView(APIView):
    """
    Whether the caller may post into a conversation right now.

    GET /api/v1/chat/conversations/{id}/can-send/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="conversation_can_send",
        summary="Check the chat gate",
        tags=["Chat"],
        responses={200: CanSendSerializer},
    )
    def get(self, request, pk):
        result = ConversationService.get_for_participant(pk, request.user.pk)
        if not result.success:
            return service_error_response(result)

        return Response({"canSend": MessageService.can_send(result.data, request.user.pk)})


# =============================================================================
# Messages
# =============================================================================


class SendMessageView(APIView):
    """
    Send a message.

    POST /api/v1/chat/messages/

    Without ``conversationId`` the conversation is resolved from
    (itemId, caller) and created on first contact.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="send_message",
        summary="Send a message",
        tags=["Chat"],
        request=SendMessageSerializer,
        responses={201: SendMessageResponseSerializer},
    )
    def post(self, request):
        serializer = SendMessageSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        data = serializer.validated_data
        result = MessageService.send(
            sender=request.user,
            item_id=data["itemId"],
            receiver_id=data["receiverId"],
            content=data["content"],
            conversation_id=data.get("conversationId"),
        )
        if not result.success:
            return service_error_response(result)

        publish_new_message(result.data.message)

        return Response(
            {
                "message": MessageSerializer(result.data.message).data,
                "conversation": ConversationSerializer(result.data.conversation).data,
            },
            status=status.HTTP_201_CREATED,
        )


class MarkReadView(APIView):
    """
    Mark every message addressed to the caller in a conversation as read.

    PUT /api/v1/chat/messages/read/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark a conversation read",
        tags=["Chat"],
        request=MarkReadSerializer,
        responses={200: MarkReadResponseSerializer},
    )
    def put(self, request):
        serializer = MarkReadSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = MessageService.mark_conversation_read(
            serializer.validated_data["conversationId"],
            request.user.pk,
        )
        if not result.success:
            return service_error_response(result)

        return Response({"success": True, "marked": result.data})


class UnreadCountView(APIView):
    """
    Unread messages addressed to the caller.

    GET /api/v1/chat/unread-count/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="unread_count",
        summary="Unread message count",
        tags=["Chat"],
        responses={200: UnreadCountSerializer},
    )
    def get(self, request):
        return Response({"unreadCount": MessageService.unread_count_for_user(request.user.pk)})


# =============================================================================
# Polling
# =============================================================================


class SyncView(APIView):
    """
    Polling snapshot.

    GET /api/v1/chat/sync/
    GET /api/v1/chat/sync/?since=2026-01-05T10:15:00Z

    Clients poll this on the published intervals whether or not the live
    channel is connected.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="chat_sync",
        summary="Polling snapshot",
        tags=["Chat"],
        parameters=[
            OpenApiParameter(
                "since",
                OpenApiTypes.DATETIME,
                description="serverTime of a previous snapshot; only conversations updated since then are returned",
            ),
        ],
        responses={200: SyncSerializer},
    )
    def get(self, request):
        query = SyncQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_error_response(query.errors)

        snapshot = SyncService.snapshot(
            request.user.pk,
            since=query.validated_data.get("since"),
        )
        return Response(SyncSerializer(snapshot).data)
