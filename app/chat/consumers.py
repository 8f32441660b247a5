"""
WebSocket consumer for the live channel.

Each client opens one live channel. It carries server pushes (new messages,
typing indicators, presence) and two kinds of client frames (typing and
presence pings). Everything it carries is also recoverable by polling, so
the channel never reports errors to the client: bad frames are dropped.

Consumers:
    LiveChannelConsumer: One per open client connection

Authentication:
    Users are authenticated via JWT token passed as query parameter.
    JWTAuthMiddleware attaches the user to self.scope["user"]; an anonymous
    scope is closed with code 4001 before the handshake completes, so the
    client never receives the ``connected`` frame.

Lifecycle:
    connect:    join groups, register, send ``connected``, broadcast presence
    disconnect: broadcast presence, unregister, leave groups
    (presence also persists last_seen in the background)

Message Types (from client):
    - typing: {"type": "typing", "conversationId": 3, "isTyping": true}
    - presence:ping: {"type": "presence:ping"}

Message Types (to client):
    - connected, message:new, typing, presence (see chat.events)

Delivery:
    Code in this process reaches a consumer through the ConnectionRegistry
    and calls push(); the frame travels over the channel layer to this
    consumer's channel and is written by realtime_push(). Other processes
    reach it through the ``live.user.<id>`` and ``live.everyone`` groups.
"""

from __future__ import annotations

import asyncio
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.db import DatabaseError
from django.utils import timezone

from authentication.services import PresenceService
from chat import events
from chat.broadcast import user_group
from chat.constants import CLOSE_CODES, EVENT_TYPES, LIVE_GROUPS
from chat.models import Conversation
from chat.realtime import get_registry, get_router

logger = logging.getLogger(__name__)


class LiveChannelConsumer(AsyncJsonWebsocketConsumer):
    """
    Live channel for one authenticated client connection.

    Attributes:
        user_id: Owner of the connection (None until authenticated)
        is_open: True between accept and disconnect
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id: int | None = None
        self.is_open = False
        self._background: set[asyncio.Task] = set()

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self):
        user = self.scope.get("user")

        if not user or not user.is_authenticated:
            logger.warning("Rejected live channel handshake without valid credentials")
            await self.close(code=CLOSE_CODES.UNAUTHORIZED)
            return

        self.user_id = user.pk
        await self.accept()
        self.is_open = True

        for group in self._groups():
            await self.channel_layer.group_add(group, self.channel_name)
        get_registry().register(self)
        await self.send_json(events.connected())
        await self._announce_presence()

        logger.info(
            f"User {self.user_id} opened a live channel "
            f"({len(get_registry())} open in this process)"
        )

    async def disconnect(self, close_code):
        if self.user_id is None:
            return

        self.is_open = False
        await self._announce_presence()
        get_registry().unregister(self)
        for group in self._groups():
            await self.channel_layer.group_discard(group, self.channel_name)

        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

        logger.info(f"User {self.user_id} closed a live channel (code {close_code})")

    # =========================================================================
    # Inbound frames
    # =========================================================================

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        """Decode a text frame; anything that is not a JSON object is dropped."""
        if text_data is None:
            return

        try:
            content = await self.decode_json(text_data)
        except ValueError:
            logger.debug(f"Ignoring malformed frame from user {self.user_id}")
            return

        if not isinstance(content, dict):
            logger.debug(f"Ignoring non-object frame from user {self.user_id}")
            return

        await self.receive_json(content, **kwargs)

    async def receive_json(self, content, **kwargs):
        message_type = content.get("type")

        if message_type == EVENT_TYPES.TYPING:
            await self._handle_typing(content)
        elif message_type == EVENT_TYPES.PRESENCE_PING:
            await self._announce_presence()
        else:
            logger.debug(f"Ignoring frame of type {message_type!r} from user {self.user_id}")

    async def _handle_typing(self, content):
        """
        Relay a typing indicator to the other participant.

        Unknown conversations, conversations the sender is not part of and
        unparseable ids are ignored silently.
        """
        try:
            conversation_id = int(content.get("conversationId"))
        except (TypeError, ValueError):
            return

        conversation = await self._get_conversation(conversation_id)
        if conversation is None:
            return

        target_id = conversation.other_participant_id(self.user_id)
        await get_router().send_to_users(
            [target_id],
            events.typing(conversation_id, self.user_id, bool(content.get("isTyping"))),
        )

    # =========================================================================
    # Outbound delivery
    # =========================================================================

    async def push(self, text: str) -> None:
        """Queue an encoded frame for this connection."""
        await self.channel_layer.send(
            self.channel_name,
            {"type": "realtime.push", "text": text},
        )

    async def realtime_push(self, event):
        """
        Handle realtime.push events from the channel layer.

        Group frames sent by this process's router were already pushed to
        this connection directly and are dropped.
        """
        if not self.is_open or get_router().is_own_frame(event):
            return
        await self.send(text_data=event["text"])

    def _groups(self) -> list[str]:
        return [user_group(self.user_id), LIVE_GROUPS.EVERYONE]

    # =========================================================================
    # Presence
    # =========================================================================

    async def _announce_presence(self):
        """
        Stamp last_seen and tell every connection about it.

        The database write runs in the background so a slow store never
        delays the broadcast.
        """
        at = timezone.now()
        self._spawn(self._persist_last_seen(at))
        await get_router().send_to_all(events.presence(self.user_id, at))

    async def _persist_last_seen(self, at):
        try:
            await database_sync_to_async(PresenceService.touch)(self.user_id, at)
        except DatabaseError:
            logger.exception(f"Failed to persist last_seen for user {self.user_id}")

    def _spawn(self, coro):
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # =========================================================================
    # Database access
    # =========================================================================

    @database_sync_to_async
    def _get_conversation(self, conversation_id: int) -> Conversation | None:
        """Conversation by id, only if this user takes part in it."""
        try:
            return Conversation.objects.for_user(self.user_id).filter(pk=conversation_id).first()
        except DatabaseError:
            logger.exception(f"Failed to load conversation {conversation_id} for typing")
            return None
