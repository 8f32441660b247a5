"""
Client-side inbox reconciliation.

InboxState models what a connected client knows about its inbox and how it
folds together the two sources of truth it receives:

- Live events from the live channel (``message:new``, ``typing``,
  ``presence``): low latency, best effort, may be missed or duplicated.
- Poll responses from the HTTP endpoints: authoritative; each one replaces
  whatever the live events had built up for that resource.

Rules:
    - Messages are deduplicated by id, so a push followed by a poll (or a
      push delivered to two tabs' shared state) never shows a message twice.
    - A new message outside the active conversation bumps the unread badge;
      the next unread poll overwrites the badge with the server count.
    - Typing indicators expire after TYPING_CONFIG.DECAY_SECONDS unless
      refreshed; an arriving message from the typist clears it at once.
    - due_polls() names every resource whose polling interval has elapsed,
      so no view is ever more than one interval stale even with no live
      channel at all.

Time is passed in explicitly (seconds, any monotonic clock) so the state
machine is deterministic.

Usage:
    inbox = InboxState(user_id=7)
    inbox.apply_sync(sync_response, now=clock())
    inbox.apply_sync(fetch_sync(since=inbox.sync_cursor), now=clock(), delta=True)
    inbox.open_conversation(3)
    inbox.apply_event(frame, now=clock())
    for resource in inbox.due_polls(now=clock()):
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from chat.constants import EVENT_TYPES, POLLING_CONFIG, TYPING_CONFIG

logger = logging.getLogger(__name__)

CONVERSATIONS = "conversations"
MESSAGES = "messages"
UNREAD = "unread"


@dataclass
class PollingIntervals:
    """Seconds between re-fetches of each resource."""

    conversations: float = POLLING_CONFIG.CONVERSATIONS_SECONDS
    messages: float = POLLING_CONFIG.MESSAGES_SECONDS
    unread: float = POLLING_CONFIG.UNREAD_SECONDS

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> PollingIntervals:
        """Build from the ``polling`` object of a sync response."""
        return cls(
            conversations=float(payload["conversationsSeconds"]),
            messages=float(payload["messagesSeconds"]),
            unread=float(payload["unreadSeconds"]),
        )

    def for_resource(self, resource: str) -> float:
        return getattr(self, resource)


@dataclass
class InboxState:
    """
    One client's view of its inbox.

    Attributes:
        user_id: The signed-in user
        active_conversation_id: Conversation currently open, if any
        conversations: Conversation summaries keyed by id (camelCase dicts)
        messages: Messages of the active conversation, oldest first
        unread_count: Badge value
        presence: Last-seen timestamps by user id, as received
        sync_cursor: serverTime of the last sync, sent back as ``since``
    """

    user_id: int
    polling: PollingIntervals = field(default_factory=PollingIntervals)
    typing_decay: float = TYPING_CONFIG.DECAY_SECONDS

    active_conversation_id: int | None = None
    conversations: dict[int, dict[str, Any]] = field(default_factory=dict)
    messages: list[dict[str, Any]] = field(default_factory=list)
    unread_count: int = 0
    presence: dict[int, str] = field(default_factory=dict)
    sync_cursor: str | None = None

    _seen_message_ids: set[int] = field(default_factory=set, repr=False)
    _typing_until: dict[tuple[int, int], float] = field(default_factory=dict, repr=False)
    _last_polled: dict[str, float] = field(default_factory=dict, repr=False)

    # =========================================================================
    # Navigation
    # =========================================================================

    def open_conversation(self, conversation_id: int) -> None:
        """Switch the active conversation; its messages must be polled again."""
        if conversation_id == self.active_conversation_id:
            return
        self.active_conversation_id = conversation_id
        self.messages = []
        self._last_polled.pop(MESSAGES, None)

    def close_conversation(self) -> None:
        self.active_conversation_id = None
        self.messages = []
        self._last_polled.pop(MESSAGES, None)

    # =========================================================================
    # Live events
    # =========================================================================

    def apply_event(self, event: dict[str, Any], now: float) -> bool:
        """
        Fold one live channel frame into the state.

        Returns:
            True if anything visible changed
        """
        event_type = event.get("type")

        if event_type == EVENT_TYPES.MESSAGE_NEW:
            return self._apply_new_message(event["conversationId"], event["message"])
        if event_type == EVENT_TYPES.TYPING:
            return self._apply_typing(event, now)
        if event_type == EVENT_TYPES.PRESENCE:
            previous = self.presence.get(event["userId"])
            self.presence[event["userId"]] = event["lastSeen"]
            return previous != event["lastSeen"]

        # connected and anything unknown carry no inbox state
        return False

    def _apply_new_message(self, conversation_id: int, message: dict[str, Any]) -> bool:
        if message["id"] in self._seen_message_ids:
            return False
        self._seen_message_ids.add(message["id"])

        self._typing_until.pop((conversation_id, message["senderId"]), None)

        summary = self.conversations.get(conversation_id)
        if summary is not None:
            summary["lastMessage"] = message["content"]
            summary["lastMessageAt"] = message["createdAt"]
            summary["updatedAt"] = message["createdAt"]

        if conversation_id == self.active_conversation_id:
            self.messages.append(message)
            self.messages.sort(key=lambda m: (m["createdAt"], m["id"]))
            return True

        if message["receiverId"] == self.user_id and not message.get("read", False):
            self.unread_count += 1
            if summary is not None:
                summary["unreadCount"] = summary.get("unreadCount", 0) + 1
        return True

    def _apply_typing(self, event: dict[str, Any], now: float) -> bool:
        key = (event["conversationId"], event["userId"])
        if event.get("isTyping"):
            was_typing = self._is_typing(key, now)
            self._typing_until[key] = now + self.typing_decay
            return not was_typing
        return self._typing_until.pop(key, None) is not None

    def _is_typing(self, key: tuple[int, int], now: float) -> bool:
        until = self._typing_until.get(key)
        return until is not None and until > now

    def typing_users(self, conversation_id: int, now: float) -> set[int]:
        """Users currently shown as typing in a conversation; expired entries are dropped."""
        expired = [key for key, until in self._typing_until.items() if until <= now]
        for key in expired:
            del self._typing_until[key]
        return {
            user_id
            for (typing_conversation_id, user_id) in self._typing_until
            if typing_conversation_id == conversation_id
        }

    # =========================================================================
    # Poll responses
    # =========================================================================

    def apply_conversations_poll(
        self,
        conversations: list[dict[str, Any]],
        now: float,
        delta: bool = False,
    ) -> None:
        """
        Fold the server's conversation list into the summaries.

        A full list replaces every summary. A delta list (the answer to a
        ``?since=`` request) only holds conversations that changed, so it
        overwrites those by id and leaves the rest in place.
        """
        received = {c["id"]: dict(c) for c in conversations}
        if delta:
            self.conversations.update(received)
        else:
            self.conversations = received
        self._last_polled[CONVERSATIONS] = now

    def apply_messages_poll(
        self,
        conversation_id: int,
        messages: list[dict[str, Any]],
        now: float,
    ) -> bool:
        """
        Replace the active conversation's messages with the server's list.

        A response for a conversation that is no longer active is stale and
        ignored.

        Returns:
            True if the response was applied
        """
        if conversation_id != self.active_conversation_id:
            logger.debug(f"Dropping stale message poll for conversation {conversation_id}")
            return False

        self.messages = sorted(messages, key=lambda m: (m["createdAt"], m["id"]))
        self._seen_message_ids.update(m["id"] for m in messages)
        self._last_polled[MESSAGES] = now
        return True

    def apply_unread_poll(self, unread_count: int, now: float) -> None:
        self.unread_count = unread_count
        self._last_polled[UNREAD] = now

    def apply_sync(self, snapshot: dict[str, Any], now: float, delta: bool = False) -> None:
        """
        Apply a sync response: conversations, unread count and the polling
        intervals the server wants clients to use.

        Pass ``delta=True`` when the request carried ``since``. The
        response's ``serverTime`` becomes the ``since`` of the next request.
        """
        if "polling" in snapshot:
            self.polling = PollingIntervals.from_payload(snapshot["polling"])
        self.apply_conversations_poll(snapshot["conversations"], now, delta=delta)
        self.apply_unread_poll(snapshot["unreadCount"], now)
        self.sync_cursor = snapshot.get("serverTime", self.sync_cursor)

    # =========================================================================
    # Scheduling
    # =========================================================================

    def due_polls(self, now: float) -> list[str]:
        """
        Resources whose polling interval has elapsed (or that were never
        polled). Messages are only polled while a conversation is open.
        """
        resources = [CONVERSATIONS, UNREAD]
        if self.active_conversation_id is not None:
            resources.insert(1, MESSAGES)

        due = []
        for resource in resources:
            last = self._last_polled.get(resource)
            if last is None or now - last >= self.polling.for_resource(resource):
                due.append(resource)
        return due
