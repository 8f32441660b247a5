"""
Fan-out of live events to registered connections.

BroadcastRouter serializes a payload once and pushes the same frame to
every matching open connection concurrently. Delivery is best effort: a
failing connection is logged and skipped, it never stops delivery to the
others and never raises to the caller.

Two paths carry each frame:
    - Local: connections in this process's ConnectionRegistry are pushed
      to directly.
    - Channel layer: the frame is also sent to the matching groups
      (``live.user.<id>`` or ``live.everyone``), tagged with this router's
      origin. Consumers in other worker processes write it; consumers in
      this process already got it locally and drop it.

Usage:
    router = BroadcastRouter(registry)
    await router.send_to_users([seller_id, buyer_id], payload)
    await router.send_to_all(presence_payload)
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, Iterable

from channels.layers import get_channel_layer
from django.core.serializers.json import DjangoJSONEncoder

from chat.constants import LIVE_GROUPS
from chat.registry import ConnectionRegistry, LiveConnection

logger = logging.getLogger(__name__)

PUSH_EVENT = "realtime.push"


def user_group(user_id: int) -> str:
    """Channel layer group holding every live channel of one user."""
    return f"{LIVE_GROUPS.USER_PREFIX}{user_id}"


class BroadcastRouter:
    """
    Pushes payloads to connections found in a ConnectionRegistry and to
    the matching channel layer groups.

    Attributes:
        registry: Connections open in this process
        origin: Tag on group frames sent by this router; one per process
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        channel_layer=None,
        origin: str | None = None,
    ):
        self.registry = registry
        self._channel_layer = channel_layer
        self.origin = origin or uuid.uuid4().hex

    @property
    def channel_layer(self):
        if self._channel_layer is not None:
            return self._channel_layer
        return get_channel_layer()

    @staticmethod
    def encode(payload: dict[str, Any]) -> str:
        return json.dumps(payload, cls=DjangoJSONEncoder)

    async def send_to_users(self, user_ids: Iterable[int], payload: dict[str, Any]) -> int:
        """
        Push a payload to every open connection of the given users.

        Users without connections are skipped silently.

        Returns:
            Number of connections in this process the frame was delivered to
        """
        user_ids = set(user_ids)
        text = self.encode(payload)
        connections = self.registry.connections_for(user_ids)
        delivered = await self._deliver(connections, payload, text)
        await self._group_send([user_group(user_id) for user_id in user_ids], payload, text)
        return delivered

    async def send_to_all(self, payload: dict[str, Any]) -> int:
        """Push a payload to every open connection."""
        text = self.encode(payload)
        connections = self.registry.all_connections()
        delivered = await self._deliver(connections, payload, text)
        await self._group_send([LIVE_GROUPS.EVERYONE], payload, text)
        return delivered

    def is_own_frame(self, event: dict[str, Any]) -> bool:
        """True for a group frame this router already delivered locally."""
        return event.get("origin") == self.origin

    # =========================================================================
    # Delivery
    # =========================================================================

    async def _deliver(
        self,
        connections: list[LiveConnection],
        payload: dict[str, Any],
        text: str,
    ) -> int:
        targets = [connection for connection in connections if connection.is_open]
        if not targets:
            return 0

        results = await asyncio.gather(
            *(connection.push(text) for connection in targets),
            return_exceptions=True,
        )

        delivered = 0
        for connection, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning(
                    f"Failed to push {payload.get('type')} to user {connection.user_id}: {result}"
                )
            else:
                delivered += 1
        return delivered

    async def _group_send(self, groups: list[str], payload: dict[str, Any], text: str) -> None:
        layer = self.channel_layer
        if layer is None or not groups:
            return

        event = {"type": PUSH_EVENT, "text": text, "origin": self.origin}
        results = await asyncio.gather(
            *(layer.group_send(group, event) for group in groups),
            return_exceptions=True,
        )

        for group, result in zip(groups, results):
            if isinstance(result, Exception):
                logger.warning(f"Failed to send {payload.get('type')} to group {group}: {result}")
