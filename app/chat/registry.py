"""
In-process registry of live channel connections.

The registry maps a user id to the set of that user's open connections in
this process. A user may have several connections at once (two tabs, phone
and laptop); each is tracked separately and removed separately.

Thread Safety:
    Consumers run on the ASGI event loop while HTTP views run in worker
    threads, so every mutation and read happens under a lock. Readers get
    snapshots, never the live sets.

Usage:
    from chat.realtime import get_registry

    registry = get_registry()
    registry.register(consumer)
    registry.connections_for(user_id)
    registry.unregister(consumer)

Related files:
    - broadcast.py: Fans payloads out to registered connections
    - consumers.py: LiveChannelConsumer registers itself on connect
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Iterable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class LiveConnection(Protocol):
    """
    What the registry and router need from a connection.

    Attributes:
        user_id: Authenticated owner of the connection
        is_open: False once the socket has started closing
    """

    user_id: int
    is_open: bool

    async def push(self, text: str) -> None:
        """Deliver an already-serialized frame to the client."""
        ...


class ConnectionRegistry:
    """
    user id -> set of live connections.

    Invariants:
        - A connection appears under exactly one user id (its own).
        - A user id with no connections is removed from the map.
        - unregister() of an unknown connection is a no-op.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._connections: dict[int, set[LiveConnection]] = defaultdict(set)

    def register(self, connection: LiveConnection) -> None:
        """Track a connection under its user id."""
        with self._lock:
            self._connections[connection.user_id].add(connection)
            count = len(self._connections[connection.user_id])

        logger.debug(f"Registered connection for user {connection.user_id} ({count} open)")

    def unregister(self, connection: LiveConnection) -> None:
        """Stop tracking a connection. Safe to call more than once."""
        with self._lock:
            connections = self._connections.get(connection.user_id)
            if not connections or connection not in connections:
                return
            connections.discard(connection)
            if not connections:
                del self._connections[connection.user_id]

        logger.debug(f"Unregistered connection for user {connection.user_id}")

    def connections_for(self, user_ids: Iterable[int]) -> list[LiveConnection]:
        """Snapshot of every connection owned by any of ``user_ids``."""
        with self._lock:
            return [
                connection
                for user_id in set(user_ids)
                for connection in self._connections.get(user_id, ())
            ]

    def all_connections(self) -> list[LiveConnection]:
        """Snapshot of every registered connection."""
        with self._lock:
            return [
                connection
                for connections in self._connections.values()
                for connection in connections
            ]

    def clear(self) -> None:
        with self._lock:
            self._connections.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(connections) for connections in self._connections.values())
