"""
Tests for BroadcastRouter.

This module tests:
- send_to_users targets only the named users' connections
- send_to_all reaches every open connection
- Closed connections are skipped, failing ones do not stop delivery
- The payload is serialized once and shared by all recipients
- Frames are also sent to channel layer groups, tagged with their origin
"""

import asyncio
import json
from datetime import datetime, timezone

import pytest
from channels.layers import InMemoryChannelLayer

from chat.broadcast import BroadcastRouter, user_group
from chat.constants import LIVE_GROUPS
from chat.registry import ConnectionRegistry
from chat.tests.fakes import FakeConnection


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def router(registry):
    return BroadcastRouter(registry)


@pytest.mark.asyncio
class TestSendToUsers:
    """Tests for BroadcastRouter.send_to_users()."""

    async def test_delivers_to_every_connection_of_target(self, registry, router):
        tab_one, tab_two = FakeConnection(1), FakeConnection(1)
        registry.register(tab_one)
        registry.register(tab_two)

        delivered = await router.send_to_users([1], {"type": "message:new", "conversationId": 3})

        assert delivered == 2
        assert tab_one.frames == [{"type": "message:new", "conversationId": 3}]
        assert tab_two.frames == tab_one.frames

    async def test_never_delivers_to_other_users(self, registry, router):
        """
        Why it matters: A message:new for one participant must never leak
        to an unrelated user's socket.
        """
        target, bystander = FakeConnection(1), FakeConnection(2)
        registry.register(target)
        registry.register(bystander)

        await router.send_to_users([1], {"type": "typing"})

        assert len(target.frames) == 1
        assert bystander.frames == []

    async def test_user_without_connections_is_skipped(self, router):
        assert await router.send_to_users([42], {"type": "typing"}) == 0

    async def test_closed_connection_is_skipped(self, registry, router):
        closed = FakeConnection(1, is_open=False)
        registry.register(closed)

        delivered = await router.send_to_users([1], {"type": "typing"})

        assert delivered == 0
        assert closed.frames == []

    async def test_failing_connection_does_not_block_others(self, registry, router):
        broken, healthy = FakeConnection(1, fail=True), FakeConnection(1)
        registry.register(broken)
        registry.register(healthy)

        delivered = await router.send_to_users([1], {"type": "typing"})

        assert delivered == 1
        assert healthy.frames == [{"type": "typing"}]

    async def test_all_recipients_get_identical_text(self, registry, router):
        first, second = FakeConnection(1), FakeConnection(2)
        registry.register(first)
        registry.register(second)

        await router.send_to_users([1, 2], {"type": "message:new", "message": {"id": 7}})

        assert first.raw_frames == second.raw_frames


@pytest.mark.asyncio
class TestSendToAll:
    """Tests for BroadcastRouter.send_to_all()."""

    async def test_reaches_every_open_connection(self, registry, router):
        connections = [FakeConnection(1), FakeConnection(2), FakeConnection(3, is_open=False)]
        for connection in connections:
            registry.register(connection)

        delivered = await router.send_to_all({"type": "presence", "userId": 1})

        assert delivered == 2
        assert [len(c.frames) for c in connections] == [1, 1, 0]

    async def test_datetimes_are_encoded(self, registry, router):
        connection = FakeConnection(1)
        registry.register(connection)
        seen = datetime(2026, 1, 5, 10, 15, tzinfo=timezone.utc)

        await router.send_to_all({"type": "presence", "userId": 1, "lastSeen": seen})

        assert json.loads(connection.raw_frames[0])["lastSeen"].startswith("2026-01-05T10:15:00")

    async def test_empty_registry_sends_nothing(self, router):
        assert await router.send_to_all({"type": "presence"}) == 0


# =============================================================================
# TestChannelLayerGroups
# =============================================================================


class BrokenLayer:
    async def group_send(self, group, message):
        raise ConnectionError("redis unavailable")


@pytest.fixture
def layer():
    return InMemoryChannelLayer()


@pytest.mark.asyncio
class TestChannelLayerGroups:
    """Frames also travel to channel layer groups for other worker processes."""

    async def test_send_to_users_reaches_user_group(self, registry, layer):
        """
        Why it matters: A socket held by another worker process is only
        reachable through its user group.
        """
        router = BroadcastRouter(registry, channel_layer=layer, origin="worker-a")
        channel = await layer.new_channel()
        await layer.group_add(user_group(1), channel)

        await router.send_to_users([1], {"type": "typing"})

        assert await layer.receive(channel) == {
            "type": "realtime.push",
            "text": '{"type": "typing"}',
            "origin": "worker-a",
        }

    async def test_other_users_groups_are_not_sent_to(self, registry, layer):
        router = BroadcastRouter(registry, channel_layer=layer)
        bystander = await layer.new_channel()
        await layer.group_add(user_group(2), bystander)

        await router.send_to_users([1], {"type": "typing"})

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(layer.receive(bystander), timeout=0.1)

    async def test_send_to_all_reaches_everyone_group(self, registry, layer):
        router = BroadcastRouter(registry, channel_layer=layer)
        channel = await layer.new_channel()
        await layer.group_add(LIVE_GROUPS.EVERYONE, channel)

        await router.send_to_all({"type": "presence", "userId": 1})

        event = await layer.receive(channel)
        assert json.loads(event["text"]) == {"type": "presence", "userId": 1}
        assert router.is_own_frame(event)

    async def test_frames_from_other_routers_are_not_own(self, registry, layer):
        router = BroadcastRouter(registry, channel_layer=layer)
        other = BroadcastRouter(ConnectionRegistry(), channel_layer=layer)

        assert router.origin != other.origin
        assert not router.is_own_frame({"type": "realtime.push", "origin": other.origin})
        assert not router.is_own_frame({"type": "realtime.push", "text": "{}"})

    async def test_group_failure_does_not_stop_local_delivery(self, registry):
        connection = FakeConnection(1)
        registry.register(connection)
        router = BroadcastRouter(registry, channel_layer=BrokenLayer())

        delivered = await router.send_to_users([1], {"type": "typing"})

        assert delivered == 1
        assert connection.frames == [{"type": "typing"}]
