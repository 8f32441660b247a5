"""
Access to the process-wide registry and router, plus sync helpers for views.

The registry and router are constructed once in ChatConfig.ready() and live
for the lifetime of the process. Consumers use them directly from the event
loop; HTTP views are synchronous and go through notify_users(), which runs
the async fan-out with asgiref's async_to_sync.

Usage:
    from chat.realtime import publish_new_message

    result = MessageService.send(...)
    if result.success:
        publish_new_message(result.data.message)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from asgiref.sync import async_to_sync
from django.apps import apps

from chat import events

if TYPE_CHECKING:
    from chat.broadcast import BroadcastRouter
    from chat.models import Message
    from chat.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


def get_registry() -> ConnectionRegistry:
    return apps.get_app_config("chat").registry


def get_router() -> BroadcastRouter:
    return apps.get_app_config("chat").router


def notify_users(user_ids: Iterable[int], payload: dict[str, Any]) -> int:
    """
    Push a payload to the users' live connections from synchronous code.

    Returns:
        Number of connections reached (0 when nobody is connected)
    """
    return async_to_sync(get_router().send_to_users)(list(user_ids), payload)


def publish_new_message(message: Message) -> int:
    """Announce a stored message to its receiver."""
    delivered = notify_users([message.receiver_id], events.message_new(message))
    logger.debug(
        f"message:new {message.id} pushed to {delivered} connection(s) "
        f"of user {message.receiver_id}"
    )
    return delivered
