"""
Chat app for buyer/seller messaging.

This app handles:
- Conversations (one per item and buyer)
- Message sending, history and read tracking
- The chat gate (buyers wait for the seller's first message)
- The live channel: message:new, typing and presence pushes
- Polling snapshots that bound staleness when the live channel is down

Related apps:
    - authentication: User model and last_seen
    - listings: Items that conversations are about

WebSocket Support:
    Uses Django Channels for the live channel.
    See consumers.py for the consumer and routing.py for URL patterns.
    Connections are tracked in-process by registry.ConnectionRegistry and
    fanned out by broadcast.BroadcastRouter (both owned by ChatConfig).

Usage:
    from chat.services import MessageService

    result = MessageService.send(
        sender=buyer,
        item_id=item.id,
        receiver_id=item.seller_id,
        content="Is this still available?",
    )
"""
