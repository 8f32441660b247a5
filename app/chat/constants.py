"""
Constants and configuration for the messaging module.

This module centralizes configuration values for:
- Message content limits
- Polling intervals published to clients
- The delta sync cursor overlap
- Typing indicator decay
- The express-interest system message
- Live channel close codes and event types
- Channel layer group names

Import example:
    from chat.constants import POLLING_CONFIG, EVENT_TYPES, LIVE_GROUPS
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    MAX_CONTENT_LENGTH: Final[int] = 5000  # Characters
    MIN_CONTENT_LENGTH: Final[int] = 1


# =============================================================================
# Polling Configuration
# =============================================================================


class POLLING_CONFIG:
    """
    Client re-fetch intervals, in seconds.

    Polling runs whether or not the live channel is connected, so no client
    is ever more than one interval out of date.
    """

    CONVERSATIONS_SECONDS: Final[float] = 5.0
    MESSAGES_SECONDS: Final[float] = 2.0  # Active conversation only
    UNREAD_SECONDS: Final[float] = 15.0


# =============================================================================
# Sync Configuration
# =============================================================================


class SYNC_CONFIG:
    """
    Delta sync cursor handling.

    A ``?since=`` poll also returns conversations updated up to this long
    before the cursor. A send commits after stamping ``updated_at``, so a
    poll running mid-transaction hands out a cursor later than a row it
    could not see yet. Clients merge summaries by id.
    """

    CURSOR_OVERLAP_SECONDS: Final[float] = 10.0


# =============================================================================
# Typing Configuration
# =============================================================================


class TYPING_CONFIG:
    """Typing indicators clear on the client after this long without a refresh."""

    DECAY_SECONDS: Final[float] = 2.5


# =============================================================================
# Interest Configuration
# =============================================================================


class INTEREST_CONFIG:
    """Text used when a buyer expresses interest in a listing."""

    MESSAGE_CONTENT: Final[str] = "I'm interested in this listing."
    CONVERSATION_SUMMARY: Final[str] = "Interested in this item"


# =============================================================================
# Live Channel Configuration
# =============================================================================


class CLOSE_CODES:
    """WebSocket close codes sent by the live channel."""

    UNAUTHORIZED: Final[int] = 4001


class EVENT_TYPES:
    """The ``type`` discriminator of live channel frames."""

    CONNECTED: Final[str] = "connected"
    MESSAGE_NEW: Final[str] = "message:new"
    TYPING: Final[str] = "typing"
    PRESENCE: Final[str] = "presence"
    PRESENCE_PING: Final[str] = "presence:ping"


class LIVE_GROUPS:
    """
    Channel layer groups joined by every live channel.

    Other worker processes reach this process's sockets through them.
    """

    EVERYONE: Final[str] = "live.everyone"
    USER_PREFIX: Final[str] = "live.user."
