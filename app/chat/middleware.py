"""
WebSocket authentication middleware.

Provides JWT authentication for WebSocket connections. The access token
issued by /api/v1/auth/token/ is passed as a query parameter:

    ws://host/ws/realtime/?token=<jwt_access_token>

A missing, expired or otherwise invalid token leaves an AnonymousUser in
the scope; the consumer then closes the socket without sending anything.

Related files:
    - routing.py: WebSocket URL patterns
    - consumers.py: LiveChannelConsumer
    - config/asgi.py: ASGI configuration

Usage in config/asgi.py:
    from chat.middleware import JWTAuthMiddleware

    application = ProtocolTypeRouter({
        "websocket": JWTAuthMiddleware(
            URLRouter(websocket_urlpatterns)
        ),
    })
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(BaseMiddleware):
    """
    Resolve ``?token=`` to a user and attach it as ``scope["user"]``.

    Usage:
        # Client connection
        ws = new WebSocket("ws://host/ws/realtime/?token=eyJ...")
    """

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        token = self._get_token_from_query(scope)

        if token:
            scope["user"] = await self._get_user_from_token(token)
        else:
            scope["user"] = AnonymousUser()

        return await super().__call__(scope, receive, send)

    @staticmethod
    def _get_token_from_query(scope) -> str | None:
        query_string = scope.get("query_string", b"").decode()
        token_list = parse_qs(query_string).get("token", [])
        return token_list[0] if token_list else None

    @database_sync_to_async
    def _get_user_from_token(self, token: str):
        """
        Validate a JWT access token and load its user.

        Returns:
            User instance if valid, active and approved, AnonymousUser otherwise
        """
        User = get_user_model()

        try:
            access_token = AccessToken(token)
            user_id = access_token[api_settings.USER_ID_CLAIM]
        except (TokenError, KeyError) as e:
            logger.warning(f"Invalid JWT on live channel handshake: {e}")
            return AnonymousUser()

        user = User.objects.filter(**{api_settings.USER_ID_FIELD: user_id}).first()
        if user is None:
            logger.warning(f"Live channel token for unknown user {user_id}")
            return AnonymousUser()

        if not user.is_active:
            logger.warning(f"Inactive user attempted live channel connection: {user_id}")
            return AnonymousUser()

        if not user.is_approved:
            logger.warning(f"Unapproved user attempted live channel connection: {user_id}")
            return AnonymousUser()

        return user
