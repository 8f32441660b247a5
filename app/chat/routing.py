"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/realtime/ - The per-client live channel (new messages, typing, presence)

Authentication:
    JWT token should be passed as query parameter: ?token=<jwt_access_token>
    JWTAuthMiddleware validates the token and attaches the user to the
    consumer's scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/realtime/", consumers.LiveChannelConsumer.as_asgi()),
]
