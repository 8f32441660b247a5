"""
ASGI config for the marketplace backend.

Exposes the ASGI callable as a module-level variable named `application`.
Two protocols are served from one process:

- HTTP requests go through Django (REST endpoints, admin, schema).
- WebSocket connections on ws/realtime/ go through Django Channels and
  carry typing, presence and new-message events.

Uvicorn uses this entry point:
    uvicorn config.asgi:application --host 0.0.0.0 --port 8000

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Initialize Django before importing anything that touches models
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.security.websocket import AllowedHostsOriginValidator  # noqa: E402

from chat.middleware import JWTAuthMiddleware  # noqa: E402
from chat.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        # Origin check, then ?token= authentication, then path routing
        "websocket": AllowedHostsOriginValidator(
            JWTAuthMiddleware(URLRouter(websocket_urlpatterns))
        ),
    }
)
