"""
URL configuration for the marketplace backend.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - Accounts
        register/                  - Create an account
        token/                     - Obtain access/refresh token pair
        token/refresh/             - Refresh an access token
        me/                        - Current user
        follow/                    - Follow (POST) / unfollow (DELETE)
        users/{id}/followers/      - Who follows a user
        users/{id}/following/      - Who a user follows
        users/{id}/presence/       - Last-seen timestamp
    /api/v1/listings/              - Marketplace listings
        categories/                - Category list/create
        items/                     - Item list/create
        items/{id}/                - Item detail/update/delete
        items/{id}/interest/       - Express interest (buyer -> seller)
        items/{id}/approval/       - Approve/reject (admin)
    /api/v1/chat/                  - Messaging
        conversations/             - Conversation list, or ?conversationId= messages
        conversations/{id}/can-send/ - Chat gate check
        messages/                  - Send a message
        messages/read/             - Mark a conversation read
        unread-count/              - Unread messages for the current user
        sync/                      - Polling snapshot
    ws/realtime/?token=            - Live channel (see config.asgi)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("listings/", include("listings.urls")),
    path("chat/", include("chat.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Marketplace Admin"
admin.site.site_title = "Marketplace Admin Portal"
admin.site.index_title = "Listings, users and conversations"
