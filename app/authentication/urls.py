"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/register/                - Create an account (pending review)
    /api/v1/auth/token/                   - Obtain JWT access/refresh pair
    /api/v1/auth/token/refresh/           - Refresh an access token
    /api/v1/auth/me/                      - Current user (GET) / edit profile (PATCH)
    /api/v1/auth/follow/                  - Follow (POST) / unfollow (DELETE)
    /api/v1/auth/users/                   - Accounts for admin review (?status=)
    /api/v1/auth/users/<id>/review/       - Approve/reject, verified badge (admin)
    /api/v1/auth/users/<id>/followers/    - Followers of a user
    /api/v1/auth/users/<id>/following/    - Users a user follows
    /api/v1/auth/users/<id>/presence/     - Last-seen timestamp
"""

from django.urls import path

from authentication.views import (
    AccountReviewView,
    AdminUserListView,
    FollowView,
    MeView,
    RegisterView,
    TokenObtainView,
    TokenRefreshView,
    UserFollowersView,
    UserFollowingView,
    UserPresenceView,
)

app_name = "authentication"

urlpatterns = [
    # Accounts and tokens
    path("register/", RegisterView.as_view(), name="register"),
    path("token/", TokenObtainView.as_view(), name="token-obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("me/", MeView.as_view(), name="me"),
    # Admin review
    path("users/", AdminUserListView.as_view(), name="user-list"),
    path("users/<int:pk>/review/", AccountReviewView.as_view(), name="user-review"),
    # Follow graph
    path("follow/", FollowView.as_view(), name="follow"),
    path("users/<int:pk>/followers/", UserFollowersView.as_view(), name="user-followers"),
    path("users/<int:pk>/following/", UserFollowingView.as_view(), name="user-following"),
    # Presence
    path("users/<int:pk>/presence/", UserPresenceView.as_view(), name="user-presence"),
]
