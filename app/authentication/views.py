"""
Authentication views.

This module provides API views for:
- Registration, token issuance and the current account
- Admin review of accounts
- Following other users and listing followers/following
- Presence (last-seen) lookups

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (AuthService, FollowService, PresenceService,
      AccountReviewService, ProfileService)
    - urls.py: URL routing

Note:
    Token issuance is handled by djangorestframework-simplejwt, with
    serializers that refuse accounts an admin has not approved:
    - Obtain: /api/v1/auth/token/
    - Refresh: /api/v1/auth/token/refresh/
"""

from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt import views as jwt_views

from authentication.models import User
from authentication.serializers import (
    AccountReviewSerializer,
    AdminUserSerializer,
    ApprovedTokenObtainPairSerializer,
    ApprovedTokenRefreshSerializer,
    FollowSerializer,
    PresenceSerializer,
    ProfileUpdateSerializer,
    PublicUserSerializer,
    RegisterSerializer,
    UserSerializer,
)
from authentication.services import (
    AccountReviewService,
    AuthService,
    FollowService,
    PresenceService,
    ProfileService,
)
from core.views import service_error_response, validation_error_response


# =============================================================================
# Account Views
# =============================================================================


class RegisterView(APIView):
    """
    Create an account.

    POST /api/v1/auth/register/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Register",
        tags=["Auth"],
        request=RegisterSerializer,
        responses={201: UserSerializer},
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = AuthService.register(
            email=data["email"],
            password=data["password1"],
            username=data.get("username"),
            name=data.get("name", ""),
        )
        if not result.success:
            return service_error_response(result)

        return Response(UserSerializer(result.data).data, status=status.HTTP_201_CREATED)


class MeView(APIView):
    """
    The authenticated user's own account.

    GET   /api/v1/auth/me/
    PATCH /api/v1/auth/me/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Current user", tags=["Auth"], responses={200: UserSerializer})
    def get(self, request):
        return Response(UserSerializer(request.user).data)

    @extend_schema(
        summary="Update profile",
        tags=["Auth"],
        request=ProfileUpdateSerializer,
        responses={200: UserSerializer},
    )
    def patch(self, request):
        """
        Edit name, bio, country or city.

        PATCH /api/v1/auth/me/
        """
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = ProfileService.update(request.user, serializer.validated_data)
        if not result.success:
            return service_error_response(result)

        return Response(UserSerializer(result.data).data)


class TokenObtainView(jwt_views.TokenObtainPairView):
    """
    Obtain a JWT pair.

    POST /api/v1/auth/token/

    Pending and rejected accounts get 403 ACCOUNT_NOT_APPROVED.
    """

    serializer_class = ApprovedTokenObtainPairSerializer


class TokenRefreshView(jwt_views.TokenRefreshView):
    """
    Refresh an access token.

    POST /api/v1/auth/token/refresh/
    """

    serializer_class = ApprovedTokenRefreshSerializer


# =============================================================================
# Follow Views
# =============================================================================


class FollowView(APIView):
    """
    Follow or unfollow a user.

    POST   /api/v1/auth/follow/   {"user_id": 5}
    DELETE /api/v1/auth/follow/   {"user_id": 5}
    """

    permission_classes = [IsAuthenticated]

    def _get_target(self, request) -> User:
        serializer = FollowSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return get_object_or_404(User, pk=serializer.validated_data["user_id"])

    @extend_schema(
        summary="Follow a user",
        tags=["Auth - Follow"],
        request=FollowSerializer,
        responses={201: PublicUserSerializer},
    )
    def post(self, request):
        target = self._get_target(request)
        result = FollowService.follow(request.user, target)
        if not result.success:
            return service_error_response(result)
        return Response(PublicUserSerializer(result.data).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Unfollow a user",
        tags=["Auth - Follow"],
        request=FollowSerializer,
        responses={204: None},
    )
    def delete(self, request):
        target = self._get_target(request)
        result = FollowService.unfollow(request.user, target)
        if not result.success:
            return service_error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class UserFollowersView(APIView):
    """
    Users who follow the given user.

    GET /api/v1/auth/users/{id}/followers/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List followers",
        tags=["Auth - Follow"],
        responses={200: PublicUserSerializer(many=True)},
    )
    def get(self, request, pk):
        user = get_object_or_404(User, pk=pk)
        followers = user.followers.order_by("id")
        return Response(PublicUserSerializer(followers, many=True).data)


class UserFollowingView(APIView):
    """
    Users the given user follows.

    GET /api/v1/auth/users/{id}/following/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List followed users",
        tags=["Auth - Follow"],
        responses={200: PublicUserSerializer(many=True)},
    )
    def get(self, request, pk):
        user = get_object_or_404(User, pk=pk)
        following = user.following.order_by("id")
        return Response(PublicUserSerializer(following, many=True).data)


# =============================================================================
# Presence Views
# =============================================================================


class UserPresenceView(APIView):
    """
    Last-seen timestamp for a user.

    GET /api/v1/auth/users/{id}/presence/

    Clients that have not received a live presence event (or have no live
    channel at all) use this to render "last seen" labels.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="User presence",
        tags=["Auth - Presence"],
        responses={200: PresenceSerializer},
    )
    def get(self, request, pk):
        result = PresenceService.last_seen(pk)
        if not result.success:
            return service_error_response(result)
        return Response(PresenceSerializer({"userId": pk, "lastSeen": result.data}).data)


# =============================================================================
# Admin Account Review
# =============================================================================


class AdminUserListView(generics.ListAPIView):
    """
    Accounts for the admin review queue, newest first.

    GET /api/v1/auth/users/?status=pending
    """

    permission_classes = [IsAdminUser]
    serializer_class = AdminUserSerializer
    queryset = User.objects.order_by("-date_joined", "-id")
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "verified"]

    @extend_schema(summary="List accounts", tags=["Auth - Admin"])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AccountReviewView(APIView):
    """
    Approve or reject an account, or set its verified badge.

    PUT /api/v1/auth/users/{id}/review/   {"status": "approved", "verified": true}
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        summary="Review account",
        tags=["Auth - Admin"],
        request=AccountReviewSerializer,
        responses={200: AdminUserSerializer},
    )
    def put(self, request, pk):
        account = get_object_or_404(User, pk=pk)

        serializer = AccountReviewSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = AccountReviewService.review(
            account,
            admin=request.user,
            status=serializer.validated_data.get("status"),
            verified=serializer.validated_data.get("verified"),
        )
        if not result.success:
            return service_error_response(result)

        return Response(AdminUserSerializer(result.data).data)
