"""
Serializers for authentication models.

This module provides DRF serializers for:
- User model (self view, public view and admin view)
- Registration, profile edits and admin account review
- JWT issuance restricted to approved accounts
- Follow requests
- Presence lookups

Related files:
    - models.py: User
    - views.py: Views that use these serializers
    - services.py: AuthService, FollowService, PresenceService,
      AccountReviewService, ProfileService

Security:
    - Password fields are write-only
    - Email is only exposed to the account owner and to admins
"""

from rest_framework import exceptions, serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.settings import api_settings

from authentication.models import (
    User,
    validate_username_format,
    validate_username_not_reserved,
)
from core.exceptions import AccountNotApprovedError


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for the authenticated user's own account.

    Used by /api/v1/auth/me/ and registration responses.
    """

    is_admin = serializers.BooleanField(read_only=True)
    followers_count = serializers.SerializerMethodField()
    following_count = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "name",
            "bio",
            "country",
            "city",
            "status",
            "verified",
            "is_admin",
            "followers_count",
            "following_count",
            "last_seen",
            "date_joined",
        ]
        read_only_fields = fields

    def get_followers_count(self, obj):
        return obj.followers.count()

    def get_following_count(self, obj):
        return obj.following.count()


class PublicUserSerializer(serializers.ModelSerializer):
    """Serializer for other users (follower lists, listing sellers)."""

    class Meta:
        model = User
        fields = ["id", "username", "name", "bio", "country", "city", "verified", "last_seen"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """
    Serializer for user registration.

    Uniqueness is enforced by AuthService.register so concurrent sign-ups
    surface as CONFLICT rather than a validation error.
    """

    email = serializers.EmailField(required=True)
    username = serializers.CharField(
        required=False,
        validators=[validate_username_format, validate_username_not_reserved],
        help_text="Unique username (3-30 chars, alphanumeric + _ + -)",
    )
    name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    password1 = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Password must be at least 8 characters.",
    )
    password2 = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Confirm your password.",
    )

    def validate_email(self, value):
        return value.lower().strip()

    def validate(self, attrs):
        """Validate that passwords match."""
        if attrs["password1"] != attrs["password2"]:
            raise serializers.ValidationError({"password2": "Passwords do not match."})
        return attrs


class FollowSerializer(serializers.Serializer):
    """Request body for follow/unfollow."""

    user_id = serializers.IntegerField(
        min_value=1,
        help_text="ID of the user to follow or unfollow",
    )


class PresenceSerializer(serializers.Serializer):
    """Last-seen timestamp for one user, in the live channel's field names."""

    userId = serializers.IntegerField()
    lastSeen = serializers.DateTimeField(allow_null=True)


class AdminUserSerializer(serializers.ModelSerializer):
    """Account as shown in the admin review queue."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "name",
            "status",
            "verified",
            "is_staff",
            "date_joined",
        ]
        read_only_fields = fields


class AccountReviewSerializer(serializers.Serializer):
    """Request body for PUT /api/v1/auth/users/{id}/review/."""

    status = serializers.ChoiceField(choices=User.Status.choices, required=False)
    verified = serializers.BooleanField(required=False)


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may change on their own account."""

    class Meta:
        model = User
        fields = ["name", "bio", "country", "city"]


# =============================================================================
# Token Serializers
# =============================================================================


def ensure_account_approved(user: User) -> None:
    """
    Refuse tokens to accounts an admin has not approved.

    Raises:
        PermissionDenied: 403 with ``error_code`` ACCOUNT_NOT_APPROVED and
            the account's ``status`` in ``details``
    """
    if user.is_approved:
        return

    if user.status == User.Status.REJECTED:
        message = "Your account has been rejected. Please contact support."
    else:
        message = "Your account is pending admin approval."
    error = AccountNotApprovedError(message, details={"status": user.status})
    raise exceptions.PermissionDenied(error.to_dict())


class ApprovedTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT pair for approved accounts.

    Credentials are checked first, so a wrong password answers 401 whatever
    the account's review status.
    """

    @classmethod
    def get_token(cls, user):
        ensure_account_approved(user)
        return super().get_token(user)


class ApprovedTokenRefreshSerializer(TokenRefreshSerializer):
    """Refresh that stops working once an account is rejected."""

    def validate(self, attrs):
        refresh = self.token_class(attrs["refresh"])
        user_id = refresh.payload.get(api_settings.USER_ID_CLAIM)
        user = User.objects.filter(**{api_settings.USER_ID_FIELD: user_id}).first()
        if user is not None:
            ensure_account_approved(user)
        return super().validate(attrs)
