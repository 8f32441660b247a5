"""
Authentication services.

This module provides the account-level business logic:
- AuthService: Account registration
- FollowService: Asymmetric follow graph (who follows whom)
- PresenceService: Last-seen timestamps written by the live channel
- AccountReviewService: Admin approval of accounts and the verified badge
- ProfileService: Self-service profile edits

Related files:
    - models.py: User
    - chat/consumers.py: Touches presence on connect, ping and disconnect
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import IntegrityError

from authentication.models import User
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from datetime import datetime


class AuthService(BaseService):
    """
    Account creation.

    Usage:
        result = AuthService.register("buyer@example.com", "s3cret-pass", username="buyer")
        if result.success:
            user = result.data
    """

    @classmethod
    def register(
        cls,
        email: str,
        password: str,
        username: str | None = None,
        name: str = "",
    ) -> ServiceResult[User]:
        """
        Create a regular (non-admin) account.

        Returns:
            ServiceResult with the created user, CONFLICT if the email or
            username is taken
        """
        email = User.objects.normalize_email(email).strip()
        if User.objects.filter(email__iexact=email).exists():
            return ServiceResult.failure("Email already registered", error_code="CONFLICT")

        if username:
            username = username.strip().lower()
            if User.objects.filter(username=username).exists():
                return ServiceResult.failure("Username already taken", error_code="CONFLICT")

        try:
            with cls.atomic():
                user = User.objects.create_user(
                    email=email,
                    password=password,
                    username=username or None,
                    name=name.strip(),
                )
        except IntegrityError:
            return ServiceResult.failure("Account already exists", error_code="CONFLICT")

        cls.get_logger().info(f"Registered user {user.id}")
        return ServiceResult.success(user)


class FollowService(BaseService):
    """
    Maintains the follow graph.

    Following is asymmetric: ``a`` following ``b`` says nothing about ``b``
    following ``a``.
    """

    @classmethod
    def follow(cls, user: User, target: User) -> ServiceResult[User]:
        """
        Make ``user`` follow ``target``.

        Returns:
            ServiceResult with the target, INVALID_OPERATION for self-follow,
            CONFLICT when already following
        """
        if user.pk == target.pk:
            return ServiceResult.failure(
                "You cannot follow yourself",
                error_code="INVALID_OPERATION",
            )

        if user.following.filter(pk=target.pk).exists():
            return ServiceResult.failure(
                "Already following this user",
                error_code="CONFLICT",
            )

        user.following.add(target)
        cls.get_logger().info(f"User {user.id} followed user {target.id}")
        return ServiceResult.success(target)

    @classmethod
    def unfollow(cls, user: User, target: User) -> ServiceResult[User]:
        """
        Remove ``target`` from the users ``user`` follows.

        Returns:
            ServiceResult with the target, CONFLICT when not following
        """
        if not user.following.filter(pk=target.pk).exists():
            return ServiceResult.failure(
                "Not following this user",
                error_code="CONFLICT",
            )

        user.following.remove(target)
        cls.get_logger().info(f"User {user.id} unfollowed user {target.id}")
        return ServiceResult.success(target)


class PresenceService(BaseService):
    """Reads and writes the last-seen timestamp used for presence."""

    @classmethod
    def touch(cls, user_id: int, at: datetime) -> bool:
        """
        Persist ``at`` as the user's last-seen time.

        Uses a single UPDATE so concurrent writes from several tabs never
        clobber unrelated fields.

        Returns:
            True if the user exists
        """
        updated = User.objects.filter(pk=user_id).update(last_seen=at)
        return updated > 0

    @classmethod
    def last_seen(cls, user_id: int) -> ServiceResult[datetime | None]:
        """Look up a user's last-seen timestamp (None if never seen)."""
        row = User.objects.filter(pk=user_id).values("last_seen").first()
        if row is None:
            return ServiceResult.failure("User not found", error_code="NOT_FOUND")
        return ServiceResult.success(row["last_seen"])


class AccountReviewService(BaseService):
    """
    Admin review of accounts.

    New accounts start pending and cannot obtain tokens until an admin
    approves them. Rejecting an account locks it out again.
    """

    @classmethod
    def review(
        cls,
        user: User,
        admin: User,
        status: str | None = None,
        verified: bool | None = None,
    ) -> ServiceResult[User]:
        """
        Set an account's review status and/or verified badge.

        Returns:
            ServiceResult with the updated user, PERMISSION_DENIED for
            non-admins, INVALID_ARGUMENT when nothing valid was given,
            INVALID_OPERATION when an admin changes their own status
        """
        if not admin.is_admin:
            return ServiceResult.failure(
                "Only admins can review accounts",
                error_code="PERMISSION_DENIED",
            )

        if status is None and verified is None:
            return ServiceResult.failure(
                "No valid updates provided",
                error_code="INVALID_ARGUMENT",
                errors={"status": ["Provide status or verified."]},
            )

        if status is not None and status not in User.Status.values:
            return ServiceResult.failure(
                f"Unknown account status: {status}",
                error_code="INVALID_ARGUMENT",
                errors={"status": [f"Must be one of {', '.join(User.Status.values)}."]},
            )

        if status is not None and user.pk == admin.pk and status != user.status:
            return ServiceResult.failure(
                "You cannot change your own account status",
                error_code="INVALID_OPERATION",
            )

        update_fields = ["updated_at"]
        if status is not None:
            user.status = status
            update_fields.append("status")
        if verified is not None:
            user.verified = verified
            update_fields.append("verified")
        user.save(update_fields=update_fields)

        cls.get_logger().info(
            f"Admin {admin.id} reviewed user {user.id}: status={user.status} verified={user.verified}"
        )
        return ServiceResult.success(user)


class ProfileService(BaseService):
    """Self-service profile edits. The email and username never change here."""

    EDITABLE_FIELDS = ("name", "bio", "country", "city")

    @classmethod
    def update(cls, user: User, data: dict) -> ServiceResult[User]:
        changes = {field: data[field] for field in cls.EDITABLE_FIELDS if field in data}
        if not changes:
            return ServiceResult.success(user)

        for field, value in changes.items():
            setattr(user, field, value.strip())
        user.save(update_fields=[*changes, "updated_at"])

        cls.get_logger().info(f"User {user.id} updated profile fields {sorted(changes)}")
        return ServiceResult.success(user)
