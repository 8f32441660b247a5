"""
Authentication models.

This module defines the marketplace account model:
- User: Email-based account carrying its review status, the follow graph and
  last-seen presence

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: FollowService and PresenceService business logic

Security:
    - User passwords hashed with Django's PBKDF2
"""

import re

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

from authentication.managers import UserManager


# Reserved usernames that cannot be used
RESERVED_USERNAMES = frozenset([
    "admin", "administrator", "root", "system", "api", "www",
    "support", "help", "about", "terms", "privacy", "security",
    "login", "logout", "register", "signup", "auth", "user", "users",
    "profile", "settings", "dashboard", "null", "undefined", "anonymous",
    "staff", "moderator", "marketplace", "listings", "items", "chat",
])


def validate_username_not_reserved(value):
    """Validate that username is not in the reserved list."""
    if value.lower() in RESERVED_USERNAMES:
        raise ValidationError(
            f"The username '{value}' is reserved and cannot be used."
        )


def validate_username_format(value):
    """Validate username format: 3-30 chars, alphanumeric + _ + -."""
    if not re.match(r"^[a-zA-Z0-9_-]{3,30}$", value):
        raise ValidationError(
            "Username must be 3-30 characters and contain only "
            "letters, numbers, underscores, and hyphens."
        )


class User(AbstractBaseUser, PermissionsMixin):
    """
    Marketplace account using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        username: Public handle shown next to listings and messages
        name: Display name
        is_active: Whether the user account is active
        is_staff: Admin flag; admins approve listings and accounts and see every item
        status: Account review state; only approved accounts get tokens
        verified: Admin-granted badge shown next to trusted sellers
        bio, country, city: Optional public profile details
        following: Users this user follows (asymmetric)
        last_seen: Last time the user was seen on the live channel
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        seller = User.objects.create_user(email="s@example.com", password="pw")
        buyer.following.add(seller)
        seller.followers.filter(pk=buyer.pk).exists()  # True
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    username = models.CharField(
        max_length=30,
        unique=True,
        null=True,
        blank=True,
        validators=[validate_username_format, validate_username_not_reserved],
        help_text="Public handle (3-30 chars, letters, numbers, _ and -)",
    )
    name = models.CharField(
        max_length=150,
        blank=True,
        help_text="Display name",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Marketplace administrator (approves listings, admin site access).",
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        help_text="Account review state. Only approved accounts can sign in.",
    )
    verified = models.BooleanField(
        default=False,
        help_text="Admin-granted verified badge",
    )

    bio = models.TextField(max_length=500, blank=True)
    country = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)

    following = models.ManyToManyField(
        "self",
        symmetrical=False,
        related_name="followers",
        blank=True,
        help_text="Users this user follows",
    )
    last_seen = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last activity on the live channel",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    @property
    def is_approved(self) -> bool:
        return self.status == self.Status.APPROVED

    @property
    def is_admin(self) -> bool:
        """Marketplace admins are staff accounts."""
        return self.is_staff

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.username or self.email.split("@")[0]

    def is_followed_by(self, other) -> bool:
        """Whether ``other`` follows this user."""
        return self.followers.filter(pk=other.pk).exists()
