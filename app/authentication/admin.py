"""
Django admin configuration for authentication models.

Related files:
    - models.py: Model definitions
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin configuration for the email-based User model.

    Toggling ``is_staff`` makes a user a marketplace admin.
    """

    list_display = (
        "email",
        "username",
        "name",
        "is_active",
        "is_staff",
        "status",
        "verified",
        "last_seen",
        "date_joined",
    )
    list_filter = (
        "status",
        "verified",
        "is_active",
        "is_staff",
        "is_superuser",
        "date_joined",
    )
    search_fields = ("email", "username", "name")
    ordering = ("-date_joined",)
    filter_horizontal = ("following", "groups", "user_permissions")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Public profile", {"fields": ("username", "name", "bio", "country", "city", "following")}),
        (
            "Status",
            {"fields": ("status", "verified", "is_active", "is_staff", "is_superuser")},
        ),
        (
            "Permissions",
            {"fields": ("groups", "user_permissions")},
        ),
        (
            "Important dates",
            {"fields": ("date_joined", "last_login", "last_seen")},
        ),
    )
    readonly_fields = ("date_joined", "last_login", "last_seen")

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "is_staff"),
            },
        ),
    )
