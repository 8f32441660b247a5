"""
Django app configuration for listings.
"""

from django.apps import AppConfig


class ListingsConfig(AppConfig):
    """Configuration for categories, items and the approval workflow."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "listings"
    verbose_name = "Listings"
