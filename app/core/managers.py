"""
Shared QuerySet base for time-ordered records.

Manager vs QuerySet:
    - QuerySet: Defines chainable methods (filter, exclude, etc.)
    - Manager: Attaches QuerySet to model, defines table-level operations

Usage:
    from core.managers import BaseQuerySet

    class ItemQuerySet(BaseQuerySet):
        def approved(self):
            return self.filter(approval_status="approved")

    class Item(BaseModel):
        objects = ItemQuerySet.as_manager()

    Item.objects.approved().newest()
    Message.objects.updated_since(last_poll)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

if TYPE_CHECKING:
    from datetime import date, datetime


class BaseQuerySet(models.QuerySet):
    """
    Enhanced QuerySet with common utility methods.

    Note:
        All methods assume the model has created_at and updated_at fields
        (provided by BaseModel).
    """

    def updated_since(self, since: datetime | date) -> BaseQuerySet:
        """
        Filter records updated after a given date.

        Used by polling clients to fetch only what changed since their last
        snapshot.
        """
        return self.filter(updated_at__gt=since)

    def oldest(self) -> BaseQuerySet:
        """Order by creation date ascending (oldest first)."""
        return self.order_by("created_at", "id")

    def newest(self) -> BaseQuerySet:
        """
        Order by creation date descending (newest first).

        Example:
            Item.objects.filter(seller=user).newest()[:10]
        """
        return self.order_by("-created_at", "-id")


class BaseManager(models.Manager.from_queryset(BaseQuerySet)):
    """
    Manager that exposes BaseQuerySet methods.

    Usage:
        class Category(BaseModel):
            objects = BaseManager()

        Category.objects.newest()
    """
