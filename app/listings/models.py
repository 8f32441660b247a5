"""
Listings models.

This module defines:
- Category: Grouping for browse filters
- Subcategory: Optional finer grouping inside a category
- Item: A listing offered by a seller, gated by admin approval

Approval state machine (Item.approval_status):
    new item by member         -> pending
    new item by admin          -> approved
    edit by owning member      -> pending (re-review)
    edit by admin on own item  -> requested or previous status, else approved
    admin decision             -> approved | rejected | pending

Related files:
    - managers.py: ItemQuerySet.visible_to
    - services.py: ItemService enforces the transitions
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.managers import BaseManager
from core.models import BaseModel
from listings.managers import ItemQuerySet


class Category(BaseModel):
    """
    A browse category (Electronics, Furniture, ...).

    Fields:
        name: Unique display name
        description: Optional blurb shown on the browse page
    """

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)

    objects = BaseManager()

    class Meta:
        verbose_name_plural = "categories"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Subcategory(BaseModel):
    """
    A narrower grouping inside a category (Electronics > Phones).

    Once a category has subcategories, new listings in it must pick one.
    """

    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name="subcategories",
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    objects = BaseManager()

    class Meta:
        verbose_name_plural = "subcategories"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["category", "name"],
                name="subcategory_unique_name_per_category",
            ),
        ]

    def __str__(self):
        return f"{self.category} > {self.name}"


class Item(BaseModel):
    """
    A marketplace listing.

    Fields:
        seller: Owning user
        category: Browse category (kept when the category is deleted)
        subcategory: Optional subcategory of ``category``
        status: Sale state (available, pending, sold)
        approval_status: Admin review state; only approved items are public
        condition: new, used or refurbished

    Note:
        Conversations reference items but never own them.
    """

    class Status(models.TextChoices):
        AVAILABLE = "available", "Available"
        PENDING = "pending", "Pending"
        SOLD = "sold", "Sold"

    class ApprovalStatus(models.TextChoices):
        PENDING = "pending", "Pending review"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    class Condition(models.TextChoices):
        NEW = "new", "New"
        USED = "used", "Used"
        REFURBISHED = "refurbished", "Refurbished"

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="items",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="items",
    )
    subcategory = models.ForeignKey(
        Subcategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="items",
    )
    title = models.CharField(max_length=200)
    description = models.TextField()
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    approval_status = models.CharField(
        max_length=20,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        db_index=True,
    )
    location = models.CharField(max_length=200, blank=True)
    condition = models.CharField(
        max_length=20,
        choices=Condition.choices,
        blank=True,
    )

    objects = ItemQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["seller", "approval_status"],
                name="item_seller_approval_idx",
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def is_approved(self) -> bool:
        return self.approval_status == self.ApprovalStatus.APPROVED
