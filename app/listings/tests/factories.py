"""
Factory Boy factories for listings models.

Usage:
    from listings.tests.factories import CategoryFactory, ItemFactory, SubcategoryFactory

    item = ItemFactory()                           # approved, available
    pending = ItemFactory(approval_status="pending")
    own = ItemFactory(seller=user)
    phones = SubcategoryFactory(category=electronics, name="Phones")
"""

from decimal import Decimal

import factory

from authentication.tests.factories import UserFactory
from listings.models import Category, Item, Subcategory


class CategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Category
        django_get_or_create = ("name",)

    name = factory.Sequence(lambda n: f"Category {n}")
    description = factory.Faker("sentence")


class SubcategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Subcategory
        django_get_or_create = ("category", "name")

    category = factory.SubFactory(CategoryFactory)
    name = factory.Sequence(lambda n: f"Subcategory {n}")
    description = factory.Faker("sentence")


class ItemFactory(factory.django.DjangoModelFactory):
    """
    Factory for Item model.

    Items are approved and available by default so they are visible to
    every user; pass ``approval_status`` to exercise the review workflow.
    """

    class Meta:
        model = Item

    seller = factory.SubFactory(UserFactory)
    category = factory.SubFactory(CategoryFactory)
    title = factory.Sequence(lambda n: f"Listing {n}")
    description = factory.Faker("paragraph")
    price = Decimal("25.00")
    quantity = 1
    status = Item.Status.AVAILABLE
    approval_status = Item.ApprovalStatus.APPROVED
    location = "Campus"
    condition = Item.Condition.USED
