"""
Tests for BaseQuerySet and BaseManager.

These tests verify that:
- newest()/oldest() order by creation time with id as tie-breaker
- updated_since() only returns rows changed after the cutoff
"""

import pytest
from django.utils import timezone

from listings.models import Category, Item
from listings.tests.factories import CategoryFactory, ItemFactory


@pytest.mark.django_db
class TestBaseQuerySetOrdering:
    def test_newest_and_oldest(self):
        first = ItemFactory()
        second = ItemFactory()

        assert list(Item.objects.newest()) == [second, first]
        assert list(Item.objects.oldest()) == [first, second]

    def test_manager_exposes_queryset_methods(self):
        books = CategoryFactory(name="Books")
        bikes = CategoryFactory(name="Bikes")

        assert list(Category.objects.newest()) == [bikes, books]


@pytest.mark.django_db
class TestBaseQuerySetTimeFilters:
    def test_updated_since_excludes_unchanged(self):
        """
        Why it matters: Polling clients pass their last poll time and must
        only receive rows that changed after it.
        """
        stale = ItemFactory()
        cutoff = timezone.now()
        fresh = ItemFactory()

        assert list(Item.objects.updated_since(cutoff)) == [fresh]
        assert stale not in Item.objects.updated_since(cutoff)
