"""
Fixtures for listings tests.

Usage:
    def test_example(seller, approved_item, seller_client):
        response = seller_client.patch(f"/api/v1/listings/items/{approved_item.id}/", {...})
"""

import pytest

from authentication.tests.factories import UserFactory
from listings.tests.factories import CategoryFactory, ItemFactory


@pytest.fixture
def seller(db):
    """A regular member who sells items."""
    return UserFactory()


@pytest.fixture
def category(db):
    return CategoryFactory(name="Books")


@pytest.fixture
def approved_item(seller, category):
    return ItemFactory(seller=seller, category=category)


@pytest.fixture
def pending_item(seller, category):
    return ItemFactory(seller=seller, category=category, approval_status="pending")


@pytest.fixture
def seller_client(seller, authenticated_client_factory):
    return authenticated_client_factory(seller)


@pytest.fixture
def admin_client(admin_user, authenticated_client_factory):
    return authenticated_client_factory(admin_user)
