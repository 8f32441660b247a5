"""
Test configuration and fixtures for chat tests.

This module provides:
- Buyer/seller fixtures around one approved item
- Conversation fixtures with and without a seller reply
- API client helpers for both participants
- A clean connection registry for every test

Usage:
    def test_example(conversation, buyer_client):
        response = buyer_client.get(f"/api/v1/chat/conversations/?conversationId={conversation.id}")
        assert response.status_code == 200
"""

import pytest

from authentication.tests.factories import UserFactory
from chat.tests.factories import ConversationFactory, MessageFactory
from listings.tests.factories import ItemFactory


@pytest.fixture(autouse=True)
def _clean_registry(live_registry):
    """Every chat test starts and ends with no live connections."""
    yield


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def seller(db):
    """The user who listed the item."""
    return UserFactory()


@pytest.fixture
def buyer(db):
    """A user asking about the item."""
    return UserFactory()


@pytest.fixture
def outsider(db):
    """A user who is not part of any test conversation."""
    return UserFactory()


# =============================================================================
# Item and Conversation Fixtures
# =============================================================================


@pytest.fixture
def item(seller):
    return ItemFactory(seller=seller, title="Road bike")


@pytest.fixture
def conversation(item, buyer):
    """A conversation opened by the buyer; the seller has not replied."""
    return ConversationFactory(item=item, buyer=buyer)


@pytest.fixture
def engaged_conversation(conversation):
    """A conversation where the buyer asked and the seller replied."""
    MessageFactory(conversation=conversation, content="Is it still available?")
    MessageFactory(conversation=conversation, from_seller=True, content="Yes, it is")
    return conversation


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def buyer_client(buyer, authenticated_client_factory):
    return authenticated_client_factory(buyer)


@pytest.fixture
def seller_client(seller, authenticated_client_factory):
    return authenticated_client_factory(seller)


@pytest.fixture
def outsider_client(outsider, authenticated_client_factory):
    return authenticated_client_factory(outsider)
