"""
Tests for listings API views.

This module tests:
- Browsing visibility and filters
- Create/update/delete through the approval workflow
- POST /items/{id}/interest/ (express interest, message:new to the seller)
- PUT /items/{id}/approval/ (admin review)
- Category and subcategory permissions
- Subcategory rules on listing create/edit

Testing Philosophy:
    Tests focus on observable HTTP behavior: status codes, response bodies
    and database state.
"""

import pytest
from rest_framework import status

from chat.constants import INTEREST_CONFIG
from chat.models import Conversation, Message
from chat.tests.fakes import FakeConnection
from listings.models import Item
from listings.tests.factories import CategoryFactory, ItemFactory, SubcategoryFactory

pytestmark = pytest.mark.django_db


# =============================================================================
# URL Constants
# =============================================================================


ITEMS_URL = "/api/v1/listings/items/"
CATEGORIES_URL = "/api/v1/listings/categories/"
SUBCATEGORIES_URL = "/api/v1/listings/subcategories/"


def item_url(item_id):
    return f"{ITEMS_URL}{item_id}/"


def interest_url(item_id):
    return f"{ITEMS_URL}{item_id}/interest/"


def approval_url(item_id):
    return f"{ITEMS_URL}{item_id}/approval/"


def result_ids(response):
    return [row["id"] for row in response.data["results"]]


# =============================================================================
# TestItemBrowse
# =============================================================================


class TestItemBrowse:
    """GET /api/v1/listings/items/"""

    def test_anonymous_sees_only_approved(self, api_client, approved_item, pending_item):
        response = api_client.get(ITEMS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert result_ids(response) == [approved_item.id]

    def test_seller_sees_own_pending_items(self, seller_client, approved_item, pending_item):
        response = seller_client.get(ITEMS_URL)

        assert set(result_ids(response)) == {approved_item.id, pending_item.id}

    def test_other_sellers_pending_item_is_404(self, authenticated_client, pending_item):
        """
        Unreviewed listings are invisible, not forbidden.

        Why it matters: A 403 would confirm the listing exists.
        """
        response = authenticated_client.get(item_url(pending_item.id))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_filter_by_category_and_search(self, api_client):
        books = CategoryFactory(name="Textbooks")
        match = ItemFactory(category=books, title="Calculus textbook", description="Second edition")
        ItemFactory(category=books, title="Chemistry notes", description="Lecture notes")
        ItemFactory(title="Calculus poster", description="Wall art")

        response = api_client.get(ITEMS_URL, {"category": books.id, "q": "calculus"})

        assert result_ids(response) == [match.id]

    def test_approval_filter_only_applies_for_admins(
        self, seller_client, admin_client, approved_item, pending_item
    ):
        admin_response = admin_client.get(ITEMS_URL, {"approval_status": "pending"})
        seller_response = seller_client.get(ITEMS_URL, {"approval_status": "pending"})

        assert result_ids(admin_response) == [pending_item.id]
        assert set(result_ids(seller_response)) == {approved_item.id, pending_item.id}

    def test_filter_by_seller_and_status(self, api_client, seller, approved_item):
        sold = ItemFactory(seller=seller, status=Item.Status.SOLD)
        ItemFactory(status=Item.Status.SOLD)

        response = api_client.get(ITEMS_URL, {"seller": seller.id, "status": "sold"})

        assert result_ids(response) == [sold.id]

    def test_admin_approval_filter_combines_with_category(self, admin_client, pending_item):
        ItemFactory(approval_status=Item.ApprovalStatus.PENDING)

        response = admin_client.get(
            ITEMS_URL,
            {"approval_status": "pending", "category": pending_item.category_id},
        )

        assert result_ids(response) == [pending_item.id]

    def test_results_are_newest_first(self, api_client):
        first = ItemFactory()
        second = ItemFactory()

        response = api_client.get(ITEMS_URL)

        assert result_ids(response) == [second.id, first.id]

    def test_invalid_filter_returns_400(self, api_client):
        response = api_client.get(ITEMS_URL, {"status": "lost"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_category_returns_400(self, api_client):
        response = api_client.get(ITEMS_URL, {"category": 999_999})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# TestItemWrite
# =============================================================================


class TestItemWrite:
    """Create, edit and delete through ItemService."""

    def test_create_requires_authentication(self, api_client, category):
        response = api_client.post(
            ITEMS_URL,
            {"title": "Lamp", "description": "Bright", "price": "5.00", "category": category.id},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_member_create_is_pending(self, seller_client, seller, category):
        response = seller_client.post(
            ITEMS_URL,
            {"title": "Lamp", "description": "Bright", "price": "5.00", "category": category.id},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["approval_status"] == "pending"
        assert response.data["seller"]["id"] == seller.id

    def test_owner_edit_sends_item_back_to_review(self, seller_client, approved_item):
        response = seller_client.patch(
            item_url(approved_item.id), {"price": "12.50"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["approval_status"] == "pending"
        assert response.data["price"] == "12.50"

    def test_stranger_edit_is_forbidden(self, authenticated_client, approved_item):
        response = authenticated_client.patch(
            item_url(approved_item.id), {"title": "Hijacked"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_owner_can_delete(self, seller_client, approved_item):
        response = seller_client.delete(item_url(approved_item.id))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Item.objects.filter(pk=approved_item.pk).exists()


# =============================================================================
# TestExpressInterest
# =============================================================================


class TestExpressInterest:
    """POST /api/v1/listings/items/{id}/interest/"""

    def test_interest_opens_conversation_and_notifies_seller(
        self, authenticated_client, user, seller, approved_item, live_registry
    ):
        """
        A buyer's interest creates the conversation, stores the standard
        message and pushes message:new to the seller only.

        Why it matters: This is how sellers learn about a buyer at all.
        """
        seller_tab = FakeConnection(seller.id)
        buyer_tab = FakeConnection(user.id)
        live_registry.register(seller_tab)
        live_registry.register(buyer_tab)

        response = authenticated_client.post(interest_url(approved_item.id))

        assert response.status_code == status.HTTP_200_OK
        conversation = Conversation.objects.get(pk=response.data["conversationId"])
        assert (conversation.buyer_id, conversation.seller_id) == (user.id, seller.id)

        message = Message.objects.get(conversation=conversation)
        assert message.content == INTEREST_CONFIG.MESSAGE_CONTENT
        assert message.receiver_id == seller.id

        assert [f["type"] for f in seller_tab.frames] == ["message:new"]
        assert seller_tab.frames[0]["message"]["id"] == message.id
        assert buyer_tab.frames == []

    def test_repeat_interest_reuses_conversation(self, authenticated_client, approved_item):
        first = authenticated_client.post(interest_url(approved_item.id))
        second = authenticated_client.post(interest_url(approved_item.id))

        assert first.data["conversationId"] == second.data["conversationId"]
        assert Conversation.objects.count() == 1
        assert Message.objects.count() == 2

    def test_seller_interest_in_own_item_returns_400(self, seller_client, approved_item):
        response = seller_client.post(interest_url(approved_item.id))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_OPERATION"
        assert Conversation.objects.count() == 0

    def test_interest_in_unreviewed_item_returns_404(self, authenticated_client, pending_item):
        response = authenticated_client.post(interest_url(pending_item.id))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_interest_requires_authentication(self, api_client, approved_item):
        response = api_client.post(interest_url(approved_item.id))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# TestItemApproval
# =============================================================================


class TestItemApproval:
    """PUT /api/v1/listings/items/{id}/approval/"""

    def test_admin_approves(self, admin_client, pending_item):
        response = admin_client.put(
            approval_url(pending_item.id), {"approval_status": "approved"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["approval_status"] == "approved"

    def test_member_cannot_review(self, seller_client, pending_item):
        response = seller_client.put(
            approval_url(pending_item.id), {"approval_status": "approved"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        pending_item.refresh_from_db()
        assert pending_item.approval_status == "pending"

    def test_unknown_status_returns_400(self, admin_client, pending_item):
        response = admin_client.put(
            approval_url(pending_item.id), {"approval_status": "archived"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_ARGUMENT"


# =============================================================================
# TestCategoryViews
# =============================================================================


class TestCategoryViews:
    def test_anyone_can_list(self, api_client, category):
        response = api_client.get(CATEGORIES_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [c["name"] for c in response.data] == ["Books"]

    def test_member_cannot_create(self, authenticated_client):
        response = authenticated_client.post(CATEGORIES_URL, {"name": "Bikes"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_creates(self, admin_client):
        response = admin_client.post(CATEGORIES_URL, {"name": "Bikes"}, format="json")

        assert response.status_code == status.HTTP_201_CREATED


# =============================================================================
# TestSubcategoryViews
# =============================================================================


class TestSubcategoryViews:
    def test_category_lists_its_subcategories(self, api_client, category):
        SubcategoryFactory(category=category, name="Novels")
        SubcategoryFactory(category=category, name="Comics")

        response = api_client.get(CATEGORIES_URL)

        names = [sub["name"] for sub in response.data[0]["subcategories"]]
        assert names == ["Comics", "Novels"]

    def test_filter_by_category(self, api_client, category):
        novels = SubcategoryFactory(category=category, name="Novels")
        SubcategoryFactory(name="Phones")

        response = api_client.get(SUBCATEGORIES_URL, {"category": category.id})

        assert response.status_code == status.HTTP_200_OK
        assert [sub["id"] for sub in response.data] == [novels.id]

    def test_member_cannot_create(self, authenticated_client, category):
        response = authenticated_client.post(
            SUBCATEGORIES_URL, {"category": category.id, "name": "Novels"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_creates(self, admin_client, category):
        response = admin_client.post(
            SUBCATEGORIES_URL, {"category": category.id, "name": "Novels"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert category.subcategories.filter(name="Novels").exists()


# =============================================================================
# TestItemSubcategory
# =============================================================================


class TestItemSubcategory:
    """
    Subcategory rules on listing writes.

    Why it matters: Browse filters by subcategory only work if every
    listing in a subdivided category carries a matching subcategory.
    """

    def payload(self, category, **extra):
        data = {"title": "Lamp", "description": "Bright", "price": "5.00", "category": category.id}
        data.update(extra)
        return data

    def test_create_with_matching_subcategory(self, seller_client, category):
        novels = SubcategoryFactory(category=category, name="Novels")

        response = seller_client.post(
            ITEMS_URL, self.payload(category, subcategory=novels.id), format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["subcategory"] == novels.id
        assert response.data["subcategory_name"] == "Novels"

    def test_subcategory_from_other_category_returns_400(self, seller_client, category):
        phones = SubcategoryFactory(name="Phones")

        response = seller_client.post(
            ITEMS_URL, self.payload(category, subcategory=phones.id), format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "subcategory" in response.data

    def test_subdivided_category_requires_subcategory(self, seller_client, category):
        SubcategoryFactory(category=category, name="Novels")

        response = seller_client.post(ITEMS_URL, self.payload(category), format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "subcategory" in response.data

    def test_category_without_subcategories_needs_none(self, seller_client, category):
        response = seller_client.post(ITEMS_URL, self.payload(category), format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["subcategory"] is None

    def test_partial_edit_checks_against_current_category(self, seller_client, approved_item):
        phones = SubcategoryFactory(name="Phones")

        response = seller_client.patch(
            item_url(approved_item.id), {"subcategory": phones.id}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_moving_category_drops_stale_subcategory(self, seller_client, approved_item):
        novels = SubcategoryFactory(category=approved_item.category, name="Novels")
        approved_item.subcategory = novels
        approved_item.save()
        lamps = CategoryFactory(name="Lamps")

        response = seller_client.patch(
            item_url(approved_item.id), {"category": lamps.id}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["subcategory"] is None

    def test_filter_items_by_subcategory(self, api_client, category):
        novels = SubcategoryFactory(category=category, name="Novels")
        match = ItemFactory(category=category, subcategory=novels)
        ItemFactory(category=category)

        response = api_client.get(ITEMS_URL, {"subcategory": novels.id})

        assert result_ids(response) == [match.id]
