"""
Listing services.

This module owns the item approval workflow. Views never write
``approval_status`` directly; every create, edit and admin decision goes
through ItemService so the transitions stay in one place.

Usage:
    from listings.services import ItemService

    result = ItemService.create(seller=request.user, data=serializer.validated_data)
    result = ItemService.update(item, editor=request.user, data={"price": "20.00"})
    result = ItemService.set_approval(item, admin=request.user, approval_status="approved")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.services import BaseService, ServiceResult
from listings.models import Item

if TYPE_CHECKING:
    from authentication.models import User


# Fields a seller may edit on their own listing
EDITABLE_FIELDS = frozenset({
    "title",
    "description",
    "price",
    "quantity",
    "category",
    "subcategory",
    "status",
    "location",
    "condition",
})


class ItemService(BaseService):
    """Creates and edits listings while enforcing the approval state machine."""

    @classmethod
    def create(cls, seller: User, data: dict[str, Any]) -> ServiceResult[Item]:
        """
        Create a listing.

        Admin listings are approved immediately; everyone else's wait for
        review. New listings are always available.
        """
        fields = {key: value for key, value in data.items() if key in EDITABLE_FIELDS}
        fields["status"] = Item.Status.AVAILABLE

        approval = (
            Item.ApprovalStatus.APPROVED if seller.is_staff else Item.ApprovalStatus.PENDING
        )
        item = Item.objects.create(seller=seller, approval_status=approval, **fields)

        cls.get_logger().info(
            f"Item {item.id} created by user {seller.id} with approval {approval}"
        )
        return ServiceResult.success(item)

    @classmethod
    def update(
        cls,
        item: Item,
        editor: User,
        data: dict[str, Any],
    ) -> ServiceResult[Item]:
        """
        Apply an edit.

        Rules:
            - Only the seller or an admin may edit (PERMISSION_DENIED).
            - An edit by the owning non-admin seller always sends the item
              back to pending, whatever it was before.
            - An admin editing their own item keeps the requested status,
              else the previous one, else approved.
            - An admin editing someone else's item may set approval_status
              explicitly; otherwise it is left alone.
        """
        is_owner = item.seller_id == editor.pk
        if not is_owner and not editor.is_staff:
            return ServiceResult.failure(
                "Only the seller or an admin can edit this item",
                error_code="PERMISSION_DENIED",
            )

        requested_approval = data.get("approval_status")
        if requested_approval is not None and requested_approval not in Item.ApprovalStatus.values:
            return ServiceResult.failure(
                f"Invalid approval status: {requested_approval}",
                error_code="INVALID_ARGUMENT",
            )

        for key, value in data.items():
            if key in EDITABLE_FIELDS:
                setattr(item, key, value)

        previous_approval = item.approval_status
        if is_owner and not editor.is_staff:
            item.approval_status = Item.ApprovalStatus.PENDING
        elif is_owner:
            item.approval_status = (
                requested_approval or previous_approval or Item.ApprovalStatus.APPROVED
            )
        elif requested_approval:
            item.approval_status = requested_approval

        item.save()

        if item.approval_status != previous_approval:
            cls.get_logger().info(
                f"Item {item.id} approval {previous_approval} -> {item.approval_status} "
                f"after edit by user {editor.id}"
            )
        return ServiceResult.success(item)

    @classmethod
    def set_approval(
        cls,
        item: Item,
        admin: User,
        approval_status: str,
    ) -> ServiceResult[Item]:
        """
        Record an admin review decision.

        Returns:
            ServiceResult with the item, PERMISSION_DENIED for non-admins,
            INVALID_ARGUMENT for an unknown status
        """
        if not admin.is_staff:
            return ServiceResult.failure(
                "Only admins can review listings",
                error_code="PERMISSION_DENIED",
            )

        if approval_status not in Item.ApprovalStatus.values:
            return ServiceResult.failure(
                f"Invalid approval status: {approval_status}",
                error_code="INVALID_ARGUMENT",
            )

        previous = item.approval_status
        item.approval_status = approval_status
        item.save(update_fields=["approval_status", "updated_at"])

        cls.get_logger().info(
            f"Item {item.id} reviewed by admin {admin.id}: {previous} -> {approval_status}"
        )
        return ServiceResult.success(item)

    @classmethod
    def delete(cls, item: Item, user: User) -> ServiceResult[None]:
        """Delete a listing (seller or admin only)."""
        if item.seller_id != user.pk and not user.is_staff:
            return ServiceResult.failure(
                "Only the seller or an admin can delete this item",
                error_code="PERMISSION_DENIED",
            )

        item_id = item.id
        item.delete()
        cls.get_logger().info(f"Item {item_id} deleted by user {user.id}")
        return ServiceResult.success(None)
