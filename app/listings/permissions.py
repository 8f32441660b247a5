"""
Permission classes for the listings API.

- IsAdminOrReadOnly: Anyone authenticated may read; only admins write
- IsSellerOrAdmin: Object-level; the item's seller or an admin

Note:
    Approval transitions are enforced in ItemService, not here. These
    classes only gate who may reach the service at all.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsAdminOrReadOnly(permissions.BasePermission):
    """Safe methods for everyone, writes for marketplace admins."""

    message = "Only admins can modify categories."

    def has_permission(self, request: Request, view: APIView) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)


class IsSellerOrAdmin(permissions.BasePermission):
    """Allows modification only by the item's seller or an admin."""

    message = "Only the seller or an admin can modify this item."

    def has_object_permission(self, request: Request, view: APIView, obj) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.seller_id == request.user.pk or request.user.is_staff
