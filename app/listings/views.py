"""
ViewSets for the listings API.

This module provides REST API endpoints for:
- CategoryViewSet: Categories (read for all, write for admins)
- SubcategoryViewSet: Subcategories (read for all, write for admins)
- ItemViewSet: Listings, express-interest and admin review

URL Structure:
    /api/v1/listings/categories/            GET, POST
    /api/v1/listings/categories/{id}/       GET, PATCH, PUT, DELETE
    /api/v1/listings/subcategories/          GET, POST
    /api/v1/listings/subcategories/{id}/     GET, PATCH, PUT, DELETE
    /api/v1/listings/items/                 GET, POST
    /api/v1/listings/items/{id}/            GET, PATCH, PUT, DELETE
    /api/v1/listings/items/{id}/interest/   POST
    /api/v1/listings/items/{id}/approval/   PUT, POST (admin)

Design Decisions:
    - Every queryset is restricted with Item.objects.visible_to(), so an
      unapproved item of another seller answers 404, not 403
    - Create, edit, delete and review go through ItemService, which owns
      the approval state machine
    - Express-interest goes through chat.services.InterestService and
      pushes message:new to the seller
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from chat.realtime import publish_new_message
from chat.services import InterestService
from core.views import service_error_response
from listings.filters import ItemFilter
from listings.models import Category, Item, Subcategory
from listings.permissions import IsAdminOrReadOnly, IsSellerOrAdmin
from listings.serializers import (
    ApprovalSerializer,
    CategorySerializer,
    InterestResponseSerializer,
    ItemSerializer,
    ItemWriteSerializer,
    SubcategorySerializer,
)
from listings.services import ItemService


@extend_schema_view(
    list=extend_schema(summary="List categories", tags=["Listings - Categories"]),
    create=extend_schema(summary="Create category", tags=["Listings - Categories"]),
    retrieve=extend_schema(summary="Get category", tags=["Listings - Categories"]),
    update=extend_schema(summary="Replace category", tags=["Listings - Categories"]),
    partial_update=extend_schema(summary="Update category", tags=["Listings - Categories"]),
    destroy=extend_schema(summary="Delete category", tags=["Listings - Categories"]),
)
class CategoryViewSet(viewsets.ModelViewSet):
    """Categories. Anyone may read; only admins create, edit or delete."""

    queryset = Category.objects.prefetch_related("subcategories")
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None


@extend_schema_view(
    list=extend_schema(summary="List subcategories", tags=["Listings - Categories"]),
    create=extend_schema(summary="Create subcategory", tags=["Listings - Categories"]),
    retrieve=extend_schema(summary="Get subcategory", tags=["Listings - Categories"]),
    update=extend_schema(summary="Replace subcategory", tags=["Listings - Categories"]),
    partial_update=extend_schema(summary="Update subcategory", tags=["Listings - Categories"]),
    destroy=extend_schema(summary="Delete subcategory", tags=["Listings - Categories"]),
)
class SubcategoryViewSet(viewsets.ModelViewSet):
    """Subcategories, filterable by ``category``. Admins write, anyone reads."""

    queryset = Subcategory.objects.select_related("category")
    serializer_class = SubcategorySerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["category"]


@extend_schema_view(
    list=extend_schema(summary="Browse listings", tags=["Listings - Items"]),
    create=extend_schema(
        summary="Create listing",
        tags=["Listings - Items"],
        request=ItemWriteSerializer,
        responses={201: ItemSerializer},
    ),
    retrieve=extend_schema(summary="Get listing", tags=["Listings - Items"]),
    update=extend_schema(
        summary="Replace listing",
        tags=["Listings - Items"],
        request=ItemWriteSerializer,
        responses={200: ItemSerializer},
    ),
    partial_update=extend_schema(
        summary="Update listing",
        tags=["Listings - Items"],
        request=ItemWriteSerializer,
        responses={200: ItemSerializer},
    ),
    destroy=extend_schema(summary="Delete listing", tags=["Listings - Items"]),
)
class ItemViewSet(viewsets.ModelViewSet):
    """
    Marketplace listings.

    list:
        Items visible to the caller, newest first. Filters: ``category``,
        ``subcategory``, ``seller``, ``status``, ``q`` (text search) and,
        for admins only, ``approval_status``.

    create:
        New listing. Pending review unless the seller is an admin.

    update / partial_update:
        Seller or admin only. A seller's edit sends the item back to review.
    """

    permission_classes = [IsAuthenticatedOrReadOnly, IsSellerOrAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_class = ItemFilter

    def get_queryset(self):
        return (
            Item.objects.visible_to(self.request.user)
            .select_related("seller", "category", "subcategory")
            .newest()
        )

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return ItemWriteSerializer
        return ItemSerializer

    def create(self, request, *args, **kwargs):
        serializer = ItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ItemService.create(seller=request.user, data=serializer.validated_data)
        if not result.success:
            return service_error_response(result)

        return Response(ItemSerializer(result.data).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        item = self.get_object()

        serializer = ItemWriteSerializer(item, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        result = ItemService.update(item, editor=request.user, data=serializer.validated_data)
        if not result.success:
            return service_error_response(result)

        return Response(ItemSerializer(result.data).data)

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()

        result = ItemService.delete(item, request.user)
        if not result.success:
            return service_error_response(result)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Express interest",
        tags=["Listings - Items"],
        request=None,
        responses={200: InterestResponseSerializer},
    )
    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def interest(self, request, pk=None):
        """
        Tell the seller the caller is interested.

        POST /api/v1/listings/items/{id}/interest/

        Opens or reuses the caller's conversation about the item, adds the
        standard interest message and pushes it to the seller.
        """
        item = self.get_object()

        result = InterestService.express(item, request.user)
        if not result.success:
            return service_error_response(result)

        publish_new_message(result.data.message)

        return Response({"conversationId": result.data.conversation.id})

    @extend_schema(
        summary="Review listing",
        tags=["Listings - Items"],
        request=ApprovalSerializer,
        responses={200: ItemSerializer},
    )
    @action(detail=True, methods=["put", "post"], permission_classes=[IsAdminUser])
    def approval(self, request, pk=None):
        """
        Approve or reject a listing.

        PUT /api/v1/listings/items/{id}/approval/
        """
        item = self.get_object()

        serializer = ApprovalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ItemService.set_approval(
            item,
            admin=request.user,
            approval_status=serializer.validated_data["approval_status"],
        )
        if not result.success:
            return service_error_response(result)

        return Response(ItemSerializer(result.data).data)
