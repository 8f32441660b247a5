"""
Query-parameter filters for the item list.

    /api/v1/listings/items/?category=3&status=available&q=bike
    /api/v1/listings/items/?subcategory=7
    /api/v1/listings/items/?approval_status=pending     (admins only)
"""

import django_filters as filters

from listings.models import Item


class ItemFilter(filters.FilterSet):
    q = filters.CharFilter(method="filter_q")
    approval_status = filters.ChoiceFilter(
        choices=Item.ApprovalStatus.choices,
        method="filter_approval_status",
    )

    class Meta:
        model = Item
        fields = ["category", "subcategory", "seller", "status", "approval_status", "q"]

    def filter_q(self, queryset, name, value):
        return queryset.search(value)

    def filter_approval_status(self, queryset, name, value):
        # Review filter applies to admins only
        user = getattr(self.request, "user", None)
        if user is None or not user.is_staff:
            return queryset
        return queryset.filter(approval_status=value)
