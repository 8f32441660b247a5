"""
Django admin configuration for listings.
"""

from django.contrib import admin

from listings.models import Category, Item, Subcategory


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(Subcategory)
class SubcategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "created_at")
    list_filter = ("category",)
    search_fields = ("name", "category__name")


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    """Review queue: filter by approval status and bulk approve/reject."""

    list_display = (
        "title",
        "seller",
        "category",
        "subcategory",
        "price",
        "status",
        "approval_status",
        "created_at",
    )
    list_filter = ("approval_status", "status", "condition", "category")
    search_fields = ("title", "description", "seller__email")
    raw_id_fields = ("seller",)
    actions = ["approve_items", "reject_items"]

    @admin.action(description="Approve selected items")
    def approve_items(self, request, queryset):
        updated = queryset.update(approval_status=Item.ApprovalStatus.APPROVED)
        self.message_user(request, f"{updated} item(s) approved.")

    @admin.action(description="Reject selected items")
    def reject_items(self, request, queryset):
        updated = queryset.update(approval_status=Item.ApprovalStatus.REJECTED)
        self.message_user(request, f"{updated} item(s) rejected.")
