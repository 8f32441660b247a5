"""
Serializers for listings.

- CategorySerializer: Category read/write, with its subcategories
- SubcategorySerializer: Subcategory read/write
- ItemSerializer: Item read representation
- ItemWriteSerializer: Create/update payload (approval handled by ItemService)
- ApprovalSerializer: Admin review decision
- InterestResponseSerializer: Result of expressing interest
"""

from rest_framework import serializers

from authentication.serializers import PublicUserSerializer
from listings.models import Category, Item, Subcategory


class SubcategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Subcategory
        fields = ["id", "category", "name", "description", "created_at"]
        read_only_fields = ["id", "created_at"]


class CategorySerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()
    subcategories = SubcategorySerializer(many=True, read_only=True)

    class Meta:
        model = Category
        fields = ["id", "name", "description", "subcategories", "item_count", "created_at"]
        read_only_fields = ["id", "subcategories", "item_count", "created_at"]

    def get_item_count(self, obj):
        return obj.items.filter(approval_status=Item.ApprovalStatus.APPROVED).count()


class ItemSerializer(serializers.ModelSerializer):
    """Read representation of a listing."""

    seller = PublicUserSerializer(read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    subcategory_name = serializers.CharField(
        source="subcategory.name",
        read_only=True,
        default=None,
    )

    class Meta:
        model = Item
        fields = [
            "id",
            "title",
            "description",
            "price",
            "quantity",
            "category",
            "category_name",
            "subcategory",
            "subcategory_name",
            "seller",
            "status",
            "approval_status",
            "location",
            "condition",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ItemWriteSerializer(serializers.ModelSerializer):
    """
    Create/update payload for listings.

    ``approval_status`` is accepted but only honoured for admins; ItemService
    decides the final value.

    ``subcategory`` must belong to ``category``, and is required when the
    category has any subcategories. On a partial update the missing half
    of the pair comes from the item being edited.
    """

    approval_status = serializers.ChoiceField(
        choices=Item.ApprovalStatus.choices,
        required=False,
    )

    class Meta:
        model = Item
        fields = [
            "title",
            "description",
            "price",
            "quantity",
            "category",
            "subcategory",
            "status",
            "location",
            "condition",
            "approval_status",
        ]
        extra_kwargs = {
            "category": {"required": True, "allow_null": False},
        }

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if self.partial and "category" not in attrs and "subcategory" not in attrs:
            return attrs

        category = attrs.get("category", getattr(self.instance, "category", None))
        if "subcategory" in attrs:
            subcategory = attrs["subcategory"]
        elif "category" in attrs and self.instance is not None:
            # Moving to another category drops a subcategory that no longer fits
            subcategory = self.instance.subcategory
            if subcategory is not None and subcategory.category_id != getattr(category, "id", None):
                subcategory = None
            attrs["subcategory"] = subcategory
        else:
            subcategory = getattr(self.instance, "subcategory", None)

        if subcategory is not None and subcategory.category_id != getattr(category, "id", None):
            raise serializers.ValidationError(
                {"subcategory": "Subcategory does not belong to the chosen category."}
            )
        if subcategory is None and category is not None and category.subcategories.exists():
            raise serializers.ValidationError(
                {"subcategory": "This category requires a subcategory."}
            )
        return attrs


class ApprovalSerializer(serializers.Serializer):
    """Admin review decision. The value is validated by ItemService."""

    approval_status = serializers.CharField()


class InterestResponseSerializer(serializers.Serializer):
    conversationId = serializers.IntegerField()
