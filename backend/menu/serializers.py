from rest_framework import serializers
from core_backend.base import BaseModelSerializer, TimestampedSerializer
from .models import FoodCategory, MenuItem


class FoodCategorySerializer(TimestampedSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = FoodCategory
        fields = [
            "id",
            "name",
            "description",
            "is_active",
            "sort_order",
            "item_count",
            "created_at",
            "updated_at",
        ]

    def get_item_count(self, obj):
        return obj.items.count()


class MenuItemSerializer(TimestampedSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True)

    class Meta:
        model = MenuItem
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category",
            "category_name",
            "is_available",
            "preparation_time",
            "is_vegetarian",
            "is_spicy",
            "sort_order",
            "created_at",
            "updated_at",
        ]
        select_related_fields = ["category"]

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value


class MenuItemReferenceSerializer(BaseModelSerializer):
    """Minimal item representation embedded in order lines."""

    class Meta:
        model = MenuItem
        fields = ["id", "name", "price"]
