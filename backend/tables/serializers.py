from rest_framework import serializers
from core_backend.base import BaseModelSerializer, TimestampedSerializer
from .models import Table


class CurrentOrderSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    order_code = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class TableSerializer(TimestampedSerializer):
    current_order = CurrentOrderSummarySerializer(read_only=True)

    class Meta:
        model = Table
        fields = [
            "id",
            "table_number",
            "name",
            "section",
            "location",
            "capacity",
            "description",
            "shape",
            "size",
            "is_active",
            "status",
            "current_order",
            "last_occupied_at",
            "last_cleaned_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["status", "last_occupied_at", "last_cleaned_at"]
        # Duplicate numbers are reported as conflicts by TableService
        extra_kwargs = {"table_number": {"validators": []}}
        select_related_fields = ["current_order"]


class TableSummarySerializer(BaseModelSerializer):
    class Meta:
        model = Table
        fields = ["id", "table_number", "name", "section", "capacity"]


class TableStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Table.Status.choices)


class OccupyTableSerializer(serializers.Serializer):
    customer_count = serializers.IntegerField(required=False, min_value=1)


class TableHistoryQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(required=False, default=7, min_value=1, max_value=365)


class AvailableTablesQuerySerializer(serializers.Serializer):
    capacity = serializers.IntegerField(required=False, min_value=1)
    section = serializers.ChoiceField(choices=Table.Section.choices, required=False)
