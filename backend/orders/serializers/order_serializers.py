from rest_framework import serializers

from core_backend.base import BaseModelSerializer, TimestampedSerializer, UserSummarySerializer
from orders.models import Order, OrderItem
from tables.serializers import TableSummarySerializer


class OrderItemSerializer(BaseModelSerializer):
    menu_item = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item",
            "item_name",
            "quantity",
            "item_price",
            "item_total",
            "preparation_time",
            "special_instructions",
        ]
        read_only_fields = fields


class OrderListSerializer(TimestampedSerializer):
    """Compact row for order lists and table history."""

    table = TableSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_code",
            "table",
            "status",
            "priority",
            "payment_status",
            "total_price",
            "item_count",
            "assigned_to",
            "customer_name",
            "estimated_ready_at",
            "created_at",
            "updated_at",
        ]
        select_related_fields = ["table", "assigned_to"]
        prefetch_related_fields = ["items"]

    def get_item_count(self, obj):
        return sum(line.quantity for line in obj.items.all())


class OrderSerializer(TimestampedSerializer):
    """Full order representation including lines, contact and rating."""

    table = TableSummarySerializer(read_only=True)
    user = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    assigned_by = UserSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    rating = serializers.DictField(read_only=True, allow_null=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_code",
            "user",
            "table",
            "items",
            "status",
            "priority",
            "subtotal",
            "tax_amount",
            "service_charge",
            "discount_amount",
            "total_price",
            "payment_status",
            "payment_method",
            "payment_reference",
            "paid_at",
            "assigned_to",
            "assigned_by",
            "assigned_at",
            "customer_name",
            "customer_phone",
            "customer_email",
            "notes",
            "special_requests",
            "rating",
            "estimated_ready_at",
            "completed_at",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
        select_related_fields = ["table", "user", "assigned_to", "assigned_by"]
        prefetch_related_fields = ["items"]


# --- Input serializers (validated data is handed to the services) ---


class OrderLineInputSerializer(serializers.Serializer):
    menu_item = serializers.IntegerField()
    quantity = serializers.IntegerField(default=1)
    special_instructions = serializers.CharField(
        required=False, allow_blank=True, max_length=255
    )


class OrderCreateSerializer(serializers.Serializer):
    """
    Shape check only. Business rules (empty orders, table state,
    availability, quantities) are enforced by OrderService so they apply
    outside HTTP too.
    """

    table = serializers.IntegerField(required=False, allow_null=True)
    items = OrderLineInputSerializer(many=True, required=False, default=list)
    customer_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    customer_phone = serializers.CharField(required=False, allow_blank=True, max_length=30)
    customer_email = serializers.EmailField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    special_requests = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.ChoiceField(
        choices=Order.Priority.choices, required=False, default=Order.Priority.NORMAL
    )

    def to_service_kwargs(self):
        data = dict(self.validated_data)
        data["table_id"] = data.pop("table", None)
        data["items"] = [dict(line) for line in data.get("items", [])]
        return data


class OrderStatusUpdateSerializer(serializers.Serializer):
    # Free-form so unknown values reach the state machine's own validation
    status = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True)


class PaymentStatusUpdateSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Order.PaymentStatus.choices)
    payment_method = serializers.ChoiceField(
        choices=Order.PaymentMethod.choices, required=False
    )
    payment_reference = serializers.CharField(required=False, allow_blank=True, max_length=100)


class AssignOrderSerializer(serializers.Serializer):
    waiter_id = serializers.IntegerField()


class OrderStatsQuerySerializer(serializers.Serializer):
    period = serializers.ChoiceField(
        choices=["today", "week", "month", "year", "all"], required=False, default="today"
    )
    table = serializers.IntegerField(required=False)


class OrderTrackingSerializer(serializers.Serializer):
    order_code = serializers.CharField()
    status = serializers.CharField()
    table = serializers.DictField()
    items = serializers.ListField(child=serializers.DictField())
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    order_time = serializers.DateTimeField()
    estimated_ready_at = serializers.DateTimeField(allow_null=True)
    assigned_to = serializers.CharField()
