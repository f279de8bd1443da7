from .order_serializers import (
    AssignOrderSerializer,
    OrderCreateSerializer,
    OrderItemSerializer,
    OrderLineInputSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatsQuerySerializer,
    OrderStatusUpdateSerializer,
    OrderTrackingSerializer,
    PaymentStatusUpdateSerializer,
)

__all__ = [
    "AssignOrderSerializer",
    "OrderCreateSerializer",
    "OrderItemSerializer",
    "OrderLineInputSerializer",
    "OrderListSerializer",
    "OrderSerializer",
    "OrderStatsQuerySerializer",
    "OrderStatusUpdateSerializer",
    "OrderTrackingSerializer",
    "PaymentStatusUpdateSerializer",
]
