import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from core_backend.pagination import StandardPagination
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    AssignOrderSerializer,
    OrderCreateSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatsQuerySerializer,
    OrderStatusUpdateSerializer,
    OrderTrackingSerializer,
    PaymentStatusUpdateSerializer,
)
from orders.services import OrderAssignmentService, OrderService
from orders.services.order_service import RATING_FIELDS
from tables.services import TableService
from users.permissions import OperationPermission

logger = logging.getLogger(__name__)


class OrderViewSet(BaseViewSet):
    """
    Food orders, addressed by their order code.

    Placing and tracking orders is public. Everything else is gated by the
    order services; orders are never edited or deleted directly, only moved
    through their lifecycle actions.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    permission_classes = [OperationPermission]
    operation_roles = {"list": "order.list"}
    lookup_field = "order_code"
    http_method_names = ["get", "post", "head", "options"]
    filterset_class = OrderFilter
    search_fields = ["order_code", "customer_name", "customer_phone"]
    ordering_fields = ["created_at", "total_price", "priority", "status"]
    ordering = ["-created_at"]

    def get_serializer_class(self):
        if self.action in ("list", "my_orders", "assigned", "available"):
            return OrderListSerializer
        if self.action == "create":
            return OrderCreateSerializer
        return OrderSerializer

    def _get_order(self):
        return OrderService.find_by_code(self.kwargs[self.lookup_field])

    def _paginated(self, queryset):
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page if page is not None else queryset, many=True)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.create_order(request.user, **serializer.to_service_kwargs())
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, *args, **kwargs):
        order = OrderService.get_order(request.user, self.kwargs[self.lookup_field])
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["get"], url_path="track")
    def track(self, request, order_code=None):
        tracking = OrderService.track_order(order_code)
        return Response(OrderTrackingSerializer(tracking).data)

    @action(detail=False, methods=["get"], url_path="my-orders")
    def my_orders(self, request):
        return self._paginated(OrderService.my_orders(request.user))

    @action(detail=False, methods=["get"])
    def assigned(self, request):
        include_finished = request.query_params.get("include_finished", "").lower() in (
            "1",
            "true",
            "yes",
        )
        return self._paginated(
            OrderService.assigned_orders(request.user, include_finished=include_finished)
        )

    @action(detail=False, methods=["get"])
    def available(self, request):
        orders = OrderService.available_orders(request.user)
        return Response(OrderListSerializer(orders, many=True).data)

    @action(detail=True, methods=["post"], url_path="update-status")
    def update_status(self, request, order_code=None):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.update_status(
            request.user,
            self._get_order(),
            serializer.validated_data["status"],
            reason=serializer.validated_data.get("reason"),
            notes=serializer.validated_data.get("notes"),
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, order_code=None):
        order = OrderService.cancel_order(
            request.user, self._get_order(), reason=request.data.get("reason")
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="payment")
    def update_payment(self, request, order_code=None):
        serializer = PaymentStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.update_payment_status(
            request.user, self._get_order(), **serializer.validated_data
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def rate(self, request, order_code=None):
        # Scores are validated by the service, after the ownership check
        scores = {key: request.data.get(key) for key in RATING_FIELDS}
        order = OrderService.rate_order(
            request.user, self._get_order(), scores, request.data.get("feedback", "")
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="self-assign")
    def self_assign(self, request, order_code=None):
        order = OrderAssignmentService.self_assign(request.user, self._get_order())
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def assign(self, request, order_code=None):
        serializer = AssignOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderAssignmentService.assign(
            request.user, self._get_order(), serializer.validated_data["waiter_id"]
        )
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        params = OrderStatsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return Response(
            OrderService.order_stats(
                request.user,
                period=params.validated_data["period"],
                table_id=params.validated_data.get("table"),
            )
        )


class TableOrderViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Orders placed at one table: ``/tables/{table_pk}/orders/``."""

    serializer_class = OrderListSerializer
    pagination_class = StandardPagination

    def get_queryset(self):
        table = TableService.find_table(self.kwargs["table_pk"])
        active_only = self.request.query_params.get("active_only", "").lower() in (
            "1",
            "true",
            "yes",
        )
        return OrderService.orders_for_table(
            self.request.user, table, active_only=active_only
        ).order_by("-created_at")
