from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from users.permissions import OperationPermission
from .filters import TableFilter
from .models import Table
from .serializers import (
    AvailableTablesQuerySerializer,
    OccupyTableSerializer,
    TableHistoryQuerySerializer,
    TableSerializer,
    TableStatusSerializer,
)
from .services import TableService


class TableViewSet(BaseViewSet):
    """
    Table registry. Reads are public; layout changes are admin-only; status
    actions are open to waiters and above and go through TableService.
    """

    queryset = Table.objects.all()
    serializer_class = TableSerializer
    permission_classes = [OperationPermission]
    operation_roles = {
        "list": "table.list",
        "retrieve": "table.list",
        "available": "table.list",
        "create": "table.manage",
        "update": "table.manage",
        "partial_update": "table.manage",
    }
    filterset_class = TableFilter
    search_fields = ["name", "location", "description"]
    ordering_fields = ["table_number", "capacity", "section", "status"]
    ordering = ["table_number"]

    def perform_create(self, serializer):
        serializer.instance = TableService.create_table(
            serializer.validated_data, actor=self.request.user
        )

    def perform_update(self, serializer):
        serializer.instance = TableService.update_table(
            serializer.instance, serializer.validated_data, actor=self.request.user
        )

    def destroy(self, request, *args, **kwargs):
        TableService.delete_table(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="toggle-status")
    def toggle_status(self, request, pk=None):
        serializer = TableStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        table = TableService.transition(
            request.user, self.get_object(), serializer.validated_data["status"]
        )
        return Response(TableSerializer(table).data)

    @action(detail=True, methods=["post"])
    def occupy(self, request, pk=None):
        serializer = OccupyTableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        table = TableService.occupy(
            request.user,
            self.get_object(),
            serializer.validated_data.get("customer_count"),
        )
        return Response(TableSerializer(table).data)

    @action(detail=True, methods=["post"])
    def clear(self, request, pk=None):
        table = TableService.clear(request.user, self.get_object())
        return Response(TableSerializer(table).data)

    @action(detail=True, methods=["post"], url_path="mark-available")
    def mark_available(self, request, pk=None):
        table = TableService.mark_available(request.user, self.get_object())
        return Response(TableSerializer(table).data)

    @action(detail=False, methods=["get"])
    def available(self, request):
        params = AvailableTablesQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        tables = TableService.available_tables(**params.validated_data)
        return Response(TableSerializer(tables, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(TableService.table_stats(request.user))

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        from orders.serializers import OrderListSerializer

        params = TableHistoryQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        history = TableService.table_history(
            request.user, self.get_object(), params.validated_data["days"]
        )
        history["table"] = TableSerializer(history["table"]).data
        history["orders"] = OrderListSerializer(history["orders"], many=True).data
        return Response(history)
