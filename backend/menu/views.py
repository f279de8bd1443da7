from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from users.permissions import OperationPermission
from .filters import MenuItemFilter
from .models import FoodCategory, MenuItem
from .serializers import FoodCategorySerializer, MenuItemSerializer
from .services import MenuService


class FoodCategoryViewSet(BaseViewSet):
    queryset = FoodCategory.objects.all()
    serializer_class = FoodCategorySerializer
    permission_classes = [OperationPermission]
    operation_roles = {
        "list": "menu.list",
        "retrieve": "menu.list",
        "create": "menu.manage",
        "update": "menu.manage",
        "partial_update": "menu.manage",
    }
    search_fields = ["name"]
    filterset_fields = ["is_active"]
    ordering_fields = ["sort_order", "name"]
    ordering = ["sort_order", "name"]

    def destroy(self, request, *args, **kwargs):
        MenuService.delete_category(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        category = MenuService.toggle_category(request.user, self.get_object())
        return Response(self.get_serializer(category).data)


class MenuItemViewSet(BaseViewSet):
    """
    Public catalog reads; admin-only writes. Deletion refuses items that
    active orders still reference.
    """

    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer
    permission_classes = [OperationPermission]
    operation_roles = {
        "list": "menu.list",
        "retrieve": "menu.list",
        "create": "menu.manage",
        "update": "menu.manage",
        "partial_update": "menu.manage",
    }
    filterset_class = MenuItemFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price", "preparation_time", "sort_order"]
    ordering = ["category__sort_order", "sort_order", "name"]

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def destroy(self, request, *args, **kwargs):
        MenuService.delete_menu_item(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="toggle-availability")
    def toggle_availability(self, request, pk=None):
        item = MenuService.toggle_availability(request.user, self.get_object())
        return Response(self.get_serializer(item).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(MenuService.menu_stats(request.user))
