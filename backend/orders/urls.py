from django.urls import path, include
from rest_framework import routers
from rest_framework_nested import routers as nested_routers

from tables.urls import router as tables_router
from .views import OrderViewSet, TableOrderViewSet

router = routers.DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")

table_orders_router = nested_routers.NestedSimpleRouter(tables_router, r"tables", lookup="table")
table_orders_router.register(r"orders", TableOrderViewSet, basename="table-order")

urlpatterns = [
    path("", include(table_orders_router.urls)),
    path("", include(router.urls)),
]
