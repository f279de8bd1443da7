from .order_viewset import OrderViewSet, TableOrderViewSet

__all__ = ["OrderViewSet", "TableOrderViewSet"]
