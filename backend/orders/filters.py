import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    """
    Order list filters. ``assigned_to`` accepts a user id or the literal
    ``unassigned``; ``date`` matches the calendar day the order was placed.
    """

    assigned_to = django_filters.CharFilter(method="filter_assigned_to")
    date = django_filters.DateFilter(field_name="created_at", lookup_expr="date")
    created_at__gte = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_at__lte = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "table", "priority", "payment_status"]

    def filter_assigned_to(self, queryset, name, value):
        if value == "unassigned":
            return queryset.filter(assigned_to__isnull=True)
        if not value.isdigit():
            return queryset.none()
        return queryset.filter(assigned_to_id=int(value))
