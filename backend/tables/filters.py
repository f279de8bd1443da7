from django_filters import rest_framework as filters
from .models import Table


class TableFilter(filters.FilterSet):
    min_capacity = filters.NumberFilter(field_name="capacity", lookup_expr="gte")
    max_capacity = filters.NumberFilter(field_name="capacity", lookup_expr="lte")

    class Meta:
        model = Table
        fields = ["section", "status", "is_active", "shape", "size"]
