from django_filters import rest_framework as filters
from .models import MenuItem


class MenuItemFilter(filters.FilterSet):
    category = filters.NumberFilter(field_name="category_id")
    min_price = filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = filters.NumberFilter(field_name="price", lookup_expr="lte")
    available_only = filters.BooleanFilter(method="filter_available_only")

    class Meta:
        model = MenuItem
        fields = ["category", "is_available", "is_vegetarian", "is_spicy"]

    def filter_available_only(self, queryset, name, value):
        if value:
            return queryset.filter(is_available=True, category__is_active=True)
        return queryset
