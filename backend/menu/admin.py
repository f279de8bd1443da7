from django.contrib import admin
from .models import FoodCategory, MenuItem


@admin.register(FoodCategory)
class FoodCategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "is_active", "sort_order"]
    list_editable = ["sort_order"]
    search_fields = ["name"]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ["name", "category", "price", "is_available", "preparation_time"]
    list_filter = ["category", "is_available", "is_vegetarian"]
    search_fields = ["name", "description"]
    raw_id_fields = ["created_by"]
