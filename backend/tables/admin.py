from django.contrib import admin
from .models import Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ["table_number", "name", "section", "capacity", "status", "is_active"]
    list_filter = ["section", "status", "is_active"]
    search_fields = ["name", "location"]
    readonly_fields = ["current_order", "last_occupied_at", "last_cleaned_at", "created_by", "updated_by"]
