from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("item_name", "item_price", "quantity", "item_total", "special_instructions")
    fields = ("menu_item", "item_name", "quantity", "item_price", "item_total", "special_instructions")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-mostly view of orders. Status, assignment and ratings change only
    through the order services so their side effects stay consistent.
    """

    list_display = (
        "order_code",
        "table",
        "status",
        "priority",
        "payment_status",
        "get_total_formatted",
        "assigned_to",
        "created_at",
    )
    list_display_links = ("order_code",)
    list_filter = ("status", "priority", "payment_status", "created_at")
    search_fields = ("order_code", "customer_name", "customer_phone", "customer_email")
    ordering = ("-created_at",)
    list_select_related = ("table", "assigned_to")
    inlines = [OrderItemInline]
    readonly_fields = (
        "order_code",
        "status",
        "subtotal",
        "tax_amount",
        "service_charge",
        "total_price",
        "assigned_to",
        "assigned_by",
        "assigned_at",
        "rating_food_quality",
        "rating_service",
        "rating_ambiance",
        "rating_overall",
        "feedback",
        "rated_at",
        "estimated_ready_at",
        "completed_at",
        "cancelled_at",
        "cancelled_by",
        "cancellation_reason",
        "created_at",
        "updated_at",
    )

    def get_total_formatted(self, obj):
        return f"${obj.total_price:,.2f}"

    get_total_formatted.short_description = "Total"
    get_total_formatted.admin_order_field = "total_price"
