import logging

from decimal import Decimal

from django.db import transaction
from django.db.models import Avg, Count, Max, Min, Q

from core_backend.exceptions import ConflictError, NotFoundError
from users.permissions import authorize
from .models import FoodCategory, MenuItem

logger = logging.getLogger(__name__)


class MenuService:
    """Catalog lookups and the guarded write operations on menu items."""

    @staticmethod
    def find_menu_item(item_id) -> MenuItem:
        try:
            return MenuItem.objects.select_related("category").get(pk=item_id)
        except (MenuItem.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Menu item {item_id} not found")

    @staticmethod
    def active_order_count(item: MenuItem) -> int:
        from orders.models import Order

        return (
            item.order_lines.filter(order__status__in=Order.ACTIVE_STATUSES)
            .values("order")
            .distinct()
            .count()
        )

    @staticmethod
    @transaction.atomic
    def toggle_availability(actor, item: MenuItem) -> MenuItem:
        authorize(actor, "menu.toggle_availability")
        item = MenuItem.objects.select_for_update().get(pk=item.pk)
        item.is_available = not item.is_available
        item.save(update_fields=["is_available", "updated_at"])
        logger.info(
            "Menu item %s is now %s",
            item.pk,
            "available" if item.is_available else "unavailable",
        )
        return item

    @staticmethod
    @transaction.atomic
    def delete_menu_item(actor, item: MenuItem) -> None:
        """
        Delete an item unless an active order still references it. Finished
        orders keep their name/price snapshot.
        """
        authorize(actor, "menu.manage")
        active = MenuService.active_order_count(item)
        if active:
            raise ConflictError(
                "Cannot delete food item with active orders",
                {"active_orders": active},
            )
        item.delete()
        logger.info("Menu item %s deleted by user %s", item.name, actor.pk)

    @staticmethod
    @transaction.atomic
    def delete_category(actor, category: FoodCategory) -> None:
        authorize(actor, "menu.manage")
        items = category.items.count()
        if items:
            raise ConflictError(
                "Cannot delete category with associated food items",
                {"items": items},
            )
        category.delete()
        logger.info("Category %s deleted by user %s", category.name, actor.pk)

    @staticmethod
    @transaction.atomic
    def toggle_category(actor, category: FoodCategory) -> FoodCategory:
        """
        Activate or deactivate a category. Items in an inactive category stay
        on file but drop out of the ``available_only`` listing.
        """
        authorize(actor, "menu.toggle_category")
        category = FoodCategory.objects.select_for_update().get(pk=category.pk)
        category.is_active = not category.is_active
        category.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "Category %s %s by user %s",
            category.pk,
            "activated" if category.is_active else "deactivated",
            actor.pk,
        )
        return category

    @staticmethod
    def menu_stats(actor):
        authorize(actor, "menu.stats")
        overview = MenuItem.objects.aggregate(
            total_items=Count("id"),
            available_items=Count("id", filter=Q(is_available=True)),
            vegetarian_count=Count("id", filter=Q(is_vegetarian=True)),
            spicy_count=Count("id", filter=Q(is_spicy=True)),
            avg_price=Avg("price"),
            min_price=Min("price"),
            max_price=Max("price"),
        )
        overview["unavailable_items"] = overview["total_items"] - overview["available_items"]
        if overview["avg_price"] is not None:
            overview["avg_price"] = Decimal(overview["avg_price"]).quantize(Decimal("0.01"))

        categories = (
            FoodCategory.objects.annotate(
                count=Count("items"),
                available=Count("items", filter=Q(items__is_available=True)),
            )
            .filter(count__gt=0)
            .order_by("-count", "name")
            .values("name", "count", "available")
        )
        return {"overview": overview, "categories": list(categories)}
