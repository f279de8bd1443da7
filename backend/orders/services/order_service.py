from datetime import timedelta
from decimal import Decimal
import logging

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from core_backend.base import StateMachine
from core_backend.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from core_backend.utils import generate_code
from menu.services import MenuService
from orders.models import Order, OrderItem
from settings.config import app_settings
from tables.models import Table
from tables.services import TableService
from users.models import User
from users.permissions import ANY_AUTHENTICATED, WAITER_OR_ABOVE, authorize, can, has_role
from .calculation_service import OrderCalculationService
from .notification_service import order_notifications

logger = logging.getLogger(__name__)

Status = Order.OrderStatus

ORDER_STATE_MACHINE = StateMachine(
    "order",
    {
        Status.PENDING: {Status.CONFIRMED, Status.CANCELLED},
        Status.CONFIRMED: {Status.PREPARING, Status.CANCELLED},
        Status.PREPARING: {Status.READY, Status.CANCELLED},
        Status.READY: {Status.SERVED},
        Status.SERVED: {Status.COMPLETED},
        Status.COMPLETED: set(),
        Status.CANCELLED: set(),
    },
)


@ORDER_STATE_MACHINE.on_enter(Status.PREPARING)
def _estimate_ready_time(order, previous, **context):
    lines = [
        (
            line.menu_item.preparation_time if line.menu_item else line.preparation_time,
            line.quantity,
        )
        for line in order.items.select_related("menu_item")
    ]
    minutes = OrderCalculationService.estimate_preparation_minutes(lines)
    order.estimated_ready_at = timezone.now() + timedelta(minutes=minutes)


@ORDER_STATE_MACHINE.on_enter(Status.CANCELLED)
def _record_cancellation(order, previous, actor=None, reason=None, **context):
    order.cancellation_reason = reason or "No reason provided"
    order.cancelled_by = actor if has_role(actor, ANY_AUTHENTICATED) else None
    order.cancelled_at = timezone.now()


@ORDER_STATE_MACHINE.on_enter(Status.COMPLETED)
def _record_completion(order, previous, **context):
    order.completed_at = timezone.now()


RATING_FIELDS = {
    "food_quality": "rating_food_quality",
    "service": "rating_service",
    "ambiance": "rating_ambiance",
    "overall": "rating_overall",
}

STATS_PERIODS = {
    "today": None,
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
    "all": None,
}


class OrderService:
    """Core service for the food order lifecycle - placing, progressing, paying and rating orders."""

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @staticmethod
    def base_queryset():
        return Order.objects.select_related(
            "table", "user", "assigned_to", "assigned_by"
        ).prefetch_related("items")

    @staticmethod
    def find_by_code(order_code) -> Order:
        try:
            return OrderService.base_queryset().get(order_code=order_code)
        except Order.DoesNotExist:
            raise NotFoundError(f"Order {order_code} not found")

    @staticmethod
    def _lock(order: Order) -> Order:
        return Order.objects.select_for_update().get(pk=order.pk)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_contact(actor, customer_name, customer_phone):
        if not has_role(actor, ANY_AUTHENTICATED):
            if not customer_name or not customer_phone:
                raise ValidationError(
                    "Customer name and phone are required for guest orders"
                )
            return False

        ordering_for_customer = has_role(actor, WAITER_OR_ABOVE) and bool(
            customer_name or customer_phone
        )
        if ordering_for_customer and not (customer_name and customer_phone):
            raise ValidationError(
                "Customer name and phone are required when placing order for customer"
            )
        return ordering_for_customer

    @staticmethod
    def _build_lines(items):
        lines = []
        for entry in items:
            menu_item = MenuService.find_menu_item(entry.get("menu_item"))
            if not menu_item.is_available:
                raise ValidationError(f"{menu_item.name} is currently unavailable")

            quantity = entry.get("quantity", 1)
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                raise ValidationError(
                    f"Quantity for {menu_item.name} must be a whole number of at least 1"
                )
            lines.append(
                OrderItem(
                    menu_item=menu_item,
                    item_name=menu_item.name,
                    quantity=quantity,
                    item_price=menu_item.price,
                    item_total=OrderCalculationService.line_total(menu_item.price, quantity),
                    preparation_time=menu_item.preparation_time,
                    special_instructions=entry.get("special_instructions") or "",
                )
            )
        return lines

    @staticmethod
    def create_order(
        actor,
        table_id,
        items,
        customer_name="",
        customer_phone="",
        customer_email="",
        notes="",
        special_requests="",
        priority=Order.Priority.NORMAL,
    ) -> Order:
        """
        Place a food order at a table.

        Guests (no actor) must leave a name and phone number. When a waiter
        enters an order on behalf of a customer, the order is assigned to
        that waiter and starts confirmed. The table is occupied as part of
        the same transaction.
        """
        authorize(actor, "order.create")

        if not items:
            raise ValidationError("Order must contain at least one item")
        if table_id in (None, ""):
            raise ValidationError("Table is required")
        if priority not in Order.Priority.values:
            raise ValidationError(f"'{priority}' is not a valid priority")

        ordering_for_customer = OrderService._validate_contact(
            actor, customer_name, customer_phone
        )

        with transaction.atomic():
            table = TableService._lock(TableService.find_table(table_id))
            if not table.is_active:
                raise ValidationError("Table is not active")
            if table.status in Table.NON_ORDERABLE_STATUSES:
                raise ConflictError(f"Table is currently {table.status}")

            lines = OrderService._build_lines(items)
            totals = OrderCalculationService.calculate_totals(
                [(line.item_price, line.quantity) for line in lines],
                app_settings.tax_rate,
                app_settings.service_charge_rate,
            )

            order = Order(
                order_code=generate_code("ORD"),
                table=table,
                status=Status.PENDING,
                priority=priority,
                notes=notes or "",
                special_requests=special_requests or "",
                **totals,
            )
            if has_role(actor, ANY_AUTHENTICATED):
                order.user = actor
            if ordering_for_customer or not order.user:
                order.customer_name = customer_name or ""
                order.customer_phone = customer_phone or ""
                order.customer_email = customer_email or ""
            if ordering_for_customer and actor.role == User.Role.WAITER:
                now = timezone.now()
                order.assigned_to = actor
                order.assigned_by = actor
                order.assigned_at = now
                order.status = Status.CONFIRMED

            try:
                with transaction.atomic():
                    order.save(force_insert=True)
            except IntegrityError:
                raise ConflictError("Duplicate order code, try again")

            for line in lines:
                line.order = order
            OrderItem.objects.bulk_create(lines)

            TableService.occupy_for_order(table, order)

        logger.info(
            "Order %s placed at table %s (total %s)",
            order.order_code, table.table_number, order.total_price,
        )
        order_notifications.order_placed(order, actor)
        return order

    # ------------------------------------------------------------------
    # Status machine
    # ------------------------------------------------------------------

    @staticmethod
    def update_status(actor, order: Order, new_status, reason=None, notes=None) -> Order:
        """
        Move an order along the status machine. Finishing the last active
        order at a table sends the table to cleaning.
        """
        authorize(actor, "order.update_status")

        with transaction.atomic():
            order = OrderService._lock(order)
            previous = ORDER_STATE_MACHINE.apply(
                order, new_status, actor=actor, reason=reason
            )
            if notes:
                order.notes = f"{order.notes}\n{notes}".strip()
            order.save()

            if ORDER_STATE_MACHINE.is_terminal(order.status):
                TableService.release_after_orders(order.table)

        logger.info(
            "Order %s status %s -> %s by user %s",
            order.order_code, previous, order.status, actor.pk,
        )
        order_notifications.status_changed(order, previous, actor)
        return order

    @staticmethod
    def cancel_order(actor, order: Order, reason=None) -> Order:
        return OrderService.update_status(actor, order, Status.CANCELLED, reason=reason)

    # ------------------------------------------------------------------
    # Payment status (bookkeeping only, no processing)
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def update_payment_status(
        actor, order: Order, payment_status, payment_method=None, payment_reference=None
    ) -> Order:
        authorize(actor, "order.update_payment")
        if payment_status not in Order.PaymentStatus.values:
            raise ValidationError(f"'{payment_status}' is not a valid payment status")
        if payment_method and payment_method not in Order.PaymentMethod.values:
            raise ValidationError(f"'{payment_method}' is not a valid payment method")

        order = OrderService._lock(order)
        order.payment_status = payment_status
        if payment_status == Order.PaymentStatus.PAID:
            order.paid_at = timezone.now()
            if payment_method:
                order.payment_method = payment_method
            if payment_reference:
                order.payment_reference = payment_reference
        order.save(
            update_fields=[
                "payment_status",
                "paid_at",
                "payment_method",
                "payment_reference",
                "updated_at",
            ]
        )
        logger.info("Order %s payment status set to %s", order.order_code, payment_status)
        return order

    # ------------------------------------------------------------------
    # Rating
    # ------------------------------------------------------------------

    @staticmethod
    def rate_order(actor, order: Order, scores, feedback="") -> Order:
        """
        Record the customer's rating. ``scores`` maps food_quality, service,
        ambiance and overall to integers between 1 and 5.
        """
        authorize(actor, "order.rate")

        with transaction.atomic():
            order = OrderService._lock(order)
            if order.user_id != actor.pk:
                raise AuthorizationError(message="You can only rate your own orders")
            if order.status != Status.COMPLETED:
                raise ValidationError("Only completed orders can be rated")
            if order.is_rated:
                raise ConflictError("Order has already been rated")

            for key, field in RATING_FIELDS.items():
                value = scores.get(key)
                if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
                    raise ValidationError(
                        f"Rating '{key}' must be an integer between 1 and 5"
                    )
                setattr(order, field, value)
            if feedback is not None and not isinstance(feedback, str):
                raise ValidationError("Feedback must be text")
            order.feedback = feedback or ""
            order.rated_at = timezone.now()
            order.save()

        order_notifications.rated(order)
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def list_orders(actor):
        authorize(actor, "order.list")
        return OrderService.base_queryset()

    @staticmethod
    def my_orders(actor):
        authorize(actor, "order.list_mine")
        return OrderService.base_queryset().filter(user=actor)

    @staticmethod
    def get_order(actor, order_code) -> Order:
        """Owners see their own orders; waiters and above see every order."""
        authorize(actor, "order.view")
        order = OrderService.find_by_code(order_code)
        if order.user_id != actor.pk and not can(actor, "order.view_any"):
            raise AuthorizationError(
                required_roles=WAITER_OR_ABOVE,
                actual_role=actor.role,
                message="Not authorized to view this order",
            )
        return order

    @staticmethod
    def track_order(order_code):
        """Public, reduced view of an order for customers without an account."""
        authorize(None, "order.track")
        order = OrderService.find_by_code(order_code)
        return {
            "order_code": order.order_code,
            "status": order.status,
            "table": {
                "table_number": order.table.table_number,
                "name": order.table.name,
                "section": order.table.section,
            },
            "items": [
                {
                    "name": line.item_name,
                    "quantity": line.quantity,
                    "special_instructions": line.special_instructions,
                }
                for line in order.items.all()
            ],
            "total_price": order.total_price,
            "order_time": order.created_at,
            "estimated_ready_at": order.estimated_ready_at,
            "assigned_to": (
                order.assigned_to.display_name if order.assigned_to else "Not assigned yet"
            ),
        }

    @staticmethod
    def orders_for_table(actor, table: Table, active_only=False):
        authorize(actor, "order.list_for_table")
        queryset = OrderService.base_queryset().filter(table=table)
        if active_only:
            queryset = queryset.filter(status__in=Order.ACTIVE_STATUSES)
        return queryset

    @staticmethod
    def assigned_orders(actor, include_finished=False):
        authorize(actor, "order.list_assigned")
        queryset = OrderService.base_queryset().filter(assigned_to=actor)
        if not include_finished:
            queryset = queryset.filter(status__in=Order.ACTIVE_STATUSES)
        return queryset

    @staticmethod
    def available_orders(actor):
        """Unassigned orders a waiter can still pick up, oldest first."""
        authorize(actor, "order.list_available")
        return (
            OrderService.base_queryset()
            .filter(assigned_to__isnull=True, status__in=Order.ASSIGNABLE_STATUSES)
            .order_by("created_at")
        )

    @staticmethod
    def order_stats(actor, period="today", table_id=None):
        authorize(actor, "order.stats")
        if period not in STATS_PERIODS:
            raise ValidationError(
                f"Unknown period '{period}'", {"allowed": sorted(STATS_PERIODS)}
            )

        orders = Order.objects.all()
        now = timezone.now()
        if period == "today":
            start = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
            orders = orders.filter(created_at__gte=start)
        elif STATS_PERIODS[period] is not None:
            orders = orders.filter(created_at__gte=now - STATS_PERIODS[period])
        if table_id:
            orders = orders.filter(table_id=table_id)

        summary = orders.aggregate(
            total_orders=Count("id"),
            total_revenue=Sum("total_price"),
            average_order_value=Avg("total_price"),
            average_rating=Avg("rating_overall"),
            **{
                f"{status}_orders": Count("id", filter=Q(status=status))
                for status in Status.values
            },
        )
        summary["total_revenue"] = summary["total_revenue"] or Decimal("0.00")
        summary["average_order_value"] = Decimal(
            summary["average_order_value"] or 0
        ).quantize(Decimal("0.01"))

        popular_items = list(
            OrderItem.objects.filter(order__in=orders)
            .values("item_name")
            .annotate(quantity=Sum("quantity"), revenue=Sum("item_total"))
            .order_by("-quantity", "item_name")[:5]
        )
        return {"period": period, **summary, "popular_items": popular_items}
