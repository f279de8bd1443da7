import logging

from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import ConflictError, ValidationError
from orders.models import Order
from users.permissions import WAITER_OR_ABOVE, authorize, has_role
from users.services import UserService
from .notification_service import order_notifications
from .order_service import ORDER_STATE_MACHINE

logger = logging.getLogger(__name__)


class OrderAssignmentService:
    """Waiter self-assignment and admin assignment of orders."""

    @staticmethod
    @transaction.atomic
    def _assign(order: Order, waiter, assigned_by) -> Order:
        # Row lock: two waiters racing for the same order end with one winner
        order = Order.objects.select_for_update().get(pk=order.pk)
        if order.assigned_to_id is not None:
            raise ConflictError(
                "Order is already assigned",
                {"assigned_to": order.assigned_to_id},
            )
        if order.status not in Order.ASSIGNABLE_STATUSES:
            raise ConflictError(f"Cannot assign an order that is {order.status}")

        order.assigned_to = waiter
        order.assigned_by = assigned_by
        order.assigned_at = timezone.now()
        if order.status == Order.OrderStatus.PENDING:
            ORDER_STATE_MACHINE.apply(order, Order.OrderStatus.CONFIRMED)
        order.save(
            update_fields=["assigned_to", "assigned_by", "assigned_at", "status", "updated_at"]
        )
        return order

    @staticmethod
    def self_assign(actor, order: Order) -> Order:
        """Claim an unassigned pending or confirmed order."""
        authorize(actor, "order.self_assign")
        order = OrderAssignmentService._assign(order, actor, actor)
        logger.info("Order %s self-assigned by user %s", order.order_code, actor.pk)
        order_notifications.assigned(order, actor)
        return order

    @staticmethod
    def assign(actor, order: Order, waiter_id) -> Order:
        authorize(actor, "order.assign")

        waiter = UserService.find_user(waiter_id)
        if not waiter.is_active or not has_role(waiter, WAITER_OR_ABOVE):
            raise ValidationError("Orders can only be assigned to active waiters, staff or admins")

        order = OrderAssignmentService._assign(order, waiter, actor)
        logger.info(
            "Order %s assigned to user %s by admin %s",
            order.order_code, waiter.pk, actor.pk,
        )
        order_notifications.assigned(order, actor)
        return order
