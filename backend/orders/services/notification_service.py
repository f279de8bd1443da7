import logging

from notifications.models import Notification
from notifications.services import notify
from orders.models import Order
from users.models import User

logger = logging.getLogger(__name__)

NotificationType = Notification.NotificationType

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed.",
    "preparing": "Your order is being prepared.",
    "ready": "Your order is ready.",
    "served": "Your order has been served. Enjoy your meal!",
    "completed": "Your order is complete. Thank you!",
    "cancelled": "Your order has been cancelled.",
}

# Statuses that admins hear about in addition to the waiter and customer
ADMIN_WATCHED_STATUSES = {
    Order.OrderStatus.CANCELLED,
    Order.OrderStatus.READY,
    Order.OrderStatus.SERVED,
}


class OrderNotificationService:
    """
    Singleton service translating order events into notification triggers.
    Every method is fire-and-forget.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @staticmethod
    def _payload(order, **extra):
        data = {
            "order_id": str(order.pk),
            "order_code": order.order_code,
            "table_number": order.table.table_number,
        }
        data.update(extra)
        return data

    def order_placed(self, order, actor=None):
        notify(
            NotificationType.ORDER_PLACED,
            "New Order Placed",
            f"Order {order.order_code} has been placed for Table {order.table.table_number}.",
            users=[order.user],
            roles=[User.Role.ADMIN, User.Role.WAITER],
            data=self._payload(order, total_price=str(order.total_price)),
            sender=actor,
            category="orders",
        )

    def status_changed(self, order, previous_status, actor=None):
        status = order.status
        if status == Order.OrderStatus.CANCELLED:
            notification_type = NotificationType.ORDER_CANCELLED
            title = "Order Cancelled"
            message = f"Order {order.order_code} has been cancelled. Reason: {order.cancellation_reason}"
        else:
            notification_type = NotificationType.ORDER_STATUS_CHANGED
            title = "Order Status Updated"
            message = f"Order {order.order_code} is now {status}. {STATUS_MESSAGES.get(status, '')}".strip()

        notify(
            notification_type,
            title,
            message,
            users=[order.assigned_to, order.user],
            roles=[User.Role.ADMIN] if status in ADMIN_WATCHED_STATUSES else (),
            data=self._payload(order, previous_status=previous_status, status=status),
            sender=actor,
            category="orders",
        )

    def assigned(self, order, actor=None):
        notify(
            NotificationType.ORDER_ASSIGNED,
            "Order Assigned",
            f"Order {order.order_code} has been assigned to {order.assigned_to.display_name}.",
            users=[order.assigned_to],
            roles=[User.Role.ADMIN],
            data=self._payload(order, assigned_to=order.assigned_to_id),
            sender=actor,
            category="orders",
        )

    def rated(self, order):
        notify(
            NotificationType.ORDER_RATED,
            "Order Rated",
            f"Order {order.order_code} has been rated {order.rating_overall} stars.",
            users=[order.assigned_to],
            roles=[User.Role.ADMIN],
            data=self._payload(order, rating=order.rating_overall),
            sender=order.user,
            category="orders",
        )

order_notifications = OrderNotificationService()
