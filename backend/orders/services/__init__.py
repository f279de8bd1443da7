"""
Orders services package - service layer for the food order lifecycle.

- OrderService: placement, status machine, payment status, rating, queries
- OrderAssignmentService: waiter self-assign and admin assignment
- OrderCalculationService: pricing and preparation-time estimates
- OrderNotificationService: notification triggers for order events
"""

from .calculation_service import OrderCalculationService
from .notification_service import OrderNotificationService, order_notifications
from .order_service import OrderService, ORDER_STATE_MACHINE
from .assignment_service import OrderAssignmentService

__all__ = [
    'OrderService',
    'ORDER_STATE_MACHINE',
    'OrderAssignmentService',
    'OrderCalculationService',
    'OrderNotificationService',
    'order_notifications',
]
