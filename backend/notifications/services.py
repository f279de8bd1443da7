"""
Notification storage and the fire-and-forget trigger used by the order and
booking engines.

Engines call ``notify`` after a significant transition. Delivery is deferred
until the surrounding transaction commits and any failure is logged and
dropped, so a notification problem can never undo or fail the operation
that caused it.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import NotFoundError
from .models import Notification, NotificationRecipient

logger = logging.getLogger(__name__)

NotificationType = Notification.NotificationType
Priority = Notification.Priority

PRIORITY_BY_TYPE = {
    NotificationType.SYSTEM_ALERT: Priority.URGENT,
    NotificationType.ORDER_CANCELLED: Priority.HIGH,
    NotificationType.BOOKING_CANCELLED: Priority.HIGH,
    NotificationType.ORDER_PLACED: Priority.HIGH,
    NotificationType.ORDER_ASSIGNED: Priority.HIGH,
    NotificationType.BOOKING_CONFIRMED: Priority.HIGH,
    NotificationType.TABLE_OCCUPIED: Priority.HIGH,
    NotificationType.ORDER_STATUS_CHANGED: Priority.NORMAL,
    NotificationType.ORDER_RATED: Priority.NORMAL,
    NotificationType.BOOKING_CREATED: Priority.NORMAL,
    NotificationType.BOOKING_CHECKED_IN: Priority.NORMAL,
}


def _user_ids(users):
    ids = []
    for user in users or []:
        if user is None:
            continue
        user_id = getattr(user, "pk", user)
        if user_id is not None and user_id not in ids:
            ids.append(user_id)
    return ids


class NotificationService:
    @staticmethod
    def priority_for(notification_type):
        return PRIORITY_BY_TYPE.get(notification_type, Priority.NORMAL)

    @staticmethod
    def users_with_roles(roles):
        User = get_user_model()
        return list(
            User.objects.filter(role__in=list(roles), is_active=True).values_list("pk", flat=True)
        )

    @staticmethod
    @transaction.atomic
    def send(notification_type, title, message, users=(), roles=(), data=None, sender=None):
        """
        Store one notification for the union of ``users`` and the active
        members of ``roles``. Returns None when nobody is left to notify.
        """
        recipient_ids = _user_ids(users)
        if roles:
            for user_id in NotificationService.users_with_roles(roles):
                if user_id not in recipient_ids:
                    recipient_ids.append(user_id)
        if not recipient_ids:
            logger.debug("No recipients for %s notification", notification_type)
            return None

        notification = Notification.objects.create(
            type=notification_type,
            priority=NotificationService.priority_for(notification_type),
            title=title,
            message=message,
            data=data or {},
            sender_id=getattr(sender, "pk", sender),
        )
        NotificationRecipient.objects.bulk_create(
            [
                NotificationRecipient(notification=notification, user_id=user_id)
                for user_id in recipient_ids
            ]
        )
        logger.info(
            "Notification %s sent to %d user(s)", notification_type, len(recipient_ids)
        )
        return notification

    @staticmethod
    def send_to_users(user_ids, notification_type, title, message, data=None, sender=None):
        return NotificationService.send(
            notification_type, title, message, users=user_ids, data=data, sender=sender
        )

    @staticmethod
    def send_to_roles(roles, notification_type, title, message, data=None, sender=None):
        return NotificationService.send(
            notification_type, title, message, roles=roles, data=data, sender=sender
        )

    # ------------------------------------------------------------------
    # Reading side
    # ------------------------------------------------------------------

    @staticmethod
    def for_user(user, unread_only=False, notification_type=None, priority=None):
        deliveries = NotificationRecipient.objects.filter(
            user=user, notification__expires_at__gt=timezone.now()
        ).select_related("notification", "notification__sender")
        if unread_only:
            deliveries = deliveries.filter(read_at__isnull=True)
        if notification_type:
            deliveries = deliveries.filter(notification__type=notification_type)
        if priority:
            deliveries = deliveries.filter(notification__priority=priority)
        return deliveries.order_by("-notification__created_at")

    @staticmethod
    def mark_read(user, notification_ids):
        return NotificationRecipient.objects.filter(
            user=user, notification_id__in=notification_ids, read_at__isnull=True
        ).update(read_at=timezone.now())

    @staticmethod
    def mark_all_read(user):
        return NotificationRecipient.objects.filter(
            user=user, read_at__isnull=True
        ).update(read_at=timezone.now())

    @staticmethod
    def unread_count(user):
        return NotificationService.for_user(user, unread_only=True).count()

    @staticmethod
    def _drop_orphans(notification_ids):
        Notification.objects.filter(pk__in=notification_ids, deliveries__isnull=True).delete()

    @staticmethod
    @transaction.atomic
    def delete_for_user(user, notification_id):
        """Remove one notification from ``user``'s inbox; other recipients keep it."""
        deleted, _ = NotificationRecipient.objects.filter(
            user=user, notification_id=notification_id
        ).delete()
        if not deleted:
            raise NotFoundError(f"Notification {notification_id} not found")
        NotificationService._drop_orphans([notification_id])

    @staticmethod
    @transaction.atomic
    def clear_all(user):
        """Empty ``user``'s inbox except for urgent notifications. Returns the count removed."""
        deliveries = NotificationRecipient.objects.filter(user=user).exclude(
            notification__priority=Priority.URGENT
        )
        notification_ids = list(deliveries.values_list("notification_id", flat=True))
        deleted, _ = deliveries.delete()
        NotificationService._drop_orphans(notification_ids)
        logger.info("Cleared %d notification(s) for user %s", deleted, user.pk)
        return deleted


def notify(
    notification_type,
    title,
    message,
    users=(),
    roles=(),
    data=None,
    sender=None,
    category=None,
):
    """
    Fire-and-forget trigger. Runs after the current transaction commits
    (immediately when there is none); errors are logged, never raised.
    """
    user_ids = _user_ids(users)
    sender_id = getattr(sender, "pk", sender)

    def deliver():
        from settings.config import app_settings

        try:
            if not app_settings.notifications_allowed(category):
                logger.debug("Notifications disabled for %s", category or notification_type)
                return
            NotificationService.send(
                notification_type,
                title,
                message,
                users=user_ids,
                roles=roles,
                data=data,
                sender=sender_id,
            )
        except Exception:
            logger.error(
                "Failed to send %s notification", notification_type, exc_info=True
            )

    transaction.on_commit(deliver)
