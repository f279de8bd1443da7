from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

NOTIFICATION_LIFETIME = timedelta(days=30)


def default_expiry():
    return timezone.now() + NOTIFICATION_LIFETIME


class Notification(models.Model):
    class NotificationType(models.TextChoices):
        ORDER_PLACED = "order_placed", _("Order Placed")
        ORDER_STATUS_CHANGED = "order_status_changed", _("Order Status Changed")
        ORDER_ASSIGNED = "order_assigned", _("Order Assigned")
        ORDER_CANCELLED = "order_cancelled", _("Order Cancelled")
        ORDER_RATED = "order_rated", _("Order Rated")
        BOOKING_CREATED = "booking_created", _("Booking Created")
        BOOKING_CONFIRMED = "booking_confirmed", _("Booking Confirmed")
        BOOKING_CANCELLED = "booking_cancelled", _("Booking Cancelled")
        BOOKING_CHECKED_IN = "booking_checked_in", _("Booking Checked In")
        TABLE_OCCUPIED = "table_occupied", _("Table Occupied")
        SYSTEM_ALERT = "system_alert", _("System Alert")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        NORMAL = "normal", _("Normal")
        HIGH = "high", _("High")
        URGENT = "urgent", _("Urgent")

    recipients = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="NotificationRecipient",
        related_name="notifications",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    type = models.CharField(max_length=40, choices=NotificationType.choices)
    priority = models.CharField(
        max_length=10, choices=Priority.choices, default=Priority.NORMAL
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    delivered = models.BooleanField(default=False)
    expires_at = models.DateTimeField(default=default_expiry)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["type", "created_at"], name="notification_type_idx"),
            models.Index(fields=["expires_at"], name="notification_expiry_idx"),
        ]

    def __str__(self):
        return f"{self.type}: {self.title}"


class NotificationRecipient(models.Model):
    """Per-user delivery row carrying the read state."""

    notification = models.ForeignKey(
        Notification, on_delete=models.CASCADE, related_name="deliveries"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notification_deliveries",
    )
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["notification", "user"], name="unique_notification_recipient"
            ),
        ]
        indexes = [
            models.Index(fields=["user", "read_at"], name="notification_user_read_idx"),
        ]
