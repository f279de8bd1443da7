from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class SiteSettings(models.Model):
    """
    Site-wide business configuration: restaurant contact details, opening
    hours, pricing rates and notification/booking switches.

    There is exactly one row, always stored with ``SINGLETON_PK``. It is
    created by ``SettingsService.ensure_defaults`` and never implicitly.
    """

    SINGLETON_PK = 1

    # === RESTAURANT INFO ===
    restaurant_name = models.CharField(max_length=150, default="Hotel Restaurant")
    phone = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)

    # === OPERATING HOURS ===
    opening_time = models.TimeField(null=True, blank=True)
    closing_time = models.TimeField(null=True, blank=True)

    # === PRICING ===
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.16"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text="Tax applied to the order subtotal, as a fraction (0.16 = 16%).",
    )
    service_charge_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.10"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text="Service charge applied to the order subtotal, as a fraction.",
    )

    # === NOTIFICATIONS ===
    notifications_enabled = models.BooleanField(default=True)
    notify_food_orders = models.BooleanField(
        default=True, help_text="Send notifications for food order activity."
    )
    notify_new_bookings = models.BooleanField(
        default=True, help_text="Send notifications for room and event bookings."
    )

    # === SYSTEM ===
    booking_auto_confirm = models.BooleanField(
        default=False, help_text="New bookings start confirmed instead of pending."
    )
    maintenance_mode = models.BooleanField(default=False)

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Site Settings"
        verbose_name_plural = "Site Settings"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Settings for {self.restaurant_name}"
