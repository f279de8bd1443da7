from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils import generate_code


class Room(models.Model):
    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        BOOKED = "booked", _("Booked")
        MAINTENANCE = "maintenance", _("Maintenance")

    name = models.CharField(max_length=150)
    room_type = models.CharField(max_length=50)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Rate per night."),
    )
    description = models.TextField(blank=True)
    amenities = models.JSONField(default=list, blank=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.AVAILABLE, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.room_type})"


class Event(models.Model):
    event_code = models.CharField(max_length=20, unique=True, editable=False)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    date = models.DateField()
    capacity = models.PositiveIntegerField(null=True, blank=True)
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "name"]

    def __str__(self):
        return f"{self.name} ({self.event_code})"

    def save(self, *args, **kwargs):
        if not self.event_code:
            self.event_code = generate_code("EV")
        super().save(*args, **kwargs)


class Booking(models.Model):
    """Fields shared by room and event bookings."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CHECKED_IN = "checked-in", _("Checked In")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", _("Unpaid")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")

    ACTIVE_STATUSES = [Status.PENDING, Status.CONFIRMED, Status.CHECKED_IN]

    total_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES


class RoomBooking(Booking):
    booking_code = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="room_bookings"
    )
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name="bookings")
    check_in = models.DateField()
    check_out = models.DateField()

    class Meta(Booking.Meta):
        indexes = [
            models.Index(
                fields=["room", "status", "check_in", "check_out"],
                name="room_booking_overlap_idx",
            ),
            models.Index(fields=["user", "created_at"], name="room_booking_user_idx"),
        ]

    def __str__(self):
        return f"{self.booking_code}: {self.room} {self.check_in} to {self.check_out}"


class EventBooking(Booking):
    reservation_code = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="event_bookings"
    )
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="bookings")
    guests_count = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    start_date = models.DateField()
    end_date = models.DateField()
    notes = models.TextField(blank=True)

    class Meta(Booking.Meta):
        indexes = [
            models.Index(
                fields=["event", "status", "start_date", "end_date"],
                name="event_booking_overlap_idx",
            ),
            models.Index(fields=["user", "created_at"], name="event_booking_user_idx"),
        ]

    def __str__(self):
        return f"{self.reservation_code}: {self.event} {self.start_date} to {self.end_date}"


class EventQuotation(models.Model):
    """A prospective client's request for a price on a specific event."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="quotations")
    full_name = models.CharField(max_length=150)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    expected_guests = models.PositiveIntegerField(null=True, blank=True)
    message = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Quote for {self.event.name} from {self.full_name}"


class EventEnquiry(models.Model):
    """A general enquiry about hosting an event, not tied to a listed event."""

    full_name = models.CharField(max_length=150)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    event_type = models.CharField(max_length=100, blank=True)
    preferred_date = models.DateField(null=True, blank=True)
    expected_guests = models.PositiveIntegerField(null=True, blank=True)
    additional_details = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Event enquiries"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.event_type or 'Event'} enquiry from {self.full_name}"
