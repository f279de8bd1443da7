"""
Room and event booking engines.

Both booking types follow the same rules: a date range on a resource, an
overlap check against active bookings, rate-based pricing and a forward-only
status machine. ``BookingEngine`` holds those rules once and is configured
per booking type; the two configured instances are ``room_bookings`` and
``event_bookings``.
"""
import logging
import math
from datetime import timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import F, Q

from core_backend.base import StateMachine
from core_backend.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from core_backend.utils import generate_code
from notifications.models import Notification
from notifications.services import notify
from settings.config import app_settings
from users.models import User
from users.permissions import STAFF_OR_ADMIN, authorize, can
from .models import (
    Booking,
    Event,
    EventBooking,
    EventEnquiry,
    EventQuotation,
    Room,
    RoomBooking,
)

logger = logging.getLogger(__name__)

Status = Booking.Status
ONE_DAY = timedelta(days=1)
NotificationType = Notification.NotificationType

BOOKING_TRANSITIONS = {
    Status.PENDING: {Status.CONFIRMED, Status.CHECKED_IN, Status.COMPLETED, Status.CANCELLED},
    Status.CONFIRMED: {Status.CHECKED_IN, Status.COMPLETED, Status.CANCELLED},
    Status.CHECKED_IN: {Status.COMPLETED, Status.CANCELLED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}

STATUS_NOTIFICATIONS = {
    Status.CONFIRMED: (NotificationType.BOOKING_CONFIRMED, "Booking Confirmed"),
    Status.CHECKED_IN: (NotificationType.BOOKING_CHECKED_IN, "Checked In"),
    Status.CANCELLED: (NotificationType.BOOKING_CANCELLED, "Booking Cancelled"),
}


def booking_state_machine(name):
    return StateMachine(name, BOOKING_TRANSITIONS, allow_same_state=True)


ROOM_BOOKING_STATE_MACHINE = booking_state_machine("room_booking")
EVENT_BOOKING_STATE_MACHINE = booking_state_machine("event_booking")


@ROOM_BOOKING_STATE_MACHINE.on_enter(Status.CONFIRMED, Status.CHECKED_IN)
def _mark_room_booked(booking, previous, **context):
    booking.room.status = Room.Status.BOOKED


@ROOM_BOOKING_STATE_MACHINE.on_enter(Status.COMPLETED, Status.CANCELLED)
def _release_room(booking, previous, **context):
    booking.room.status = Room.Status.AVAILABLE


def stay_length(start, end):
    """Billable days between two dates; a same-day booking counts as one."""
    return max(1, math.ceil((end - start).total_seconds() / 86400))


class BookingEngine:
    def __init__(
        self,
        name,
        model,
        resource_model,
        resource_field,
        start_field,
        end_field,
        code_field,
        code_prefix,
        rate_field,
        state_machine,
        create_operation,
        list_mine_operation,
        resource_status_field=None,
        required_fields=(),
    ):
        self.name = name
        self.model = model
        self.resource_model = resource_model
        self.resource_field = resource_field
        self.start_field = start_field
        self.end_field = end_field
        self.code_field = code_field
        self.code_prefix = code_prefix
        self.rate_field = rate_field
        self.state_machine = state_machine
        self.create_operation = create_operation
        self.list_mine_operation = list_mine_operation
        self.resource_status_field = resource_status_field
        self.required_fields = required_fields

    def __repr__(self):
        return f"<BookingEngine {self.name}>"

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def queryset(self):
        return self.model.objects.select_related("user", self.resource_field)

    def find_resource(self, resource_id, lock=False):
        queryset = self.resource_model.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=resource_id)
        except (self.resource_model.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(
                f"{self.resource_model._meta.verbose_name.capitalize()} {resource_id} not found"
            )

    def find_by_code(self, code, lock=False):
        queryset = self.queryset()
        if lock:
            queryset = queryset.select_for_update(of=("self",))
        try:
            return queryset.get(**{self.code_field: code})
        except self.model.DoesNotExist:
            raise NotFoundError(f"Booking {code} not found")

    def code_of(self, booking):
        return getattr(booking, self.code_field)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @staticmethod
    def validate_dates(start, end):
        if not start or not end:
            raise ValidationError("Start and end dates are required")
        if end < start:
            raise ValidationError("End date must not be before start date")

    def validate_extra(self, extra):
        for field in self.required_fields:
            if extra.get(field) in (None, ""):
                raise ValidationError(f"{field} is required")
        guests = extra.get("guests_count")
        if guests is not None and guests < 1:
            raise ValidationError("guests_count must be at least 1")

    def overlapping(self, resource, start, end, exclude=None):
        """
        Active bookings on ``resource`` whose range intersects [start, end).

        A same-day booking is billed for one day, so it holds
        [start, start + 1 day) on both sides of the comparison.
        """
        end = max(end, start + ONE_DAY)
        start_field, end_field = self.start_field, self.end_field
        ends_after_start = Q(**{f"{end_field}__gt": start}) | (
            Q(**{end_field: F(start_field)}) & Q(**{f"{start_field}__gte": start})
        )
        queryset = self.model.objects.filter(
            Q(**{f"{start_field}__lt": end}) & ends_after_start,
            **{self.resource_field: resource},
            status__in=Booking.ACTIVE_STATUSES,
        )
        if exclude is not None:
            queryset = queryset.exclude(pk=exclude.pk)
        return queryset

    def price(self, resource, start, end) -> Decimal:
        rate = Decimal(getattr(resource, self.rate_field))
        return (rate * stay_length(start, end)).quantize(Decimal("0.01"))

    def _apply_status(self, booking, new_status):
        previous = self.state_machine.apply(booking, new_status)
        if self.resource_status_field:
            getattr(booking, self.resource_field).save(
                update_fields=[self.resource_status_field, "updated_at"]
            )
        return previous

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, actor, resource_id, start, end, **extra):
        """
        Book ``resource_id`` for [start, end]. The overlap check and the
        insert run under a lock on the resource row, so two concurrent
        requests for the same dates cannot both succeed.
        """
        authorize(actor, self.create_operation)
        self.validate_dates(start, end)
        self.validate_extra(extra)

        with transaction.atomic():
            resource = self.find_resource(resource_id, lock=True)
            clash = self.overlapping(resource, start, end).first()
            if clash is not None:
                raise ConflictError(
                    f"{self.resource_model._meta.verbose_name.capitalize()} "
                    "is not available for the selected dates",
                    {"conflicting_booking": self.code_of(clash)},
                )

            booking = self.model(
                user=actor,
                status=Status.PENDING,
                total_price=self.price(resource, start, end),
                **{
                    self.resource_field: resource,
                    self.start_field: start,
                    self.end_field: end,
                    self.code_field: generate_code(self.code_prefix),
                },
                **extra,
            )
            try:
                with transaction.atomic():
                    booking.save(force_insert=True)
            except IntegrityError:
                raise ConflictError("Duplicate booking code, try again")

            if app_settings.booking_auto_confirm:
                self._apply_status(booking, Status.CONFIRMED)
                booking.save(update_fields=["status", "updated_at"])

        logger.info(
            "%s booking %s created for %s (%s to %s)",
            self.name, self.code_of(booking), resource, start, end,
        )
        self._notify_created(booking, actor)
        return booking

    def update_status(self, actor, code, status=None, payment_status=None):
        """Staff/admin update of the booking status and/or payment status."""
        authorize(actor, "booking.update")
        if status is None and payment_status is None:
            raise ValidationError("Provide a status or a payment status")
        if payment_status is not None and payment_status not in Booking.PaymentStatus.values:
            raise ValidationError(f"'{payment_status}' is not a valid payment status")

        with transaction.atomic():
            booking = self.find_by_code(code, lock=True)
            previous = booking.status
            if status is not None:
                self._apply_status(booking, status)
            if payment_status is not None:
                booking.payment_status = payment_status
            booking.save(update_fields=["status", "payment_status", "updated_at"])

        if booking.status != previous:
            logger.info(
                "%s booking %s status %s -> %s by user %s",
                self.name, code, previous, booking.status, actor.pk,
            )
            self._notify_status(booking, actor)
        return booking

    def cancel(self, actor, code):
        """Cancel and release the resource. Cancelling twice is a no-op."""
        authorize(actor, "booking.cancel")

        with transaction.atomic():
            booking = self.find_by_code(code, lock=True)
            if booking.status == Status.CANCELLED:
                return booking
            self._apply_status(booking, Status.CANCELLED)
            booking.save(update_fields=["status", "updated_at"])

        logger.info("%s booking %s cancelled by user %s", self.name, code, actor.pk)
        self._notify_status(booking, actor)
        return booking

    @transaction.atomic
    def delete_resource(self, actor, resource, operation):
        """Delete a room or event that has never been booked."""
        authorize(actor, operation)
        bookings = self.model.objects.filter(**{self.resource_field: resource}).count()
        if bookings:
            raise ConflictError(
                f"Cannot delete a {self.name} that has bookings", {"bookings": bookings}
            )
        resource.delete()
        logger.info("%s %s deleted by user %s", self.name.capitalize(), resource, actor.pk)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, actor):
        authorize(actor, "booking.list")
        return self.queryset()

    def for_user(self, actor):
        authorize(actor, self.list_mine_operation)
        return self.queryset().filter(user=actor)

    def get(self, actor, code):
        authorize(actor, "booking.view")
        booking = self.find_by_code(code)
        if booking.user_id != actor.pk and not can(actor, "booking.view_any"):
            raise AuthorizationError(
                required_roles=STAFF_OR_ADMIN,
                actual_role=actor.role,
                message="Not authorized to view this booking",
            )
        return booking

    def check_availability(self, resource_id, start, end):
        authorize(None, "booking.check_availability")
        self.validate_dates(start, end)
        resource = self.find_resource(resource_id)
        return {"available": not self.overlapping(resource, start, end).exists()}

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _payload(self, booking):
        return {
            "booking_code": self.code_of(booking),
            "booking_type": self.name,
            "resource": str(getattr(booking, self.resource_field)),
            "start": str(getattr(booking, self.start_field)),
            "end": str(getattr(booking, self.end_field)),
            "status": booking.status,
        }

    def _notify_created(self, booking, actor):
        notify(
            NotificationType.BOOKING_CREATED,
            "New Booking",
            f"Booking {self.code_of(booking)} for {getattr(booking, self.resource_field)} "
            f"has been created.",
            users=[booking.user],
            roles=[User.Role.ADMIN],
            data={**self._payload(booking), "total_price": str(booking.total_price)},
            sender=actor,
            category="bookings",
        )

    def _notify_status(self, booking, actor):
        if booking.status not in STATUS_NOTIFICATIONS:
            return
        notification_type, title = STATUS_NOTIFICATIONS[booking.status]
        notify(
            notification_type,
            title,
            f"Booking {self.code_of(booking)} is now {booking.status}.",
            users=[booking.user],
            data=self._payload(booking),
            sender=actor,
            category="bookings",
        )


room_bookings = BookingEngine(
    name="room",
    model=RoomBooking,
    resource_model=Room,
    resource_field="room",
    start_field="check_in",
    end_field="check_out",
    code_field="booking_code",
    code_prefix="RM",
    rate_field="price",
    state_machine=ROOM_BOOKING_STATE_MACHINE,
    create_operation="room_booking.create",
    list_mine_operation="room_booking.list_mine",
    resource_status_field="status",
)

event_bookings = BookingEngine(
    name="event",
    model=EventBooking,
    resource_model=Event,
    resource_field="event",
    start_field="start_date",
    end_field="end_date",
    code_field="reservation_code",
    code_prefix="EVR",
    rate_field="price_per_day",
    state_machine=EVENT_BOOKING_STATE_MACHINE,
    create_operation="event_booking.create",
    list_mine_operation="event_booking.list_mine",
    required_fields=("guests_count",),
)


class EventEnquiryService:
    """Public quote requests and enquiries, read back by staff."""

    @staticmethod
    def _require_contact(data):
        if not data.get("full_name") or not data.get("email"):
            raise ValidationError("Full name and email are required")

    @staticmethod
    def request_quote(event_id, data) -> EventQuotation:
        authorize(None, "event.request_quote")
        EventEnquiryService._require_contact(data)
        event = event_bookings.find_resource(event_id)
        quotation = EventQuotation.objects.create(event=event, **data)
        logger.info("Quote %s requested for event %s", quotation.pk, event.event_code)
        return quotation

    @staticmethod
    def submit_enquiry(data) -> EventEnquiry:
        authorize(None, "event.enquire")
        EventEnquiryService._require_contact(data)
        enquiry = EventEnquiry.objects.create(**data)
        logger.info("Event enquiry %s submitted", enquiry.pk)
        return enquiry

    @staticmethod
    def list_quotations(actor, event_id=None):
        authorize(actor, "event.list_enquiries")
        queryset = EventQuotation.objects.select_related("event")
        if event_id is not None:
            queryset = queryset.filter(event_id=event_id)
        return queryset

    @staticmethod
    def list_enquiries(actor):
        authorize(actor, "event.list_enquiries")
        return EventEnquiry.objects.all()
