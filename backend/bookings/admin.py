from django.contrib import admin

from .models import Event, EventBooking, EventEnquiry, EventQuotation, Room, RoomBooking


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ["name", "room_type", "price", "status"]
    list_filter = ["room_type", "status"]
    search_fields = ["name", "description"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["event_code", "name", "date", "location", "capacity", "price_per_day"]
    search_fields = ["event_code", "name", "location"]
    readonly_fields = ["event_code", "created_by"]


class BookingAdmin(admin.ModelAdmin):
    """Bookings change status through the booking engines, so it is read-only here."""

    list_filter = ["status", "payment_status", "created_at"]
    readonly_fields = ["status", "total_price", "created_at", "updated_at"]
    ordering = ["-created_at"]


@admin.register(RoomBooking)
class RoomBookingAdmin(BookingAdmin):
    list_display = ["booking_code", "room", "user", "check_in", "check_out", "status", "total_price"]
    search_fields = ["booking_code", "user__email", "room__name"]
    list_select_related = ["room", "user"]


@admin.register(EventBooking)
class EventBookingAdmin(BookingAdmin):
    list_display = ["reservation_code", "event", "user", "start_date", "end_date", "guests_count", "status"]
    search_fields = ["reservation_code", "user__email", "event__name"]
    list_select_related = ["event", "user"]


@admin.register(EventQuotation)
class EventQuotationAdmin(admin.ModelAdmin):
    list_display = ["event", "full_name", "email", "expected_guests", "created_at"]
    search_fields = ["full_name", "email", "event__name"]
    list_select_related = ["event"]


@admin.register(EventEnquiry)
class EventEnquiryAdmin(admin.ModelAdmin):
    list_display = ["full_name", "email", "event_type", "preferred_date", "expected_guests", "created_at"]
    list_filter = ["event_type"]
    search_fields = ["full_name", "email", "event_type"]
