from rest_framework import serializers

from core_backend.base import BaseModelSerializer, TimestampedSerializer, UserSummarySerializer
from .models import (
    Booking,
    Event,
    EventBooking,
    EventEnquiry,
    EventQuotation,
    Room,
    RoomBooking,
)


class RoomSerializer(TimestampedSerializer):
    amenities = serializers.ListField(
        child=serializers.CharField(max_length=100), required=False, default=list
    )

    class Meta:
        model = Room
        fields = [
            "id",
            "name",
            "room_type",
            "price",
            "description",
            "amenities",
            "status",
            "created_at",
            "updated_at",
        ]


class RoomSummarySerializer(BaseModelSerializer):
    class Meta:
        model = Room
        fields = ["id", "name", "room_type", "price"]


class EventSerializer(TimestampedSerializer):
    class Meta:
        model = Event
        fields = [
            "id",
            "event_code",
            "name",
            "description",
            "location",
            "date",
            "capacity",
            "price_per_day",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["event_code"]


class EventSummarySerializer(BaseModelSerializer):
    class Meta:
        model = Event
        fields = ["id", "event_code", "name", "date", "location"]


class RoomBookingSerializer(TimestampedSerializer):
    user = UserSummarySerializer(read_only=True)
    room = RoomSummarySerializer(read_only=True)

    class Meta:
        model = RoomBooking
        fields = [
            "id",
            "booking_code",
            "user",
            "room",
            "check_in",
            "check_out",
            "total_price",
            "payment_status",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
        select_related_fields = ["user", "room"]


class EventBookingSerializer(TimestampedSerializer):
    user = UserSummarySerializer(read_only=True)
    event = EventSummarySerializer(read_only=True)

    class Meta:
        model = EventBooking
        fields = [
            "id",
            "reservation_code",
            "user",
            "event",
            "guests_count",
            "start_date",
            "end_date",
            "notes",
            "total_price",
            "payment_status",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
        select_related_fields = ["user", "event"]


# --- Input serializers ---


class RoomBookingCreateSerializer(serializers.Serializer):
    room = serializers.IntegerField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()


class EventBookingCreateSerializer(serializers.Serializer):
    event = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BookingStatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(required=False)
    payment_status = serializers.ChoiceField(
        choices=Booking.PaymentStatus.choices, required=False
    )


class AvailabilityQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()


class EventQuotationSerializer(BaseModelSerializer):
    event = EventSummarySerializer(read_only=True)

    class Meta:
        model = EventQuotation
        fields = [
            "id",
            "event",
            "full_name",
            "email",
            "phone",
            "expected_guests",
            "message",
            "created_at",
        ]
        read_only_fields = ["id", "event", "created_at"]
        select_related_fields = ["event"]


class EventEnquirySerializer(BaseModelSerializer):
    class Meta:
        model = EventEnquiry
        fields = [
            "id",
            "full_name",
            "email",
            "phone",
            "event_type",
            "preferred_date",
            "expected_guests",
            "additional_details",
            "created_at",
        ]
        read_only_fields = ["id", "created_at"]


class QuotationQuerySerializer(serializers.Serializer):
    event = serializers.IntegerField(required=False)
