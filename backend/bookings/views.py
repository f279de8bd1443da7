from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from users.permissions import OperationPermission
from .models import Event, EventBooking, Room, RoomBooking
from .serializers import (
    AvailabilityQuerySerializer,
    BookingStatusUpdateSerializer,
    EventBookingCreateSerializer,
    EventBookingSerializer,
    EventEnquirySerializer,
    EventQuotationSerializer,
    EventSerializer,
    QuotationQuerySerializer,
    RoomBookingCreateSerializer,
    RoomBookingSerializer,
    RoomSerializer,
)
from .services import EventEnquiryService, event_bookings, room_bookings


class BookableResourceViewSet(BaseViewSet):
    """Rooms and events: public reads, gated writes, date availability."""

    permission_classes = [OperationPermission]
    engine = None
    manage_operation = None

    def destroy(self, request, *args, **kwargs):
        self.engine.delete_resource(request.user, self.get_object(), self.manage_operation)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):
        params = AvailabilityQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return Response(
            self.engine.check_availability(
                self.kwargs["pk"], params.validated_data["start"], params.validated_data["end"]
            )
        )


class RoomViewSet(BookableResourceViewSet):
    queryset = Room.objects.all()
    serializer_class = RoomSerializer
    engine = room_bookings
    manage_operation = "room.manage"
    operation_roles = {
        "list": "room.list",
        "retrieve": "room.list",
        "create": "room.manage",
        "update": "room.manage",
        "partial_update": "room.manage",
    }
    filterset_fields = ["room_type", "status"]
    search_fields = ["name", "room_type", "description"]
    ordering_fields = ["name", "price"]
    ordering = ["name"]


class EventViewSet(BookableResourceViewSet):
    queryset = Event.objects.all()
    serializer_class = EventSerializer
    engine = event_bookings
    manage_operation = "event.manage"
    operation_roles = {
        "list": "event.list",
        "retrieve": "event.list",
        "create": "event.manage",
        "update": "event.manage",
        "partial_update": "event.manage",
        "quotations": "event.list_enquiries",
        "enquiries": "event.list_enquiries",
    }
    filterset_fields = ["date", "location"]
    search_fields = ["name", "description", "location"]
    ordering_fields = ["date", "name", "price_per_day"]
    ordering = ["date", "name"]

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def _paginated(self, queryset, serializer_class):
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(serializer_class(page, many=True).data)
        return Response(serializer_class(queryset, many=True).data)

    @action(detail=True, methods=["post"])
    def quote(self, request, pk=None):
        serializer = EventQuotationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quotation = EventEnquiryService.request_quote(self.kwargs["pk"], serializer.validated_data)
        return Response(
            EventQuotationSerializer(quotation).data, status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=["post"])
    def enquiry(self, request):
        serializer = EventEnquirySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enquiry = EventEnquiryService.submit_enquiry(serializer.validated_data)
        return Response(EventEnquirySerializer(enquiry).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def quotations(self, request):
        params = QuotationQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return self._paginated(
            EventEnquiryService.list_quotations(request.user, params.validated_data.get("event")),
            EventQuotationSerializer,
        )

    @action(detail=False, methods=["get"])
    def enquiries(self, request):
        return self._paginated(
            EventEnquiryService.list_enquiries(request.user), EventEnquirySerializer
        )


class BookingViewSet(BaseViewSet):
    """
    Shared endpoints for room and event bookings, addressed by booking code.
    All rules live in the configured booking engine.
    """

    engine = None
    create_serializer_class = None
    resource_field = None
    http_method_names = ["get", "post", "patch", "head", "options"]
    ordering_fields = ["created_at", "total_price"]
    ordering = ["-created_at"]

    def get_queryset(self):
        if self.action == "list":
            return self.engine.list(self.request.user)
        return super().get_queryset()

    def _booking_response(self, booking, status_code=status.HTTP_200_OK):
        return Response(self.serializer_class(booking).data, status=status_code)

    def create(self, request, *args, **kwargs):
        serializer = self.create_serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        resource_id = data.pop(self.resource_field)
        start = data.pop(self.engine.start_field)
        end = data.pop(self.engine.end_field)
        booking = self.engine.create(request.user, resource_id, start, end, **data)
        return self._booking_response(booking, status.HTTP_201_CREATED)

    def retrieve(self, request, *args, **kwargs):
        booking = self.engine.get(request.user, self.kwargs[self.lookup_field])
        return self._booking_response(booking)

    def partial_update(self, request, *args, **kwargs):
        serializer = BookingStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self.engine.update_status(
            request.user, self.kwargs[self.lookup_field], **serializer.validated_data
        )
        return self._booking_response(booking)

    @action(detail=False, methods=["get"], url_path="mine")
    def mine(self, request):
        queryset = self.filter_queryset(self.engine.for_user(request.user))
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.serializer_class(page, many=True).data)
        return Response(self.serializer_class(queryset, many=True).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, **kwargs):
        booking = self.engine.cancel(request.user, self.kwargs[self.lookup_field])
        return Response(
            {"message": "Booking cancelled", "booking": self.serializer_class(booking).data}
        )


class RoomBookingViewSet(BookingViewSet):
    queryset = RoomBooking.objects.all()
    serializer_class = RoomBookingSerializer
    create_serializer_class = RoomBookingCreateSerializer
    engine = room_bookings
    resource_field = "room"
    lookup_field = "booking_code"
    filterset_fields = ["status", "payment_status", "room"]


class EventBookingViewSet(BookingViewSet):
    queryset = EventBooking.objects.all()
    serializer_class = EventBookingSerializer
    create_serializer_class = EventBookingCreateSerializer
    engine = event_bookings
    resource_field = "event"
    lookup_field = "reservation_code"
    filterset_fields = ["status", "payment_status", "event"]
