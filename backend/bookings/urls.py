from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import EventBookingViewSet, EventViewSet, RoomBookingViewSet, RoomViewSet

router = DefaultRouter()
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"events", EventViewSet, basename="event")
router.register(r"room-bookings", RoomBookingViewSet, basename="room-booking")
router.register(r"event-bookings", EventBookingViewSet, basename="event-booking")

urlpatterns = [
    path("", include(router.urls)),
]
