from django.urls import path
from .views import (
    ClearAllView,
    MarkAllReadView,
    MarkReadView,
    NotificationDeleteView,
    NotificationListView,
    UnreadCountView,
)

app_name = "notifications"

urlpatterns = [
    path("", NotificationListView.as_view(), name="notification-list"),
    path("read/", MarkReadView.as_view(), name="notification-read"),
    path("read-all/", MarkAllReadView.as_view(), name="notification-read-all"),
    path("unread-count/", UnreadCountView.as_view(), name="notification-unread-count"),
    path("clear-all/", ClearAllView.as_view(), name="notification-clear-all"),
    path("<int:pk>/", NotificationDeleteView.as_view(), name="notification-delete"),
]
