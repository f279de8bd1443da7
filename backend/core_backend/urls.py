"""
URL configuration for core_backend project.

Every app mounts its router under /api/; the apps register their own
resource prefixes (orders, tables, rooms, ...).
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/auth/", include("users.auth_urls")),
    path("api/users/", include("users.urls")),
    path("api/settings/", include("settings.urls")),
    path("api/menu/", include("menu.urls")),
    path("api/", include("tables.urls")),
    path("api/", include("orders.urls")),
    path("api/", include("bookings.urls")),
    path("api/notifications/", include("notifications.urls")),
]
