from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import CurrentUserView, UserViewSet, WaiterListView

app_name = "users"

router = SimpleRouter()
router.register(r"", UserViewSet, basename="user")

urlpatterns = [
    path("me/", CurrentUserView.as_view(), name="me"),
    path("waiters/", WaiterListView.as_view(), name="waiters"),
    path("", include(router.urls)),
]
