from django.urls import path
from .views import SiteSettingsView, PublicRestaurantInfoView

app_name = "settings"

urlpatterns = [
    path("", SiteSettingsView.as_view(), name="site-settings"),
    path("public/", PublicRestaurantInfoView.as_view(), name="public-info"),
]
