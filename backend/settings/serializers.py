from rest_framework import serializers
from core_backend.base import BaseModelSerializer
from .models import SiteSettings


class SiteSettingsSerializer(BaseModelSerializer):
    updated_by = serializers.StringRelatedField(read_only=True)

    class Meta:
        model = SiteSettings
        fields = [
            "restaurant_name",
            "phone",
            "email",
            "address",
            "description",
            "opening_time",
            "closing_time",
            "tax_rate",
            "service_charge_rate",
            "notifications_enabled",
            "notify_food_orders",
            "notify_new_bookings",
            "booking_auto_confirm",
            "maintenance_mode",
            "updated_by",
            "updated_at",
        ]
        read_only_fields = ["updated_by", "updated_at"]


class PublicRestaurantInfoSerializer(BaseModelSerializer):
    class Meta:
        model = SiteSettings
        fields = [
            "restaurant_name",
            "phone",
            "email",
            "address",
            "description",
            "opening_time",
            "closing_time",
        ]
