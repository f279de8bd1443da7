from rest_framework import serializers
from core_backend.base import BaseModelSerializer
from .models import User


class UserSerializer(BaseModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "phone",
            "role",
            "is_active",
            "date_joined",
        ]
        read_only_fields = ["id", "role", "is_active", "date_joined"]


class WaiterSerializer(BaseModelSerializer):
    active_orders = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "name", "phone", "active_orders"]


class AccountCreateSerializer(serializers.Serializer):
    """Input for guest sign-up; the role is decided by the endpoint."""

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True, min_length=8, style={"input_type": "password"}
    )
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)


class StaffAccountCreateSerializer(AccountCreateSerializer):
    role = serializers.ChoiceField(choices=User.Role.choices)


class AdminAccountCreateSerializer(AccountCreateSerializer):
    admin_secret_key = serializers.CharField(write_only=True)


class UserAdminSerializer(BaseModelSerializer):
    """Full user record for the admin management endpoints."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "phone",
            "role",
            "is_active",
            "date_joined",
            "updated_at",
        ]
        read_only_fields = ["id", "email", "date_joined", "updated_at"]
