from rest_framework import serializers
from .models import Notification, NotificationRecipient


class NotificationSerializer(serializers.ModelSerializer):
    """Serializes a delivery row together with its notification."""

    id = serializers.IntegerField(source="notification.id", read_only=True)
    type = serializers.CharField(source="notification.type", read_only=True)
    priority = serializers.CharField(source="notification.priority", read_only=True)
    title = serializers.CharField(source="notification.title", read_only=True)
    message = serializers.CharField(source="notification.message", read_only=True)
    data = serializers.JSONField(source="notification.data", read_only=True)
    sender = serializers.StringRelatedField(source="notification.sender", read_only=True)
    created_at = serializers.DateTimeField(source="notification.created_at", read_only=True)
    is_read = serializers.SerializerMethodField()

    class Meta:
        model = NotificationRecipient
        fields = [
            "id",
            "type",
            "priority",
            "title",
            "message",
            "data",
            "sender",
            "created_at",
            "is_read",
            "read_at",
        ]

    def get_is_read(self, obj):
        return obj.read_at is not None


class NotificationQuerySerializer(serializers.Serializer):
    unread_only = serializers.BooleanField(required=False, default=False)
    type = serializers.ChoiceField(choices=Notification.NotificationType.choices, required=False)
    priority = serializers.ChoiceField(choices=Notification.Priority.choices, required=False)


class MarkReadSerializer(serializers.Serializer):
    notification_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), allow_empty=False
    )
