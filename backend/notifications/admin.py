from django.contrib import admin
from .models import Notification, NotificationRecipient


class NotificationRecipientInline(admin.TabularInline):
    model = NotificationRecipient
    extra = 0
    raw_id_fields = ["user"]


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["title", "type", "priority", "created_at", "expires_at"]
    list_filter = ["type", "priority"]
    search_fields = ["title", "message"]
    inlines = [NotificationRecipientInline]
