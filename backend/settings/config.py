"""
Centralized access to the site configuration.

``SettingsService`` is the only code that reads or writes ``SiteSettings``.
Seeding is an explicit step (``ensure_defaults``), run by the
``seed_settings`` command and after migrations; reads never create rows.
"""

from decimal import Decimal
import logging

from django.db import transaction

from users.permissions import authorize

logger = logging.getLogger(__name__)

NOTIFICATION_CATEGORIES = {
    "orders": "notify_food_orders",
    "bookings": "notify_new_bookings",
}


class SettingsService:
    def ensure_defaults(self):
        """
        Create the settings row with default values if it does not exist.
        Returns ``(settings, created)``.
        """
        from .models import SiteSettings

        with transaction.atomic():
            settings_obj, created = SiteSettings.objects.get_or_create(
                pk=SiteSettings.SINGLETON_PK
            )
        if created:
            logger.info("Seeded default site settings")
        return settings_obj, created

    def get(self):
        """
        The stored settings, or an unsaved instance carrying the defaults
        when nothing has been seeded yet.
        """
        from .models import SiteSettings

        try:
            return SiteSettings.objects.get(pk=SiteSettings.SINGLETON_PK)
        except SiteSettings.DoesNotExist:
            logger.warning("Site settings not seeded; using defaults")
            return SiteSettings(pk=SiteSettings.SINGLETON_PK)

    def update(self, actor, data):
        """Apply validated field values to the settings row."""
        authorize(actor, "settings.update")
        with transaction.atomic():
            settings_obj, _ = self.ensure_defaults()
            for field, value in data.items():
                setattr(settings_obj, field, value)
            settings_obj.updated_by = actor
            settings_obj.save()
        logger.info("Site settings updated by user %s: %s", actor.pk, sorted(data))
        return settings_obj

    @property
    def tax_rate(self) -> Decimal:
        return self.get().tax_rate

    @property
    def service_charge_rate(self) -> Decimal:
        return self.get().service_charge_rate

    @property
    def booking_auto_confirm(self) -> bool:
        return self.get().booking_auto_confirm

    def notifications_allowed(self, category=None) -> bool:
        """Master switch plus the per-category preference, if any."""
        settings_obj = self.get()
        if not settings_obj.notifications_enabled:
            return False
        field = NOTIFICATION_CATEGORIES.get(category)
        return getattr(settings_obj, field) if field else True


app_settings = SettingsService()
