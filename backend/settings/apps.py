from django.apps import AppConfig
from django.db.models.signals import post_migrate


class SettingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "settings"

    def ready(self):
        from .signals import seed_site_settings

        post_migrate.connect(seed_site_settings, sender=self)
