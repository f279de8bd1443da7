from django.core.management.base import BaseCommand

from settings.config import app_settings


class Command(BaseCommand):
    help = "Create the site settings row with default values if it is missing"

    def handle(self, *args, **options):
        settings_obj, created = app_settings.ensure_defaults()
        if created:
            self.stdout.write(
                self.style.SUCCESS(f"Created default settings for {settings_obj.restaurant_name}")
            )
        else:
            self.stdout.write("Site settings already present, nothing to do")
