"""
Signal handlers for the settings app.
Seeds the site settings row once the schema exists.
"""


def seed_site_settings(sender, **kwargs):
    from .config import app_settings

    app_settings.ensure_defaults()
