"""
Site settings tests: explicit seeding, default reads, admin-only updates and
the public restaurant info endpoint.
"""
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from rest_framework import status

from core_backend.exceptions import AuthorizationError
from settings.config import app_settings
from settings.models import SiteSettings


@pytest.fixture
def unseeded(db):
    SiteSettings.objects.all().delete()


@pytest.mark.django_db
class TestSettingsService:
    def test_ensure_defaults_seeds_once(self, unseeded):
        settings_obj, created = app_settings.ensure_defaults()
        assert created
        assert settings_obj.pk == SiteSettings.SINGLETON_PK
        assert settings_obj.tax_rate == Decimal("0.16")
        assert settings_obj.service_charge_rate == Decimal("0.10")

        _, created = app_settings.ensure_defaults()
        assert not created
        assert SiteSettings.objects.count() == 1

    def test_reads_do_not_create_rows(self, unseeded):
        settings_obj = app_settings.get()

        assert settings_obj._state.adding
        assert app_settings.tax_rate == Decimal("0.16")
        assert app_settings.booking_auto_confirm is False
        assert not SiteSettings.objects.exists()

    def test_update_is_admin_only(self, staff_user, site_settings):
        with pytest.raises(AuthorizationError):
            app_settings.update(staff_user, {"tax_rate": Decimal("0.20")})

    def test_update(self, admin_user, site_settings):
        app_settings.update(admin_user, {"tax_rate": Decimal("0.20"), "booking_auto_confirm": True})

        assert app_settings.tax_rate == Decimal("0.20")
        assert app_settings.booking_auto_confirm is True
        assert app_settings.get().updated_by == admin_user

    def test_single_row(self, site_settings):
        SiteSettings(restaurant_name="Another").save()
        assert SiteSettings.objects.count() == 1
        assert app_settings.get().restaurant_name == "Another"

    @pytest.mark.parametrize(
        "field, category, expected",
        [
            ("notify_food_orders", "orders", False),
            ("notify_food_orders", "bookings", True),
            ("notify_new_bookings", "bookings", False),
            ("notifications_enabled", None, False),
            ("notifications_enabled", "orders", False),
        ],
    )
    def test_notifications_allowed(self, site_settings, field, category, expected):
        setattr(site_settings, field, False)
        site_settings.save()
        assert app_settings.notifications_allowed(category) is expected

    def test_seed_settings_command(self, unseeded):
        out = StringIO()
        call_command("seed_settings", stdout=out)
        assert "Created default settings" in out.getvalue()

        out = StringIO()
        call_command("seed_settings", stdout=out)
        assert "already present" in out.getvalue()
        assert SiteSettings.objects.count() == 1


@pytest.mark.django_db
class TestSettingsApi:
    def test_view_requires_staff(self, guest_client, client_for, staff_user, site_settings):
        assert guest_client.get("/api/settings/").status_code == status.HTTP_403_FORBIDDEN

        response = client_for(staff_user).get("/api/settings/")
        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data["tax_rate"]) == Decimal("0.16")

    def test_anonymous_is_401(self, api_client, site_settings):
        assert api_client.get("/api/settings/").status_code == status.HTTP_401_UNAUTHORIZED

    def test_patch_by_admin(self, admin_client_api, site_settings):
        response = admin_client_api.patch(
            "/api/settings/", {"service_charge_rate": "0.05"}, format="json"
        )
        assert response.status_code == status.HTTP_200_OK
        assert app_settings.service_charge_rate == Decimal("0.05")

    def test_patch_by_staff_is_forbidden(self, client_for, staff_user, site_settings):
        response = client_for(staff_user).patch(
            "/api/settings/", {"service_charge_rate": "0.05"}, format="json"
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert app_settings.service_charge_rate == Decimal("0.10")

    def test_rate_out_of_range_is_400(self, admin_client_api, site_settings):
        response = admin_client_api.patch("/api/settings/", {"tax_rate": "1.5"}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_public_info(self, api_client, site_settings):
        response = api_client.get("/api/settings/public/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["restaurant_name"] == "Hotel Restaurant"
        assert "tax_rate" not in response.data
