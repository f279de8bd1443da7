"""
Account creation and admin user management: public guest sign-up, staff and
admin account creation, and the guarded update/delete rules.
"""
import pytest
from django.conf import settings
from rest_framework import status

from core_backend.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from users.models import User
from users.services import UserService

ACCOUNT = {"email": "new@hotel.test", "password": "s3cret-pass", "name": "Nia New"}


@pytest.mark.django_db
class TestRegistration:
    def test_register_always_creates_a_guest(self):
        user = UserService.register({**ACCOUNT, "role": "admin"})

        assert user.role == User.Role.GUEST
        assert user.check_password("s3cret-pass")
        assert not user.is_staff

    def test_email_is_unique_case_insensitively(self, guest_user):
        with pytest.raises(ConflictError):
            UserService.register({**ACCOUNT, "email": guest_user.email.upper()})

    def test_email_and_password_required(self):
        with pytest.raises(ValidationError):
            UserService.register({"email": "x@hotel.test"})

    def test_register_api_logs_the_guest_in(self, api_client):
        response = api_client.post("/api/auth/register/", ACCOUNT, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["user"]["role"] == "guest"
        assert response.data["access"]
        assert response.data["refresh"]
        assert settings.SIMPLE_JWT["AUTH_COOKIE"] in response.cookies

        api_client.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]] = response.data["access"]
        assert api_client.get("/api/users/me/").data["email"] == ACCOUNT["email"]

    def test_register_api_duplicate_is_409(self, api_client, guest_user):
        response = api_client.post(
            "/api/auth/register/", {**ACCOUNT, "email": guest_user.email}, format="json"
        )
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_register_api_short_password_is_400(self, api_client):
        response = api_client.post(
            "/api/auth/register/", {**ACCOUNT, "password": "short"}, format="json"
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestStaffAccounts:
    @pytest.mark.parametrize("role", ["waiter", "staff"])
    def test_admin_creates_waiters_and_staff(self, admin_user, role):
        user = UserService.create_user(admin_user, {**ACCOUNT, "role": role})
        assert user.role == role

    @pytest.mark.parametrize("role", ["guest", "admin", None])
    def test_other_roles_are_rejected(self, admin_user, role):
        with pytest.raises(ValidationError):
            UserService.create_user(admin_user, {**ACCOUNT, "role": role})

    def test_staff_cannot_create_accounts(self, staff_user):
        with pytest.raises(AuthorizationError):
            UserService.create_user(staff_user, {**ACCOUNT, "role": "waiter"})

    def test_create_admin_needs_the_secret(self, admin_user, settings):
        settings.ADMIN_SECRET_KEY = "open-sesame"

        with pytest.raises(AuthorizationError):
            UserService.create_admin(admin_user, ACCOUNT, "wrong")

        user = UserService.create_admin(admin_user, ACCOUNT, "open-sesame")
        assert user.role == User.Role.ADMIN
        assert user.is_staff

    def test_create_admin_disabled_without_a_configured_secret(self, admin_user, settings):
        settings.ADMIN_SECRET_KEY = ""
        with pytest.raises(AuthorizationError):
            UserService.create_admin(admin_user, ACCOUNT, "")

    def test_create_admin_requires_an_admin(self, staff_user, settings):
        settings.ADMIN_SECRET_KEY = "open-sesame"
        with pytest.raises(AuthorizationError):
            UserService.create_admin(staff_user, ACCOUNT, "open-sesame")


@pytest.mark.django_db
class TestUserManagement:
    def test_list_users_is_admin_only(self, admin_user, staff_user, guest_user):
        assert set(UserService.list_users(admin_user)) == {admin_user, staff_user, guest_user}
        assert list(UserService.list_users(admin_user, role="guest")) == [guest_user]

        with pytest.raises(AuthorizationError):
            UserService.list_users(staff_user)

    def test_staff_can_view_a_user(self, staff_user, guest_user):
        assert UserService.get_user(staff_user, guest_user.pk) == guest_user

    def test_anonymous_cannot_view_a_user(self, guest_user):
        with pytest.raises(AuthenticationError):
            UserService.get_user(None, guest_user.pk)

    def test_update_role_and_active_flag(self, admin_user, waiter_user):
        user = UserService.update_user(
            admin_user, waiter_user, {"role": "staff", "is_active": False, "name": "Wes"}
        )

        user.refresh_from_db()
        assert user.role == User.Role.STAFF
        assert user.is_active is False
        assert user.name == "Wes"

    def test_cannot_promote_to_admin(self, admin_user, waiter_user):
        with pytest.raises(AuthorizationError):
            UserService.update_user(admin_user, waiter_user, {"role": "admin"})
        waiter_user.refresh_from_db()
        assert waiter_user.role == User.Role.WAITER

    def test_cannot_deactivate_self(self, admin_user):
        with pytest.raises(ValidationError):
            UserService.update_user(admin_user, admin_user, {"is_active": False})

    def test_delete_rules(self, admin_user, guest_user):
        other_admin = User.objects.create_user(email="root@hotel.test", role=User.Role.ADMIN)

        with pytest.raises(ValidationError):
            UserService.delete_user(admin_user, admin_user)
        with pytest.raises(AuthorizationError):
            UserService.delete_user(admin_user, other_admin)

        UserService.delete_user(admin_user, guest_user)
        assert not User.objects.filter(pk=guest_user.pk).exists()


@pytest.mark.django_db
class TestUserManagementApi:
    def test_list(self, admin_client_api, waiter_client, guest_user):
        response = admin_client_api.get("/api/users/", {"role": "guest"})
        assert response.status_code == status.HTTP_200_OK
        assert [row["email"] for row in response.data["results"]] == [guest_user.email]

        assert waiter_client.get("/api/users/").status_code == status.HTTP_403_FORBIDDEN

    def test_create_staff(self, admin_client_api):
        response = admin_client_api.post("/api/users/", {**ACCOUNT, "role": "waiter"}, format="json")
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["role"] == "waiter"
        assert "password" not in response.data

    def test_create_guest_through_management_is_400(self, admin_client_api):
        response = admin_client_api.post("/api/users/", {**ACCOUNT, "role": "guest"}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_waiter_cannot_create_even_with_bad_input(self, waiter_client):
        response = waiter_client.post("/api/users/", {"email": "nope"}, format="json")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_retrieve_by_staff(self, client_for, staff_user, guest_user):
        response = client_for(staff_user).get(f"/api/users/{guest_user.pk}/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["email"] == guest_user.email

    def test_retrieve_unknown_is_404(self, admin_client_api):
        assert admin_client_api.get("/api/users/999999/").status_code == status.HTTP_404_NOT_FOUND

    def test_patch(self, admin_client_api, waiter_user):
        response = admin_client_api.patch(
            f"/api/users/{waiter_user.pk}/", {"is_active": False}, format="json"
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_active"] is False

    def test_patch_to_admin_is_403(self, admin_client_api, waiter_user):
        response = admin_client_api.patch(
            f"/api/users/{waiter_user.pk}/", {"role": "admin"}, format="json"
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete(self, admin_client_api, guest_user):
        response = admin_client_api.delete(f"/api/users/{guest_user.pk}/")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not User.objects.filter(pk=guest_user.pk).exists()

    def test_me_and_waiters_routes_still_resolve(self, admin_client_api):
        assert admin_client_api.get("/api/users/me/").status_code == status.HTTP_200_OK
        assert admin_client_api.get("/api/users/waiters/").status_code == status.HTTP_200_OK

    def test_create_admin_endpoint(self, admin_client_api, settings):
        settings.ADMIN_SECRET_KEY = "open-sesame"
        response = admin_client_api.post(
            "/api/auth/create-admin/", {**ACCOUNT, "admin_secret_key": "nope"}, format="json"
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = admin_client_api.post(
            "/api/auth/create-admin/", {**ACCOUNT, "admin_secret_key": "open-sesame"}, format="json"
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["role"] == "admin"
