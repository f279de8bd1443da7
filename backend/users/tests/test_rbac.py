"""
Role-Based Access Control (RBAC) Tests

Tests for the operation/role table, the authorize gate and the DRF
permission that consults it.
"""
import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework import status

from core_backend.exceptions import AuthenticationError, AuthorizationError
from users.models import User
from users.permissions import (
    ADMIN_ONLY,
    BOOKING_CUSTOMERS,
    NOT_GUEST,
    OPERATION_ROLES,
    OperationPermission,
    WAITER_OR_ABOVE,
    authorize,
    can,
    has_role,
    is_role_permitted,
)
from users.services import UserService


class TestRoleSets:
    def test_is_role_permitted_is_exact_membership(self):
        assert is_role_permitted("admin", ADMIN_ONLY)
        assert not is_role_permitted("staff", ADMIN_ONLY)
        assert is_role_permitted("anything", None)

    def test_waiters_cannot_book(self):
        assert User.Role.WAITER not in BOOKING_CUSTOMERS
        assert {User.Role.GUEST, User.Role.STAFF, User.Role.ADMIN} == set(BOOKING_CUSTOMERS)

    def test_every_operation_uses_known_roles(self):
        known = set(User.Role.values)
        for operation, roles in OPERATION_ROLES.items():
            if roles is not None:
                assert set(roles) <= known, operation


@pytest.mark.django_db
class TestAuthorize:
    def test_public_operation_allows_anonymous(self):
        authorize(None, "menu.list")
        authorize(AnonymousUser(), "order.track")

    def test_restricted_operation_requires_actor(self):
        with pytest.raises(AuthenticationError):
            authorize(None, "order.list")
        with pytest.raises(AuthenticationError):
            authorize(AnonymousUser(), "order.list")

    def test_role_outside_set_is_denied_with_details(self, guest_user):
        with pytest.raises(AuthorizationError) as exc_info:
            authorize(guest_user, "order.update_status")

        assert exc_info.value.actual_role == "guest"
        assert exc_info.value.required_roles == sorted(WAITER_OR_ABOVE)

    def test_role_inside_set_is_allowed(self, waiter_user, admin_user):
        authorize(waiter_user, "order.update_status")
        authorize(admin_user, "order.assign")

    def test_no_role_hierarchy(self, admin_user):
        # Admins are not implicitly waiters: the booking set excludes waiters
        # but includes admins, and table history excludes staff.
        authorize(admin_user, "room_booking.create")

    def test_waiter_cannot_book_rooms(self, waiter_user):
        with pytest.raises(AuthorizationError):
            authorize(waiter_user, "room_booking.create")

    def test_event_bookings_are_not_for_guests(self, guest_user, waiter_user):
        authorize(waiter_user, "event_booking.create")
        authorize(waiter_user, "event_booking.list_mine")
        with pytest.raises(AuthorizationError) as exc_info:
            authorize(guest_user, "event_booking.create")
        assert exc_info.value.required_roles == sorted(NOT_GUEST)
        assert not can(guest_user, "event_booking.list_mine")
        assert can(guest_user, "room_booking.create")

    def test_inactive_user_is_denied(self, waiter_user):
        waiter_user.is_active = False
        with pytest.raises(AuthorizationError):
            authorize(waiter_user, "order.update_status")

    def test_unknown_operation_is_a_programming_error(self, admin_user):
        with pytest.raises(KeyError):
            authorize(admin_user, "order.teleport")

    def test_non_raising_helpers(self, waiter_user, guest_user):
        assert has_role(waiter_user, WAITER_OR_ABOVE)
        assert not has_role(None, WAITER_OR_ABOVE)
        assert can(waiter_user, "order.view_any")
        assert not can(guest_user, "order.view_any")
        assert can(None, "menu.list")


@pytest.mark.django_db
class TestOperationPermission:
    class View:
        operation_roles = {"create": "menu.manage"}

        def __init__(self, action):
            self.action = action

    def request_for(self, user):
        return type("Request", (), {"user": user})

    def test_mapped_action_runs_gate(self, staff_user):
        with pytest.raises(AuthorizationError):
            OperationPermission().has_permission(self.request_for(staff_user), self.View("create"))

    def test_unmapped_action_is_left_to_services(self):
        assert OperationPermission().has_permission(
            self.request_for(AnonymousUser()), self.View("destroy")
        )


@pytest.mark.django_db
class TestUsersApi:
    def test_me_requires_authentication(self, api_client):
        response = api_client.get("/api/users/me/")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error"] == "authentication_error"

    def test_me_returns_current_user(self, guest_client, guest_user):
        response = guest_client.get("/api/users/me/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["email"] == guest_user.email
        assert response.data["role"] == "guest"

    def test_waiter_list_is_admin_only(self, waiter_client):
        response = waiter_client.get("/api/users/waiters/")
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["details"]["actual_role"] == "waiter"

    def test_waiter_list_counts_active_orders(
        self, admin_client_api, waiter_user, other_waiter, place_order
    ):
        place_order(waiter_user, customer_name="Jo", customer_phone="555-0100")

        response = admin_client_api.get("/api/users/waiters/")

        assert response.status_code == status.HTTP_200_OK
        counts = {row["email"]: row["active_orders"] for row in response.data}
        assert counts == {waiter_user.email: 1, other_waiter.email: 0}

    def test_find_user_unknown_id(self):
        from core_backend.exceptions import NotFoundError

        with pytest.raises(NotFoundError):
            UserService.find_user(999999)
