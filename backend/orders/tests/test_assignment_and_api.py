"""
Waiter assignment, order notifications and the orders REST endpoints.
"""
import pytest
from rest_framework import status

from core_backend.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from notifications.models import Notification
from orders.models import Order
from orders.services import OrderAssignmentService, OrderService

Status = Order.OrderStatus
NotificationType = Notification.NotificationType


@pytest.mark.django_db
class TestOrderAssignment:
    def test_self_assign_confirms_pending_order(self, waiter_user, guest_user, place_order):
        order = OrderAssignmentService.self_assign(waiter_user, place_order(guest_user))

        assert order.assigned_to == waiter_user
        assert order.assigned_by == waiter_user
        assert order.assigned_at is not None
        assert order.status == Status.CONFIRMED

    def test_second_waiter_gets_conflict(self, waiter_user, other_waiter, guest_user, place_order):
        order = place_order(guest_user)
        OrderAssignmentService.self_assign(waiter_user, order)

        with pytest.raises(ConflictError):
            OrderAssignmentService.self_assign(other_waiter, order)

        order.refresh_from_db()
        assert order.assigned_to == waiter_user

    def test_orders_past_confirmed_cannot_be_claimed(self, waiter_user, guest_user, place_order):
        order = place_order(guest_user)
        order = OrderService.update_status(waiter_user, order, Status.CONFIRMED)
        order = OrderService.update_status(waiter_user, order, Status.PREPARING)

        with pytest.raises(ConflictError):
            OrderAssignmentService.self_assign(waiter_user, order)

    def test_guest_cannot_self_assign(self, guest_user, place_order):
        with pytest.raises(AuthorizationError):
            OrderAssignmentService.self_assign(guest_user, place_order(guest_user))

    def test_admin_assigns_waiter(self, admin_user, waiter_user, guest_user, place_order):
        order = OrderAssignmentService.assign(admin_user, place_order(guest_user), waiter_user.pk)

        assert order.assigned_to == waiter_user
        assert order.assigned_by == admin_user
        assert order.status == Status.CONFIRMED

    def test_admin_may_assign_staff(self, admin_user, staff_user, guest_user, place_order):
        order = OrderAssignmentService.assign(admin_user, place_order(guest_user), staff_user.pk)
        assert order.assigned_to == staff_user

    def test_assign_target_must_be_service_role(self, admin_user, guest_user, other_guest, place_order):
        with pytest.raises(ValidationError):
            OrderAssignmentService.assign(admin_user, place_order(guest_user), other_guest.pk)

    def test_assign_target_must_be_active(self, admin_user, waiter_user, guest_user, place_order):
        waiter_user.is_active = False
        waiter_user.save()
        with pytest.raises(ValidationError):
            OrderAssignmentService.assign(admin_user, place_order(guest_user), waiter_user.pk)

    def test_assign_unknown_user(self, admin_user, guest_user, place_order):
        with pytest.raises(NotFoundError):
            OrderAssignmentService.assign(admin_user, place_order(guest_user), 999999)

    def test_only_admins_assign(self, staff_user, waiter_user, guest_user, place_order):
        with pytest.raises(AuthorizationError):
            OrderAssignmentService.assign(staff_user, place_order(guest_user), waiter_user.pk)


@pytest.mark.django_db
class TestOrderNotifications:
    def test_placing_notifies_customer_admins_and_waiters(
        self, admin_user, waiter_user, guest_user, place_order, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            order = place_order(guest_user)

        notification = Notification.objects.get(type=NotificationType.ORDER_PLACED)
        recipients = set(notification.recipients.values_list("email", flat=True))
        assert recipients == {guest_user.email, admin_user.email, waiter_user.email}
        assert notification.data["order_code"] == order.order_code

    def test_nothing_is_sent_before_commit(self, admin_user, guest_user, place_order):
        place_order(guest_user)
        assert not Notification.objects.exists()

    def test_status_change_notifies_customer_and_waiter(
        self, waiter_user, guest_user, place_order, django_capture_on_commit_callbacks
    ):
        order = place_order(guest_user)
        OrderAssignmentService.self_assign(waiter_user, order)

        with django_capture_on_commit_callbacks(execute=True):
            OrderService.update_status(waiter_user, order, Status.PREPARING)

        changed = Notification.objects.get(type=NotificationType.ORDER_STATUS_CHANGED)
        assert set(changed.recipients.values_list("pk", flat=True)) == {guest_user.pk, waiter_user.pk}
        assert changed.data["status"] == "preparing"

    def test_cancellation_reaches_admins(
        self, admin_user, waiter_user, guest_user, place_order, django_capture_on_commit_callbacks
    ):
        order = place_order(guest_user)

        with django_capture_on_commit_callbacks(execute=True):
            OrderService.cancel_order(waiter_user, order, reason="Kitchen closed")

        cancelled = Notification.objects.get(type=NotificationType.ORDER_CANCELLED)
        assert set(cancelled.recipients.values_list("pk", flat=True)) == {guest_user.pk, admin_user.pk}
        assert "Kitchen closed" in cancelled.message

    def test_disabled_order_notifications(
        self, admin_user, guest_user, site_settings, place_order, django_capture_on_commit_callbacks
    ):
        site_settings.notify_food_orders = False
        site_settings.save()

        with django_capture_on_commit_callbacks(execute=True):
            place_order(guest_user)

        assert not Notification.objects.exists()


@pytest.mark.django_db
class TestOrdersApi:
    def payload(self, table, burger, salad, **extra):
        return {
            "table": table.pk,
            "items": [
                {"menu_item": burger.pk, "quantity": 1},
                {"menu_item": salad.pk, "quantity": 1},
            ],
            **extra,
        }

    def test_anonymous_guest_places_order(self, api_client, site_settings, table, burger, salad):
        response = api_client.post(
            "/api/orders/",
            self.payload(table, burger, salad, customer_name="Jo", customer_phone="555-0100"),
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == "pending"
        assert response.data["total_price"] == "18.90"
        assert Order.objects.get(order_code=response.data["order_code"]).user is None

    def test_anonymous_order_without_contact_is_400(
        self, api_client, site_settings, table, burger, salad
    ):
        response = api_client.post("/api/orders/", self.payload(table, burger, salad), format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"] == "validation_error"

    def test_track_is_public(self, api_client, guest_user, place_order):
        order = place_order(guest_user)
        response = api_client.get(f"/api/orders/{order.order_code}/track/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["assigned_to"] == "Not assigned yet"
        assert response.data["table"]["table_number"] == 5

    def test_track_unknown_code_is_404(self, api_client):
        response = api_client.get("/api/orders/ORD-000000000/track/")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"] == "not_found"

    def test_list_requires_waiter(self, guest_client, waiter_client, guest_user, place_order):
        place_order(guest_user)
        assert guest_client.get("/api/orders/").status_code == status.HTTP_403_FORBIDDEN

        response = waiter_client.get("/api/orders/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 1

    def test_list_filters_by_status(self, waiter_client, waiter_user, guest_user, place_order):
        first = place_order(guest_user)
        place_order(guest_user)
        OrderService.cancel_order(waiter_user, first)

        response = waiter_client.get("/api/orders/", {"status": "cancelled"})
        assert [row["order_code"] for row in response.data["results"]] == [first.order_code]

    def test_retrieve_own_order_only(self, client_for, guest_user, other_guest, place_order):
        order = place_order(guest_user)
        url = f"/api/orders/{order.order_code}/"

        assert client_for(guest_user).get(url).status_code == status.HTTP_200_OK
        assert client_for(other_guest).get(url).status_code == status.HTTP_403_FORBIDDEN

    def test_my_orders(self, guest_client, guest_user, other_guest, place_order):
        mine = place_order(guest_user)
        place_order(other_guest)
        response = guest_client.get("/api/orders/my-orders/")
        assert [row["order_code"] for row in response.data["results"]] == [mine.order_code]

    def test_update_status_invalid_edge_is_409(self, waiter_client, guest_user, place_order):
        order = place_order(guest_user)
        response = waiter_client.post(
            f"/api/orders/{order.order_code}/update-status/", {"status": "ready"}, format="json"
        )
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"] == "invalid_transition"
        assert response.data["details"] == {"from_status": "pending", "to_status": "ready"}

    def test_update_status(self, waiter_client, guest_user, place_order):
        order = place_order(guest_user)
        response = waiter_client.post(
            f"/api/orders/{order.order_code}/update-status/", {"status": "confirmed"}, format="json"
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "confirmed"

    def test_guest_cannot_update_status(self, guest_client, guest_user, place_order):
        order = place_order(guest_user)
        response = guest_client.post(
            f"/api/orders/{order.order_code}/update-status/", {"status": "confirmed"}, format="json"
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["details"]["actual_role"] == "guest"

    def test_cancel(self, waiter_client, guest_user, place_order):
        order = place_order(guest_user)
        response = waiter_client.post(
            f"/api/orders/{order.order_code}/cancel/", {"reason": "Left early"}, format="json"
        )
        assert response.data["status"] == "cancelled"
        assert response.data["cancellation_reason"] == "Left early"

    def test_payment(self, waiter_client, guest_user, place_order):
        order = place_order(guest_user)
        response = waiter_client.post(
            f"/api/orders/{order.order_code}/payment/",
            {"payment_status": "paid", "payment_method": "cash"},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data["payment_status"] == "paid"

    def test_self_assign_and_assigned_list(self, waiter_client, guest_user, place_order):
        order = place_order(guest_user)

        response = waiter_client.post(f"/api/orders/{order.order_code}/self-assign/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "confirmed"

        response = waiter_client.get("/api/orders/assigned/")
        assert [row["order_code"] for row in response.data["results"]] == [order.order_code]

        response = waiter_client.post(f"/api/orders/{order.order_code}/self-assign/")
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_available(self, waiter_client, guest_user, place_order):
        order = place_order(guest_user)
        response = waiter_client.get("/api/orders/available/")
        assert [row["order_code"] for row in response.data] == [order.order_code]

    def test_admin_assign(self, admin_client_api, waiter_user, guest_user, place_order):
        order = place_order(guest_user)
        response = admin_client_api.post(
            f"/api/orders/{order.order_code}/assign/", {"waiter_id": waiter_user.pk}, format="json"
        )
        assert response.status_code == status.HTTP_200_OK
        order.refresh_from_db()
        assert order.assigned_to == waiter_user

    def test_rate_before_completion_is_400(self, guest_client, guest_user, place_order):
        order = place_order(guest_user)
        response = guest_client.post(
            f"/api/orders/{order.order_code}/rate/",
            {"food_quality": 5, "service": 5, "ambiance": 5, "overall": 5},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def _completed(self, guest_user, waiter_user, place_order):
        order = place_order(guest_user)
        for new_status in (
            Status.CONFIRMED, Status.PREPARING, Status.READY, Status.SERVED, Status.COMPLETED
        ):
            order = OrderService.update_status(waiter_user, order, new_status)
        return order

    def test_rating_someone_elses_order_is_403_even_with_bad_scores(
        self, client_for, other_guest, guest_user, waiter_user, place_order
    ):
        order = self._completed(guest_user, waiter_user, place_order)
        response = client_for(other_guest).post(
            f"/api/orders/{order.order_code}/rate/",
            {"food_quality": 9, "service": "great", "ambiance": 0, "overall": 5},
            format="json",
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_owner_with_out_of_range_score_is_400(
        self, guest_client, guest_user, waiter_user, place_order
    ):
        order = self._completed(guest_user, waiter_user, place_order)
        response = guest_client.post(
            f"/api/orders/{order.order_code}/rate/",
            {"food_quality": 9, "service": 5, "ambiance": 5, "overall": 5},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        order.refresh_from_db()
        assert not order.is_rated

    def test_owner_rates_completed_order(self, guest_client, guest_user, waiter_user, place_order):
        order = self._completed(guest_user, waiter_user, place_order)
        response = guest_client.post(
            f"/api/orders/{order.order_code}/rate/",
            {"food_quality": 5, "service": 4, "ambiance": 4, "overall": 5, "feedback": "Lovely"},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK
        order.refresh_from_db()
        assert order.rating_overall == 5
        assert order.feedback == "Lovely"

    def test_stats_admin_only(self, admin_client_api, waiter_client, guest_user, place_order):
        place_order(guest_user)
        assert waiter_client.get("/api/orders/stats/").status_code == status.HTTP_403_FORBIDDEN

        response = admin_client_api.get("/api/orders/stats/", {"period": "week"})
        assert response.status_code == status.HTTP_200_OK
        assert response.data["total_orders"] == 1

    def test_orders_are_not_deleted(self, admin_client_api, guest_user, place_order):
        order = place_order(guest_user)
        response = admin_client_api.delete(f"/api/orders/{order.order_code}/")
        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


@pytest.mark.django_db
class TestTableOrdersApi:
    def test_orders_for_table(self, waiter_client, waiter_user, guest_user, table, place_order):
        finished = place_order(guest_user)
        OrderService.cancel_order(waiter_user, finished)
        active = place_order(guest_user)

        response = waiter_client.get(f"/api/tables/{table.pk}/orders/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 2

        response = waiter_client.get(f"/api/tables/{table.pk}/orders/", {"active_only": "true"})
        assert [row["order_code"] for row in response.data["results"]] == [active.order_code]

    def test_requires_waiter(self, guest_client, table):
        response = guest_client.get(f"/api/tables/{table.pk}/orders/")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_table_is_404(self, waiter_client):
        response = waiter_client.get("/api/tables/999999/orders/")
        assert response.status_code == status.HTTP_404_NOT_FOUND
