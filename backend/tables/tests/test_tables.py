"""
Table registry tests: the manual status machine, the occupy/clear/
mark-available flows, guarded deletes and the admin queries.
"""
import pytest
from rest_framework import status

from core_backend.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    ValidationError,
)
from tables.models import Table
from tables.services import TABLE_STATE_MACHINE, TableService


class TestTableStateMachine:
    @pytest.mark.parametrize(
        "from_status, to_status",
        [
            ("available", "maintenance"),
            ("available", "out_of_service"),
            ("occupied", "cleaning"),
            ("occupied", "available"),
            ("reserved", "occupied"),
            ("cleaning", "available"),
            ("maintenance", "out_of_service"),
            ("out_of_service", "available"),
        ],
    )
    def test_allowed_edges(self, from_status, to_status):
        assert TABLE_STATE_MACHINE.can_transition(from_status, to_status)

    @pytest.mark.parametrize(
        "from_status, to_status",
        [
            ("available", "occupied"),
            ("available", "cleaning"),
            ("cleaning", "occupied"),
            ("maintenance", "occupied"),
            ("out_of_service", "cleaning"),
        ],
    )
    def test_disallowed_edges(self, from_status, to_status):
        assert not TABLE_STATE_MACHINE.can_transition(from_status, to_status)


@pytest.mark.django_db
class TestTableTransitions:
    def test_manual_available_to_occupied_fails(self, waiter_user, table):
        with pytest.raises(InvalidTransitionError):
            TableService.transition(waiter_user, table, Table.Status.OCCUPIED)
        table.refresh_from_db()
        assert table.status == Table.Status.AVAILABLE

    def test_manual_transition_records_actor(self, waiter_user, table):
        table = TableService.transition(waiter_user, table, Table.Status.MAINTENANCE)
        table.refresh_from_db()
        assert table.status == Table.Status.MAINTENANCE
        assert table.updated_by == waiter_user

    def test_guests_cannot_change_status(self, guest_user, table):
        with pytest.raises(AuthorizationError):
            TableService.transition(guest_user, table, Table.Status.MAINTENANCE)

    def test_occupy_stamps_time(self, waiter_user, table):
        table = TableService.occupy(waiter_user, table, party_size=2)
        assert table.status == Table.Status.OCCUPIED
        assert table.last_occupied_at is not None

    def test_occupy_requires_available_table(self, waiter_user, table):
        TableService.transition(waiter_user, table, Table.Status.MAINTENANCE)
        with pytest.raises(ConflictError):
            TableService.occupy(waiter_user, table)

    @pytest.mark.parametrize("party_size", [0, 5])
    def test_occupy_checks_party_size(self, waiter_user, table, party_size):
        with pytest.raises(ValidationError):
            TableService.occupy(waiter_user, table, party_size=party_size)

    def test_clear_then_mark_available(self, waiter_user, table):
        TableService.occupy(waiter_user, table)

        table = TableService.clear(waiter_user, table)
        assert table.status == Table.Status.CLEANING
        assert table.current_order is None
        assert table.last_cleaned_at is not None

        table = TableService.mark_available(waiter_user, table)
        assert table.status == Table.Status.AVAILABLE

    def test_clear_requires_occupied(self, waiter_user, table):
        with pytest.raises(ConflictError):
            TableService.clear(waiter_user, table)

    def test_clear_blocked_by_active_orders(self, waiter_user, guest_user, table, place_order):
        place_order(guest_user)
        with pytest.raises(ConflictError) as exc_info:
            TableService.clear(waiter_user, table)
        assert exc_info.value.details == {"active_orders": 1}

    def test_mark_available_requires_cleaning(self, waiter_user, table):
        with pytest.raises(ConflictError):
            TableService.mark_available(waiter_user, table)


@pytest.mark.django_db
class TestTableRegistry:
    def test_default_name(self, make_table):
        assert make_table(12).name == "Table 12"

    def test_duplicate_number_conflicts(self, table):
        with pytest.raises(ConflictError):
            TableService.create_table({"table_number": table.table_number})

    def test_delete_blocked_when_occupied(self, admin_user, waiter_user, table):
        TableService.occupy(waiter_user, table)
        with pytest.raises(ConflictError):
            TableService.delete_table(admin_user, table)

    def test_delete_blocked_by_active_orders(self, admin_user, waiter_user, guest_user, table, place_order):
        order = place_order(guest_user)
        # Even a table moved out of occupied keeps its active orders
        TableService.transition(waiter_user, table, Table.Status.MAINTENANCE)
        with pytest.raises(ConflictError):
            TableService.delete_table(admin_user, table)
        assert order.table_id == table.pk

    def test_delete_free_table(self, admin_user, make_table):
        spare = make_table(30)
        TableService.delete_table(admin_user, spare)
        assert not Table.objects.filter(pk=spare.pk).exists()

    def test_available_tables(self, make_table, waiter_user):
        small = make_table(1, capacity=2)
        large = make_table(2, capacity=8, section=Table.Section.TERRACE)
        busy = make_table(3, capacity=8)
        TableService.occupy(waiter_user, busy)

        assert list(TableService.available_tables()) == [small, large]
        assert list(TableService.available_tables(capacity=6)) == [large]
        assert list(TableService.available_tables(section=Table.Section.MAIN_HALL)) == [small]

    def test_stats(self, admin_user, waiter_user, make_table):
        make_table(1, capacity=2)
        busy = make_table(2, capacity=6)
        TableService.occupy(waiter_user, busy)

        stats = TableService.table_stats(admin_user)

        assert stats["total_tables"] == 2
        assert stats["total_capacity"] == 8
        assert stats["by_status"]["available"] == 1
        assert stats["by_status"]["occupied"] == 1

    def test_history_is_admin_only(self, staff_user, table):
        with pytest.raises(AuthorizationError):
            TableService.table_history(staff_user, table)


@pytest.mark.django_db
class TestTablesApi:
    def test_list_is_public(self, api_client, table):
        response = api_client.get("/api/tables/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["results"][0]["table_number"] == 5

    def test_filter_min_capacity(self, api_client, make_table):
        make_table(1, capacity=2)
        make_table(2, capacity=6)
        response = api_client.get("/api/tables/", {"min_capacity": 4})
        assert [row["table_number"] for row in response.data["results"]] == [2]

    def test_create_requires_admin(self, waiter_client, admin_client_api):
        payload = {"table_number": 9, "capacity": 6}
        assert waiter_client.post("/api/tables/", payload, format="json").status_code == 403

        response = admin_client_api.post("/api/tables/", payload, format="json")
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["name"] == "Table 9"

    def test_create_duplicate_number_is_409(self, admin_client_api, table):
        response = admin_client_api.post(
            "/api/tables/", {"table_number": table.table_number}, format="json"
        )
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_toggle_status_invalid_edge_is_409(self, waiter_client, table):
        response = waiter_client.post(
            f"/api/tables/{table.pk}/toggle-status/", {"status": "occupied"}, format="json"
        )
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"] == "invalid_transition"
        assert response.data["details"] == {"from_status": "available", "to_status": "occupied"}

    def test_occupy_clear_flow(self, waiter_client, table):
        response = waiter_client.post(
            f"/api/tables/{table.pk}/occupy/", {"customer_count": 3}, format="json"
        )
        assert response.data["status"] == "occupied"

        response = waiter_client.post(f"/api/tables/{table.pk}/clear/")
        assert response.data["status"] == "cleaning"

        response = waiter_client.post(f"/api/tables/{table.pk}/mark-available/")
        assert response.data["status"] == "available"

    def test_history_lists_orders(self, admin_client_api, guest_user, table, place_order):
        order = place_order(guest_user)
        response = admin_client_api.get(f"/api/tables/{table.pk}/history/", {"days": 1})
        assert response.status_code == status.HTTP_200_OK
        assert response.data["total_orders"] == 1
        assert response.data["orders"][0]["order_code"] == order.order_code
