import logging
from datetime import timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from core_backend.base import StateMachine
from core_backend.exceptions import ConflictError, NotFoundError, ValidationError
from orders.models import Order
from users.permissions import authorize
from .models import Table

logger = logging.getLogger(__name__)

Status = Table.Status

# Manual (staff-initiated) transitions. Occupancy from `available` is only
# reached through the order engine or the explicit occupy action.
TABLE_STATE_MACHINE = StateMachine(
    "table",
    {
        Status.AVAILABLE: {Status.MAINTENANCE, Status.OUT_OF_SERVICE},
        Status.OCCUPIED: {Status.AVAILABLE, Status.CLEANING, Status.MAINTENANCE},
        Status.RESERVED: {Status.AVAILABLE, Status.OCCUPIED},
        Status.CLEANING: {Status.AVAILABLE, Status.MAINTENANCE},
        Status.MAINTENANCE: {Status.AVAILABLE, Status.OUT_OF_SERVICE},
        Status.OUT_OF_SERVICE: {Status.AVAILABLE, Status.MAINTENANCE},
    },
)


@TABLE_STATE_MACHINE.on_enter(Status.OCCUPIED)
def _stamp_occupied(table, previous, order=None, **context):
    table.last_occupied_at = timezone.now()
    if order is not None:
        table.current_order = order


@TABLE_STATE_MACHINE.on_enter(Status.CLEANING, Status.AVAILABLE)
def _stamp_cleaned(table, previous, **context):
    table.last_cleaned_at = timezone.now()
    table.current_order = None


class TableService:
    """
    Table registry: lookups, the manual status machine, the staff occupy /
    clear / mark-available flows and the side effects driven by orders.
    """

    @staticmethod
    def find_table(table_id) -> Table:
        try:
            return Table.objects.get(pk=table_id)
        except (Table.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Table {table_id} not found")

    @staticmethod
    def _lock(table: Table) -> Table:
        return Table.objects.select_for_update().get(pk=table.pk)

    @staticmethod
    def active_orders(table: Table):
        return Order.objects.filter(table=table, status__in=Order.ACTIVE_STATUSES)

    @staticmethod
    def _save(table: Table, actor=None, fields=None):
        update_fields = list(
            fields
            or ["status", "current_order", "last_occupied_at", "last_cleaned_at"]
        )
        if actor is not None:
            table.updated_by = actor
            update_fields.append("updated_by")
        table.save(update_fields=update_fields + ["updated_at"])

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    @staticmethod
    def create_table(data, actor=None) -> Table:
        """Create a table; access is checked by the calling view."""
        number = data.get("table_number")
        if Table.objects.filter(table_number=number).exists():
            raise ConflictError(f"Table number {number} already exists")
        try:
            with transaction.atomic():
                table = Table.objects.create(created_by=actor, updated_by=actor, **data)
        except IntegrityError:
            raise ConflictError(f"Table number {number} already exists")
        logger.info("Table %s created", table.table_number)
        return table

    @staticmethod
    def update_table(table: Table, data, actor=None) -> Table:
        """Update table attributes; status changes go through transition()."""
        number = data.get("table_number")
        if (
            number is not None
            and number != table.table_number
            and Table.objects.filter(table_number=number).exclude(pk=table.pk).exists()
        ):
            raise ConflictError(f"Table number {number} already exists")

        data = {key: value for key, value in data.items() if key != "status"}
        for field, value in data.items():
            setattr(table, field, value)
        table.updated_by = actor
        try:
            with transaction.atomic():
                table.save()
        except IntegrityError:
            raise ConflictError(f"Table number {number} already exists")
        return table

    @staticmethod
    @transaction.atomic
    def delete_table(actor, table: Table) -> None:
        authorize(actor, "table.manage")
        table = TableService._lock(table)
        if table.status == Status.OCCUPIED:
            raise ConflictError("Cannot delete an occupied table")
        active = TableService.active_orders(table).count()
        if active:
            raise ConflictError(
                "Cannot delete a table with active orders", {"active_orders": active}
            )
        table.delete()
        logger.info("Table %s deleted by user %s", table.table_number, actor.pk)

    # ------------------------------------------------------------------
    # Status machine and staff flows
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def transition(actor, table: Table, new_status) -> Table:
        """Manual status change restricted to the adjacency table."""
        authorize(actor, "table.toggle_status")
        table = TableService._lock(table)
        previous = TABLE_STATE_MACHINE.apply(table, new_status)
        TableService._save(table, actor)
        logger.info(
            "Table %s status %s -> %s by user %s",
            table.table_number, previous, new_status, actor.pk,
        )
        return table

    @staticmethod
    @transaction.atomic
    def occupy(actor, table: Table, party_size=None) -> Table:
        authorize(actor, "table.occupy")
        table = TableService._lock(table)
        if table.status != Status.AVAILABLE:
            raise ConflictError(f"Table is currently {table.status}")
        if party_size is not None:
            if party_size < 1:
                raise ValidationError("Customer count must be at least 1")
            if party_size > table.capacity:
                raise ValidationError(
                    f"Table capacity is {table.capacity}, cannot seat {party_size} customers"
                )
        TABLE_STATE_MACHINE.enter(table, Status.OCCUPIED)
        TableService._save(table, actor)
        return table

    @staticmethod
    @transaction.atomic
    def clear(actor, table: Table) -> Table:
        authorize(actor, "table.clear")
        table = TableService._lock(table)
        if table.status != Status.OCCUPIED:
            raise ConflictError("Table is not occupied")
        active = TableService.active_orders(table).count()
        if active:
            raise ConflictError(
                f"Cannot clear table with {active} active order(s)",
                {"active_orders": active},
            )
        TABLE_STATE_MACHINE.apply(table, Status.CLEANING)
        TableService._save(table, actor)
        return table

    @staticmethod
    @transaction.atomic
    def mark_available(actor, table: Table) -> Table:
        authorize(actor, "table.mark_available")
        table = TableService._lock(table)
        if table.status != Status.CLEANING:
            raise ConflictError("Table must be in cleaning status to mark as available")
        TABLE_STATE_MACHINE.apply(table, Status.AVAILABLE)
        TableService._save(table, actor)
        return table

    # ------------------------------------------------------------------
    # Order side effects (called inside the order engine's transaction)
    # ------------------------------------------------------------------

    @staticmethod
    def occupy_for_order(table: Table, order) -> Table:
        """
        Seat a new order. A table already occupied by an active order keeps
        its current order; the new order simply references the table.
        """
        table = TableService._lock(table)
        if table.status == Status.OCCUPIED:
            current = table.current_order
            if current is not None and current.status in Order.ACTIVE_STATUSES:
                return table
            table.current_order = order
            TableService._save(table, fields=["current_order"])
            return table

        TABLE_STATE_MACHINE.enter(table, Status.OCCUPIED, order=order)
        TableService._save(table)
        logger.info("Table %s occupied by order %s", table.table_number, order.order_code)
        return table

    @staticmethod
    def release_after_orders(table: Table) -> Table:
        """Send an occupied table to cleaning once none of its orders are active."""
        table = TableService._lock(table)
        if table.status != Status.OCCUPIED:
            return table
        if TableService.active_orders(table).exists():
            return table
        TABLE_STATE_MACHINE.apply(table, Status.CLEANING)
        TableService._save(table)
        logger.info("Table %s released for cleaning", table.table_number)
        return table

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def available_tables(capacity=None, section=None):
        queryset = Table.objects.filter(status=Status.AVAILABLE, is_active=True)
        if capacity:
            queryset = queryset.filter(capacity__gte=capacity)
        if section:
            queryset = queryset.filter(section=section)
        return queryset.order_by("capacity", "table_number")

    @staticmethod
    def table_stats(actor):
        authorize(actor, "table.stats")
        tables = Table.objects.all()
        by_status = {status: 0 for status in Status.values}
        for row in tables.values("status").annotate(count=Count("id")):
            by_status[row["status"]] = row["count"]

        by_section = [
            {
                "section": row["section"],
                "total": row["total"],
                "available": row["available"],
                "capacity": row["capacity"] or 0,
            }
            for row in tables.values("section")
            .annotate(
                total=Count("id"),
                available=Count("id", filter=Q(status=Status.AVAILABLE)),
                capacity=Sum("capacity"),
            )
            .order_by("section")
        ]

        totals = tables.aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(is_active=True)),
            capacity=Sum("capacity"),
        )
        return {
            "total_tables": totals["total"],
            "active_tables": totals["active"],
            "total_capacity": totals["capacity"] or 0,
            "by_status": by_status,
            "by_section": by_section,
        }

    @staticmethod
    def table_history(actor, table: Table, days=7):
        authorize(actor, "table.history")
        if days < 1:
            raise ValidationError("days must be at least 1")
        since = timezone.now() - timedelta(days=days)
        orders = Order.objects.filter(table=table, created_at__gte=since).order_by("-created_at")
        completed = orders.filter(status=Order.OrderStatus.COMPLETED)
        summary = completed.aggregate(revenue=Sum("total_price"), average=Avg("total_price"))
        return {
            "table": table,
            "days": days,
            "total_orders": orders.count(),
            "completed_orders": completed.count(),
            "total_revenue": summary["revenue"] or Decimal("0.00"),
            "average_order_value": (summary["average"] or Decimal("0.00")).quantize(Decimal("0.01")),
            "orders": orders,
        }
