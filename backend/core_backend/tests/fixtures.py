"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like users of each role, menu items, tables, rooms and events.
"""
import pytest
from datetime import date
from decimal import Decimal

from bookings.models import Event, Room
from menu.models import FoodCategory, MenuItem
from settings.config import app_settings
from tables.models import Table
from users.models import User


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def admin_user(db):
    """Create an admin user"""
    return User.objects.create_user(
        email="admin@hotel.test",
        password="password123",
        name="Ada Admin",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def staff_user(db):
    """Create a staff user"""
    return User.objects.create_user(
        email="staff@hotel.test",
        password="password123",
        name="Sam Staff",
        role=User.Role.STAFF,
    )


@pytest.fixture
def waiter_user(db):
    """Create a waiter user"""
    return User.objects.create_user(
        email="waiter@hotel.test",
        password="password123",
        name="Wes Waiter",
        role=User.Role.WAITER,
    )


@pytest.fixture
def other_waiter(db):
    return User.objects.create_user(
        email="waiter2@hotel.test",
        password="password123",
        name="Wren Waiter",
        role=User.Role.WAITER,
    )


@pytest.fixture
def guest_user(db):
    """Create a registered guest (customer) user"""
    return User.objects.create_user(
        email="guest@hotel.test",
        password="password123",
        name="Gus Guest",
        role=User.Role.GUEST,
    )


@pytest.fixture
def other_guest(db):
    return User.objects.create_user(
        email="guest2@hotel.test",
        password="password123",
        name="Gia Guest",
        role=User.Role.GUEST,
    )


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================

@pytest.fixture
def site_settings(db):
    """Seeded settings row with the default rates (0.16 tax, 0.10 service)"""
    settings_obj, _ = app_settings.ensure_defaults()
    return settings_obj


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def category(db):
    return FoodCategory.objects.create(name="Mains")


@pytest.fixture
def burger(category):
    """Menu item priced 10.00"""
    return MenuItem.objects.create(
        name="Burger", price=Decimal("10.00"), category=category, preparation_time=20
    )


@pytest.fixture
def salad(category):
    """Menu item priced 5.00"""
    return MenuItem.objects.create(
        name="Salad",
        price=Decimal("5.00"),
        category=category,
        preparation_time=10,
        is_vegetarian=True,
    )


# ============================================================================
# TABLE FIXTURES
# ============================================================================

@pytest.fixture
def table(db):
    """Available table number 5 seating four"""
    return Table.objects.create(table_number=5, capacity=4)


@pytest.fixture
def make_table(db):
    def _make(number, **kwargs):
        return Table.objects.create(table_number=number, **kwargs)

    return _make


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def place_order(site_settings, table, burger, salad):
    """
    Factory placing an order at ``table`` through OrderService.

    Usage:
        order = place_order(guest_user)
        order = place_order(None, customer_name="Jo", customer_phone="555")
    """
    from orders.services import OrderService

    def _place(actor, items=None, target_table=None, **kwargs):
        if items is None:
            items = [{"menu_item": burger.pk, "quantity": 1}, {"menu_item": salad.pk, "quantity": 1}]
        return OrderService.create_order(
            actor, (target_table or table).pk, items, **kwargs
        )

    return _place


# ============================================================================
# BOOKING FIXTURES
# ============================================================================

@pytest.fixture
def room(db):
    """Room R1 at 100.00 per night"""
    return Room.objects.create(name="R1", room_type="double", price=Decimal("100.00"))


@pytest.fixture
def event(db):
    return Event.objects.create(
        name="Garden Wedding",
        location="Garden",
        date=date(2024, 6, 1),
        capacity=120,
        price_per_day=Decimal("2000.00"),
    )
