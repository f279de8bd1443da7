"""
Role-based access gate.

Every operation declares the exact set of roles allowed to perform it; there
is no implied hierarchy between roles. Services call ``authorize`` once,
before touching any state. Views that only read data and have no service
behind them use ``OperationPermission``, which consults the same table.
"""
from rest_framework import permissions

from core_backend.exceptions import AuthenticationError, AuthorizationError
from .models import User
import logging

logger = logging.getLogger(__name__)

Role = User.Role

ADMIN_ONLY = frozenset({Role.ADMIN})
STAFF_OR_ADMIN = frozenset({Role.STAFF, Role.ADMIN})
WAITER_OR_ABOVE = frozenset({Role.WAITER, Role.STAFF, Role.ADMIN})
NOT_GUEST = frozenset({Role.WAITER, Role.STAFF, Role.ADMIN})
# Waiters serve tables; they never book rooms on anyone's behalf.
BOOKING_CUSTOMERS = frozenset({Role.GUEST, Role.STAFF, Role.ADMIN})
ANY_AUTHENTICATED = frozenset(Role.values)
# Marker for operations open to anonymous callers
PUBLIC = None


OPERATION_ROLES = {
    # Menu
    "menu.list": PUBLIC,
    "menu.manage": ADMIN_ONLY,
    "menu.toggle_availability": STAFF_OR_ADMIN,
    "menu.toggle_category": ADMIN_ONLY,
    "menu.stats": ADMIN_ONLY,
    # Tables
    "table.list": PUBLIC,
    "table.manage": ADMIN_ONLY,
    "table.toggle_status": WAITER_OR_ABOVE,
    "table.occupy": WAITER_OR_ABOVE,
    "table.clear": WAITER_OR_ABOVE,
    "table.mark_available": WAITER_OR_ABOVE,
    "table.stats": ADMIN_ONLY,
    "table.history": ADMIN_ONLY,
    # Orders
    "order.create": PUBLIC,
    "order.track": PUBLIC,
    "order.list": WAITER_OR_ABOVE,
    "order.list_mine": ANY_AUTHENTICATED,
    "order.view": ANY_AUTHENTICATED,
    "order.view_any": WAITER_OR_ABOVE,
    "order.list_for_table": WAITER_OR_ABOVE,
    "order.list_assigned": WAITER_OR_ABOVE,
    "order.list_available": WAITER_OR_ABOVE,
    "order.update_status": WAITER_OR_ABOVE,
    "order.update_payment": WAITER_OR_ABOVE,
    "order.self_assign": WAITER_OR_ABOVE,
    "order.assign": ADMIN_ONLY,
    "order.rate": ANY_AUTHENTICATED,
    "order.stats": ADMIN_ONLY,
    # Bookings
    "room_booking.create": BOOKING_CUSTOMERS,
    "room_booking.list_mine": ANY_AUTHENTICATED,
    # Event hire is arranged through the front of house, not by guests
    "event_booking.create": NOT_GUEST,
    "event_booking.list_mine": NOT_GUEST,
    "booking.list": STAFF_OR_ADMIN,
    "booking.view": ANY_AUTHENTICATED,
    "booking.view_any": STAFF_OR_ADMIN,
    "booking.update": STAFF_OR_ADMIN,
    "booking.cancel": STAFF_OR_ADMIN,
    "booking.check_availability": PUBLIC,
    "room.list": PUBLIC,
    "room.manage": ADMIN_ONLY,
    "event.list": PUBLIC,
    "event.manage": STAFF_OR_ADMIN,
    "event.request_quote": PUBLIC,
    "event.enquire": PUBLIC,
    "event.list_enquiries": STAFF_OR_ADMIN,
    # Users, settings, notifications
    "user.me": ANY_AUTHENTICATED,
    "user.list_waiters": ADMIN_ONLY,
    "user.register": PUBLIC,
    "user.list": ADMIN_ONLY,
    "user.view": STAFF_OR_ADMIN,
    "user.manage": ADMIN_ONLY,
    "user.create_admin": ADMIN_ONLY,
    "settings.view": STAFF_OR_ADMIN,
    "settings.update": ADMIN_ONLY,
    "settings.public": PUBLIC,
    "notification.list": ANY_AUTHENTICATED,
}


def is_role_permitted(role, allowed_roles):
    """Pure check: is ``role`` a member of ``allowed_roles``? None means public."""
    if allowed_roles is None:
        return True
    return role in allowed_roles


def get_actor_role(actor):
    if actor is None or not getattr(actor, "is_authenticated", False):
        return None
    return actor.role


def authorize(actor, operation):
    """
    Permit or deny ``actor`` for ``operation``.

    Raises AuthenticationError when a restricted operation has no actor and
    AuthorizationError when the actor's role is outside the declared set.
    """
    try:
        allowed_roles = OPERATION_ROLES[operation]
    except KeyError:
        raise KeyError(f"No access rule declared for operation '{operation}'")

    if allowed_roles is None:
        return

    role = get_actor_role(actor)
    if role is None:
        raise AuthenticationError()

    if not actor.is_active or not is_role_permitted(role, allowed_roles):
        logger.info(
            "Denied %s for user %s with role %s", operation, actor.pk, role
        )
        raise AuthorizationError(required_roles=allowed_roles, actual_role=role)


def has_role(actor, allowed_roles):
    """Non-raising variant used to branch on the actor's role."""
    role = get_actor_role(actor)
    return role is not None and is_role_permitted(role, allowed_roles)


class OperationPermission(permissions.BasePermission):
    """
    DRF permission that maps the current view action to an operation name
    through ``view.operation_roles`` and runs the access gate.

    Actions missing from the map are left to the service layer, which calls
    ``authorize`` itself.
    """

    def has_permission(self, request, view):
        operation = getattr(view, "operation_roles", {}).get(getattr(view, "action", None))
        if operation is None:
            return True
        authorize(request.user, operation)
        return True


def can(actor, operation):
    """Non-raising variant of ``authorize``."""
    allowed_roles = OPERATION_ROLES[operation]
    if allowed_roles is None:
        return True
    return has_role(actor, allowed_roles) and actor.is_active
