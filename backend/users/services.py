import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils.crypto import constant_time_compare
from rest_framework_simplejwt.tokens import RefreshToken

from core_backend.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .models import User
from .permissions import ADMIN_ONLY, authorize

logger = logging.getLogger(__name__)

ACTIVE_ORDER_STATUSES = ["pending", "confirmed", "preparing", "ready", "served"]
# Roles an admin may hand out through the user management endpoints
MANAGED_ROLES = (User.Role.WAITER, User.Role.STAFF)
EDITABLE_FIELDS = ("name", "phone", "role", "is_active")


class UserService:
    @staticmethod
    def find_user(user_id) -> User:
        """Resolve a user id or raise NotFoundError."""
        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"User {user_id} not found")

    @staticmethod
    def list_waiters(actor):
        """
        Active waiters, each annotated with the number of orders currently
        assigned to them that are not finished yet.
        """
        authorize(actor, "user.list_waiters")
        return (
            User.objects.filter(role=User.Role.WAITER, is_active=True)
            .annotate(
                active_orders=Count(
                    "assigned_orders",
                    filter=Q(assigned_orders__status__in=ACTIVE_ORDER_STATUSES),
                )
            )
            .order_by("name", "email")
        )

    @staticmethod
    def generate_tokens_for_user(user: User) -> dict:
        refresh = RefreshToken.for_user(user)
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
        }

    # ------------------------------------------------------------------
    # Account creation
    # ------------------------------------------------------------------

    @staticmethod
    def _create_account(data, role) -> User:
        email = User.objects.normalize_email(data.get("email") or "").lower()
        password = data.get("password")
        if not email or not password:
            raise ValidationError("Email and password are required")
        if User.objects.filter(email__iexact=email).exists():
            raise ConflictError("User already exists", {"email": email})

        try:
            with transaction.atomic():
                return User.objects.create_user(
                    email=email,
                    password=password,
                    name=data.get("name", ""),
                    phone=data.get("phone", ""),
                    role=role,
                )
        except IntegrityError:
            raise ConflictError("User already exists", {"email": email})

    @staticmethod
    def register(data) -> User:
        """Public sign-up. The account is always a guest."""
        authorize(None, "user.register")
        user = UserService._create_account(data, User.Role.GUEST)
        logger.info("Guest account %s registered", user.pk)
        return user

    @staticmethod
    def create_user(actor, data) -> User:
        """Admin creates a waiter or staff account."""
        authorize(actor, "user.manage")
        role = data.get("role")
        if role not in MANAGED_ROLES:
            raise ValidationError(
                "Admin can only create waiter or staff accounts",
                {"allowed_roles": list(MANAGED_ROLES)},
            )
        user = UserService._create_account(data, role)
        logger.info("%s account %s created by user %s", role, user.pk, actor.pk)
        return user

    @staticmethod
    def create_admin(actor, data, secret_key) -> User:
        """Create another admin; the caller must also know the shared secret."""
        authorize(actor, "user.create_admin")
        expected = settings.ADMIN_SECRET_KEY
        if not expected or not constant_time_compare(secret_key or "", expected):
            logger.warning("Rejected admin creation by user %s: bad secret key", actor.pk)
            raise AuthorizationError(
                required_roles=ADMIN_ONLY,
                actual_role=actor.role,
                message="Invalid admin secret key",
            )
        user = UserService._create_account(data, User.Role.ADMIN)
        user.is_staff = True
        user.save(update_fields=["is_staff", "updated_at"])
        logger.info("Admin account %s created by user %s", user.pk, actor.pk)
        return user

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    @staticmethod
    def list_users(actor, role=None):
        authorize(actor, "user.list")
        queryset = User.objects.all()
        if role:
            queryset = queryset.filter(role=role)
        return queryset

    @staticmethod
    def get_user(actor, user_id) -> User:
        authorize(actor, "user.view")
        return UserService.find_user(user_id)

    @staticmethod
    @transaction.atomic
    def update_user(actor, user: User, data) -> User:
        """
        Change a user's profile, role or active flag. Passwords are never
        changed here, admin is not a role that can be granted, and an admin
        cannot deactivate their own account.
        """
        authorize(actor, "user.manage")
        if data.get("role") == User.Role.ADMIN and user.role != User.Role.ADMIN:
            raise AuthorizationError(
                required_roles=ADMIN_ONLY,
                actual_role=actor.role,
                message="Admin accounts can only be created with the admin secret key",
            )
        if user.pk == actor.pk and data.get("is_active") is False:
            raise ValidationError("Cannot deactivate your own account")

        changed = []
        for field in EDITABLE_FIELDS:
            if field in data and getattr(user, field) != data[field]:
                setattr(user, field, data[field])
                changed.append(field)
        if changed:
            user.save(update_fields=changed + ["updated_at"])
            logger.info("User %s updated by user %s: %s", user.pk, actor.pk, ", ".join(changed))
        return user

    @staticmethod
    @transaction.atomic
    def delete_user(actor, user: User) -> None:
        authorize(actor, "user.manage")
        if user.pk == actor.pk:
            raise ValidationError("Cannot delete your own account")
        if user.role == User.Role.ADMIN:
            raise AuthorizationError(
                required_roles=ADMIN_ONLY,
                actual_role=actor.role,
                message="Admin accounts cannot be deleted",
            )
        user.delete()
        logger.info("User %s deleted by user %s", user.email, actor.pk)
