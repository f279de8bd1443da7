"""
Domain exceptions shared by every service layer, and the DRF exception
handler that turns them into HTTP responses.

Services raise these instead of returning error responses so that the same
rules apply whether an operation is invoked from a view, a management
command or a test.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for business-rule failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"
    default_message = "An unexpected error occurred"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def as_dict(self):
        payload = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ServiceError):
    """Raised when input is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    default_message = "Invalid input"


class AuthenticationError(ServiceError):
    """Raised when an operation needs an actor and none was supplied."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_error"
    default_message = "Authentication credentials were not provided"


class AuthorizationError(ServiceError):
    """Raised when the actor's role is not allowed to perform an operation."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "authorization_error"
    default_message = "You do not have permission to perform this action"

    def __init__(self, required_roles=None, actual_role=None, message=None):
        self.required_roles = sorted(str(role) for role in (required_roles or []))
        self.actual_role = actual_role
        details = {}
        if self.required_roles:
            details["required_roles"] = self.required_roles
        if actual_role is not None:
            details["actual_role"] = actual_role
        super().__init__(message, details)


class NotFoundError(ServiceError):
    """Raised when an identifier does not resolve to an entity."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class ConflictError(ServiceError):
    """Raised when the request conflicts with the current state of an entity."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Request conflicts with the current state"


class InvalidTransitionError(ConflictError):
    """Raised when a status change is not an edge of the state machine."""

    code = "invalid_transition"

    def __init__(self, from_status, to_status, message=None):
        self.from_status = from_status
        self.to_status = to_status
        if message is None:
            message = f"Cannot transition from '{from_status}' to '{to_status}'"
        super().__init__(
            message, {"from_status": from_status, "to_status": to_status}
        )


def api_exception_handler(exc, context):
    """
    Exception handler configured as REST_FRAMEWORK["EXCEPTION_HANDLER"].

    Domain errors are rendered with their kind and message; DRF's own errors
    keep DRF's rendering; anything else becomes a generic 500 so internal
    state never reaches the client.
    """
    request = context.get("request")

    if isinstance(exc, ServiceError):
        if exc.status_code >= 500:
            logger.error("Service error: %s", exc, exc_info=exc)
        else:
            logger.info(
                "%s on %s %s: %s",
                exc.__class__.__name__,
                getattr(request, "method", "-"),
                getattr(request, "path", "-"),
                exc.message,
            )
        return Response(exc.as_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    logger.exception(
        "Unhandled error on %s %s",
        getattr(request, "method", "-"),
        getattr(request, "path", "-"),
        exc_info=exc,
    )
    return Response(
        {"error": ServiceError.code, "message": ServiceError.default_message},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
