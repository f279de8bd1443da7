"""
Error handling tests: domain exceptions, the API exception handler and the
generated reference codes.
"""
import re

import pytest
from rest_framework import exceptions as drf_exceptions
from rest_framework.test import APIRequestFactory

from core_backend.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    api_exception_handler,
)
from core_backend.utils import generate_code


@pytest.fixture
def context():
    return {"request": APIRequestFactory().get("/api/orders/")}


class TestApiExceptionHandler:
    @pytest.mark.parametrize(
        "exc, status_code, code",
        [
            (ValidationError("bad"), 400, "validation_error"),
            (AuthenticationError(), 401, "authentication_error"),
            (AuthorizationError(["admin"], "guest"), 403, "authorization_error"),
            (NotFoundError("missing"), 404, "not_found"),
            (ConflictError("taken"), 409, "conflict"),
            (InvalidTransitionError("pending", "ready"), 409, "invalid_transition"),
        ],
    )
    def test_domain_errors_map_to_status_codes(self, context, exc, status_code, code):
        response = api_exception_handler(exc, context)

        assert response.status_code == status_code
        assert response.data["error"] == code
        assert response.data["message"]

    def test_authorization_error_carries_roles(self, context):
        exc = AuthorizationError(["staff", "admin"], "waiter")
        response = api_exception_handler(exc, context)

        assert response.data["details"] == {
            "required_roles": ["admin", "staff"],
            "actual_role": "waiter",
        }

    def test_invalid_transition_is_a_conflict(self, context):
        exc = InvalidTransitionError("pending", "ready")

        assert isinstance(exc, ConflictError)
        assert exc.details == {"from_status": "pending", "to_status": "ready"}

    def test_drf_errors_keep_drf_rendering(self, context):
        response = api_exception_handler(drf_exceptions.NotFound(), context)
        assert response.status_code == 404
        assert "detail" in response.data

    def test_unexpected_errors_become_generic_500(self, context):
        response = api_exception_handler(RuntimeError("database password is hunter2"), context)

        assert response.status_code == 500
        assert response.data == {
            "error": "internal_error",
            "message": "An unexpected error occurred",
        }


class TestGenerateCode:
    def test_format(self):
        code = generate_code("ORD")
        assert re.fullmatch(r"ORD-\d{9}", code)

    def test_prefix_is_kept(self):
        assert generate_code("EVR").startswith("EVR-")
