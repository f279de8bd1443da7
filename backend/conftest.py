"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.conf import settings


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/menu/items/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def client_for():
    """
    Factory returning an API client authenticated as the given user.

    Usage:
        def test_protected_endpoint(client_for, waiter_user):
            response = client_for(waiter_user).get('/api/orders/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    from rest_framework_simplejwt.tokens import RefreshToken

    def make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        # Browser clients send the JWT in a cookie rather than a header
        client.cookies[settings.SIMPLE_JWT.get("AUTH_COOKIE", "access_token")] = str(
            refresh.access_token
        )
        return client

    return make_client


@pytest.fixture
def admin_client_api(client_for, admin_user):
    return client_for(admin_user)


@pytest.fixture
def waiter_client(client_for, waiter_user):
    return client_for(waiter_user)


@pytest.fixture
def guest_client(client_for, guest_user):
    return client_for(guest_user)


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *  # noqa: E402,F401,F403
