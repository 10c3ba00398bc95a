"""
Test configuration and fixtures for authentication tests.

Usage:
    def test_example(coach, authenticated_client):
        response = authenticated_client.get('/api/v1/auth/me/')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import User
from authentication.tests.factories import CoachFactory, PlayerFactory, ScoutFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def coach(db):
    return CoachFactory(first_name="Dana", last_name="Reyes")


@pytest.fixture
def scout(db):
    return ScoutFactory(first_name="Sam", last_name="Ortiz")


@pytest.fixture
def player(db):
    return PlayerFactory(first_name="Jordan", last_name="Lee")


@pytest.fixture
def deactivated_user(db):
    """Create a deactivated player (is_active=False)."""
    return PlayerFactory(is_active=False)


@pytest.fixture
def superuser(db):
    """Create a platform super admin."""
    return User.objects.create_superuser(
        email="admin@example.com", password="AdminPass123!"
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client_factory():
    """
    Build an API client authenticated as any user via a real access token.

    Usage:
        client = authenticated_client_factory(player)
    """

    def _make(user):
        client = APIClient()
        token = RefreshToken.for_user(user).access_token
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _make


@pytest.fixture
def authenticated_client(authenticated_client_factory, coach):
    """API client authenticated as the coach fixture."""
    return authenticated_client_factory(coach)


@pytest.fixture
def player_client(authenticated_client_factory, player):
    return authenticated_client_factory(player)


@pytest.fixture
def scout_client(authenticated_client_factory, scout):
    return authenticated_client_factory(scout)
