"""
Test configuration and fixtures for chat tests.

This module provides:
- Users on each side of a conversation (coach, scout, player)
- Conversation fixtures (unlocked, locked)
- API client helpers authenticated with real access tokens

Usage:
    def test_example(conversation, player_client):
        response = player_client.get(f'/api/v1/chat/messages/{conversation.id}/')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import UserRole
from authentication.tests.factories import CoachFactory, PlayerFactory, ScoutFactory, UserFactory
from chat.tests.factories import ConversationFactory


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
def other_player(db):
    """A player with no conversation in the default fixtures."""
    return PlayerFactory(first_name="Riley", last_name="Chen")


@pytest.fixture
def deactivated_player(db):
    return PlayerFactory(is_active=False)


@pytest.fixture
def outsider(db):
    """A coach who is not a participant in any test conversation."""
    return CoachFactory()


@pytest.fixture
def super_admin(db):
    """Platform admin; has no messaging role."""
    return UserFactory(role=UserRole.SUPER_ADMIN, is_staff=True)


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def conversation(coach, player):
    """Unlocked conversation opened by the coach."""
    return ConversationFactory(coach=coach, player=player)


@pytest.fixture
def scout_conversation(scout, player):
    return ConversationFactory(coach=scout, player=player)


@pytest.fixture
def locked_conversation(coach, other_player):
    """Conversation the player may not send into yet."""
    return ConversationFactory(coach=coach, player=other_player, is_unlocked=False)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    """
    Build an API client authenticated as the given user.

    Usage:
        response = client_for(player).get(url)
    """

    def _make(user):
        client = APIClient()
        token = RefreshToken.for_user(user).access_token
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _make


@pytest.fixture
def coach_client(client_for, coach):
    return client_for(coach)


@pytest.fixture
def player_client(client_for, player):
    return client_for(player)


@pytest.fixture
def scout_client(client_for, scout):
    return client_for(scout)


@pytest.fixture
def access_token_for():
    """Raw access token string for WebSocket handshakes."""

    def _make(user):
        return str(RefreshToken.for_user(user).access_token)

    return _make
