"""
Tests for JWTAuthMiddleware and its token helpers.
"""

import pytest
from channels.db import database_sync_to_async
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from chat.middleware import (
    JWTAuthMiddleware,
    get_token_from_query,
    get_token_from_subprotocol,
    get_user_from_token,
)


# =============================================================================
# Token extraction
# =============================================================================


class TestTokenExtraction:
    """Tests for the query string / subprotocol helpers."""

    def test_token_from_query(self):
        scope = {"query_string": b"token=abc.def.ghi&x=1"}

        assert get_token_from_query(scope) == "abc.def.ghi"

    def test_no_query_token(self):
        assert get_token_from_query({"query_string": b""}) is None
        assert get_token_from_query({}) is None

    def test_token_from_subprotocol(self):
        scope = {"subprotocols": ["jwt", "abc.def.ghi"]}

        assert get_token_from_subprotocol(scope) == "abc.def.ghi"

    def test_subprotocol_requires_jwt_marker(self):
        assert get_token_from_subprotocol({"subprotocols": ["chat", "abc"]}) is None
        assert get_token_from_subprotocol({"subprotocols": ["jwt"]}) is None


# =============================================================================
# User resolution
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestGetUserFromToken:
    """Tests for get_user_from_token."""

    @pytest.fixture
    def coach_access(self, coach):
        return str(RefreshToken.for_user(coach).access_token)

    @pytest.fixture
    def expired_access(self, coach):
        token = AccessToken.for_user(coach)
        token.set_exp(lifetime=-AccessToken.lifetime)
        return str(token)

    @pytest.fixture
    def inactive_access(self, access_token_for, deactivated_player):
        return access_token_for(deactivated_player)

    async def test_valid_token_resolves_user(self, coach_access, coach):
        user = await get_user_from_token(coach_access)

        assert user.id == coach.id

    async def test_garbage_token_is_anonymous(self):
        user = await get_user_from_token("garbage")

        assert isinstance(user, AnonymousUser)

    async def test_expired_token_is_anonymous(self, expired_access):
        user = await get_user_from_token(expired_access)

        assert isinstance(user, AnonymousUser)

    async def test_deleted_user_is_anonymous(self, coach_access, coach):
        await database_sync_to_async(coach.delete)()

        user = await get_user_from_token(coach_access)

        assert isinstance(user, AnonymousUser)

    async def test_inactive_user_is_anonymous(self, inactive_access):
        user = await get_user_from_token(inactive_access)

        assert user.is_authenticated is False


# =============================================================================
# Middleware
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestJWTAuthMiddleware:
    """The middleware attaches a user to a copy of the scope."""

    @pytest.fixture
    def coach_access_token(self, access_token_for, coach):
        return access_token_for(coach)

    async def _run(self, scope):
        seen = {}

        async def inner(inner_scope, receive, send):
            seen.update(inner_scope)

        await JWTAuthMiddleware(inner)(scope, None, None)
        return seen

    async def test_attaches_user(self, coach_access_token, coach):
        scope = {"type": "websocket", "query_string": f"token={coach_access_token}".encode()}

        seen = await self._run(scope)

        assert seen["user"].id == coach.id
        assert "user" not in scope

    async def test_without_token_user_is_anonymous(self):
        seen = await self._run({"type": "websocket", "query_string": b""})

        assert isinstance(seen["user"], AnonymousUser)
