"""
Permission classes for chat API.

- HasMessagingRole: coach, scout or player (admins have no inbox)
- IsCoachOrScout: may open conversations with players

Participant checks are not permissions here: the services answer them
(NOT_PARTICIPANT) so REST and WebSocket share one rule.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from chat.models import INITIATOR_ROLES, ParticipantRole

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class HasMessagingRole(permissions.BasePermission):
    """Allows access to users whose role takes part in conversations."""

    message = "Your role cannot use messaging."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and user.role in (*INITIATOR_ROLES, ParticipantRole.PLAYER)
        )


class IsCoachOrScout(permissions.BasePermission):
    """Allows access to the coach side only."""

    message = "Only coach can start conversation"

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.role in INITIATOR_ROLES)
