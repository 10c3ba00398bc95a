"""
Authentication API views.

Token issuance is delegated to SimpleJWT; these views add the role claim,
logout via the token blacklist and the current-user endpoint.

URL: /api/v1/auth/
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from authentication.serializers import (
    LogoutSerializer,
    RoleTokenObtainPairSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


@extend_schema(tags=["Auth"], summary="Obtain access and refresh tokens")
class LoginView(TokenObtainPairView):
    """
    POST: Exchange email/password for a JWT pair.

    Inactive accounts are rejected by the authentication backend.
    """

    serializer_class = RoleTokenObtainPairSerializer


class LogoutView(APIView):
    """
    API view for logout.

    POST: Blacklist the supplied refresh token

    URL: /api/v1/auth/logout/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Logout",
        description="Revoke a refresh token so it can no longer be rotated.",
        tags=["Auth"],
        request=LogoutSerializer,
    )
    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            RefreshToken(serializer.validated_data["refresh"]).blacklist()
        except TokenError as e:
            logger.warning(f"Logout with invalid refresh token for user {request.user.id}: {e}")
            return Response(
                {"error": "Invalid or expired refresh token", "error_code": "INVALID_TOKEN"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        logger.info(f"User {request.user.id} logged out")
        return Response({"detail": "Logged out successfully"})


class MeView(APIView):
    """
    GET: The authenticated user's profile.

    URL: /api/v1/auth/me/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get current user",
        tags=["Auth"],
        responses={200: UserSerializer},
    )
    def get(self, request):
        serializer = UserSerializer(request.user, context={"request": request})
        return Response(serializer.data)
