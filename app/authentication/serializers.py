"""
Serializers for authentication.

- UserSerializer: the authenticated user's own profile (/auth/me/)
- ParticipantSerializer: public directory card embedded in chat payloads
- RoleTokenObtainPairSerializer: SimpleJWT pair with the role claim
- LogoutSerializer: refresh token to blacklist

Related files:
    - views.py: Views that use these serializers
    - chat/serializers.py: Embeds ParticipantSerializer in messages
"""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """Serializer for the current user (read operations)."""

    full_name = serializers.CharField(read_only=True)
    profile_image = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "profile_image",
            "date_joined",
        ]
        read_only_fields = fields

    def get_profile_image(self, obj):
        return obj.profile_image_url(self.context.get("request"))


class ParticipantSerializer(serializers.ModelSerializer):
    """
    Public card for the other side of a conversation.

    Field names follow the client contract used by the mobile and web apps
    (camelCase, absolute profileImage URL).
    """

    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    profileImage = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "firstName", "lastName", "role", "profileImage"]
        read_only_fields = fields

    def get_profileImage(self, obj):
        return obj.profile_image_url(self.context.get("request"))


class RoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Issue access/refresh tokens carrying the user's platform role."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        return token


class LogoutSerializer(serializers.Serializer):
    """Refresh token to revoke on logout."""

    refresh = serializers.CharField()
