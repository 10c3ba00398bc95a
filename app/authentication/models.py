"""
Authentication models.

User is the identity collaborator of the messaging subsystem: it supplies
the authenticated id and role, plus the directory data (name, avatar) used
to enrich conversation lists and messages.

Related files:
    - managers.py: Custom user manager for email-based creation
    - serializers.py: Public profile and JWT claim serializers
"""

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class UserRole(models.TextChoices):
    """
    Platform role of a user.

    COACH and SCOUT recruit players and may open conversations.
    PLAYER receives conversations and can only reply once unlocked.
    SUPER_ADMIN runs the platform and takes no part in messaging.
    """

    COACH = "coach", "Coach"
    PLAYER = "player", "Player"
    SCOUT = "scout", "Scout"
    SUPER_ADMIN = "super_admin", "Super Admin"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        first_name / last_name: Display name shown to the other participant
        role: Platform role (coach, player, scout, super_admin)
        profile_image: Optional avatar
        is_active: Deactivated users cannot authenticate on REST or WebSocket
        is_staff: Whether the user can access Django admin

    Usage:
        coach = User.objects.create_user(
            email="coach@example.com",
            password="securepassword",
            role=UserRole.COACH,
            first_name="Dana",
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    first_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="First name shown in conversation lists",
    )
    last_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="Last name shown in conversation lists",
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        db_index=True,
        help_text="Platform role; decides who may open conversations",
    )
    profile_image = models.ImageField(
        upload_to="profile_images/%Y/%m/",
        blank=True,
        help_text="Avatar shown next to messages",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    @property
    def full_name(self) -> str:
        if self.last_name:
            return f"{self.first_name} {self.last_name}".strip()
        return self.first_name

    def get_full_name(self):
        return self.full_name or self.email

    def get_short_name(self):
        return self.first_name or self.email.split("@")[0]

    @property
    def is_coach_side(self) -> bool:
        """Coaches and scouts share the initiating side of a conversation."""
        return self.role in (UserRole.COACH, UserRole.SCOUT)

    def profile_image_url(self, request=None) -> str | None:
        """
        Return the absolute avatar URL, or None when no image is set.

        Uses the request host when available, otherwise settings.SITE_URL.
        """
        if not self.profile_image:
            return None
        url = self.profile_image.url
        if request is not None:
            return request.build_absolute_uri(url)
        return f"{settings.SITE_URL.rstrip('/')}{url}"
