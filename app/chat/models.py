"""
Messaging models.

Models:
    Conversation: Durable thread between one coach/scout and one player
    Message: Individual text, image or file message inside a conversation

Design Decisions:
    - One conversation per (coach, player) pair, enforced by a unique constraint
    - The coach slot holds either a coach or a scout; coach_role records which
    - Players cannot send until is_unlocked is set by the coach side
    - Soft delete is per user (deleted_for); the other side keeps the thread
    - The latest message is denormalized onto the conversation for list
      previews and is written in the same transaction as the message
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Count, F, Q

from core.models import BaseModel

from chat.constants import ATTACHMENT_CONFIG
from chat.content import FileContent, ImageContent, TextContent

if TYPE_CHECKING:
    from chat.content import MessageContent


class ParticipantRole(models.TextChoices):
    """
    Role a user plays inside a conversation.

    COACH / SCOUT: occupy the coach slot and may open conversations
    PLAYER: occupies the player slot; replies once the conversation is unlocked
    """

    COACH = "coach", "Coach"
    PLAYER = "player", "Player"
    SCOUT = "scout", "Scout"


# Roles that sit on the initiating side of a conversation
INITIATOR_ROLES = (ParticipantRole.COACH, ParticipantRole.SCOUT)


class MessageType(models.TextChoices):
    """Type of message content, derived from the attachment MIME type."""

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    FILE = "file", "File"


@dataclass(frozen=True)
class ParticipantRef:
    """A conversation participant: user id plus the role held in the thread."""

    user_id: int
    role: str


class ConversationQuerySet(models.QuerySet):
    """Queries scoped to a viewing user."""

    def for_user(self, user_id):
        return self.filter(Q(coach_id=user_id) | Q(player_id=user_id))

    def visible_to(self, user_id):
        """Conversations the user participates in and has not soft-deleted."""
        return self.for_user(user_id).exclude(deleted_for__id=user_id)

    def with_unread_count(self, user_id):
        return self.annotate(
            unread_count=Count(
                "messages",
                filter=Q(messages__receiver_id=user_id, messages__is_read=False),
            )
        )


class Conversation(BaseModel):
    """
    A two-party conversation between a coach (or scout) and a player.

    Gating:
        is_unlocked: players may only send once this is True. Conversations
            opened by the coach side start unlocked.
        has_coach_replied / has_player_replied: set the first time each side
            sends. Drive the "request" list filter.

    Fields:
        coach: User in the coach slot (role coach or scout)
        coach_role: Role of the coach-slot user at creation time
        player: User in the player slot
        initiated_by / initiated_by_role: Who opened the conversation
        last_message_*: Snapshot of the newest message for list previews
        deleted_for: Users who soft-deleted this conversation
    """

    coach = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="coach_conversations",
        help_text="Coach or scout participant",
    )
    coach_role = models.CharField(
        max_length=10,
        choices=ParticipantRole.choices,
        default=ParticipantRole.COACH,
        help_text="Role of the coach-slot participant (coach or scout)",
    )
    player = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="player_conversations",
        help_text="Player participant",
    )
    initiated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="initiated_conversations",
        help_text="User who opened the conversation",
    )
    initiated_by_role = models.CharField(
        max_length=10,
        choices=ParticipantRole.choices,
        help_text="Role of the user who opened the conversation",
    )
    is_unlocked = models.BooleanField(
        default=False,
        help_text="Whether the player may send messages",
    )
    has_player_replied = models.BooleanField(
        default=False,
        help_text="Set once the player has sent a message",
    )
    has_coach_replied = models.BooleanField(
        default=False,
        help_text="Set once the coach-slot participant has sent a message",
    )

    # Denormalized last message snapshot
    last_message_text = models.TextField(
        blank=True,
        help_text="Text of the newest message",
    )
    last_message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        blank=True,
        help_text="Type of the newest message",
    )
    last_message_file_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Original file name of the newest attachment",
    )
    last_message_sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Sender of the newest message",
    )
    last_message_sender_role = models.CharField(
        max_length=10,
        choices=ParticipantRole.choices,
        blank=True,
        help_text="Role of the sender of the newest message",
    )
    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Timestamp of the newest message",
    )

    deleted_for = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="hidden_conversations",
        help_text="Participants who removed this conversation from their list",
    )

    objects = ConversationQuerySet.as_manager()

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["coach", "player"],
                name="unique_coach_player_conversation",
            ),
            models.CheckConstraint(
                condition=~Q(coach=F("player")),
                name="conversation_distinct_participants",
            ),
        ]
        indexes = [
            models.Index(fields=["player", "-updated_at"], name="chat_conver_player__6f2b1c_idx"),
            models.Index(fields=["coach", "-updated_at"], name="chat_conver_coach_i_3d8e4a_idx"),
        ]

    def __str__(self) -> str:
        return f"Conversation {self.pk} (coach={self.coach_id}, player={self.player_id})"

    @property
    def participants(self) -> tuple[ParticipantRef, ParticipantRef]:
        return (
            ParticipantRef(self.coach_id, self.coach_role),
            ParticipantRef(self.player_id, ParticipantRole.PLAYER),
        )

    def is_participant(self, user_id) -> bool:
        return user_id in (self.coach_id, self.player_id)

    def role_of(self, user_id) -> str | None:
        for participant in self.participants:
            if participant.user_id == user_id:
                return participant.role
        return None

    def get_other_participant(self, user_id) -> ParticipantRef | None:
        """
        Return the participant that is not ``user_id``.

        Returns None when ``user_id`` is not a participant at all.
        """
        if not self.is_participant(user_id):
            return None
        for participant in self.participants:
            if participant.user_id != user_id:
                return participant
        return None

    @property
    def has_messages(self) -> bool:
        return self.last_message_at is not None

    @property
    def last_message(self) -> dict | None:
        """Preview snapshot of the newest message, or None before the first send."""
        if not self.has_messages:
            return None
        return {
            "text": self.last_message_text,
            "messageType": self.last_message_type,
            "file": (
                {"name": self.last_message_file_name}
                if self.last_message_file_name
                else None
            ),
            "senderId": self.last_message_sender_id,
            "senderRole": self.last_message_sender_role,
            "createdAt": self.last_message_at,
        }


class Message(BaseModel):
    """
    A single message in a conversation.

    The receiver is always the conversation's other participant at send time.
    Attachments are stored through the default storage backend; file_name
    keeps the original upload name for display.
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent the message",
    )
    sender_role = models.CharField(
        max_length=10,
        choices=ParticipantRole.choices,
        help_text="Role of the sender inside the conversation",
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
        help_text="The other participant at send time",
    )
    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Content type of the message",
    )
    text = models.TextField(
        blank=True,
        help_text="Message text (caption for attachments)",
    )
    attachment = models.FileField(
        upload_to=ATTACHMENT_CONFIG.UPLOAD_TO,
        blank=True,
        help_text="Uploaded image or document",
    )
    file_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Original name of the uploaded file",
    )
    file_size = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Attachment size in bytes",
    )
    is_read = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether the receiver has read the message",
    )
    read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the receiver read the message",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["conversation", "-created_at"],
                name="chat_messag_convers_9a41e7_idx",
            ),
            models.Index(fields=["receiver", "is_read"], name="chat_messag_receive_52c0fd_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(sender=F("receiver")),
                name="message_sender_not_receiver",
            ),
        ]

    def __str__(self) -> str:
        return f"Message {self.pk} in conversation {self.conversation_id}"

    @property
    def has_attachment(self) -> bool:
        return bool(self.attachment)

    @property
    def content(self) -> MessageContent:
        """The message body as a TextContent, ImageContent or FileContent."""
        if self.message_type == MessageType.IMAGE and self.attachment:
            return ImageContent(
                url=self.attachment.url,
                name=self.file_name,
                size=self.file_size,
                caption=self.text,
            )
        if self.message_type == MessageType.FILE and self.attachment:
            return FileContent(
                url=self.attachment.url,
                name=self.file_name,
                size=self.file_size,
                caption=self.text,
            )
        return TextContent(body=self.text)
