"""
Serializers for chat API.

This module provides serializers for the messaging system:
- Message serializers (read, send)
- Conversation serializers (list, start, delete)
- Query parameter serializers (message paging, list filter)

Serializer Hierarchy:
    MessageSerializer: Message with sender/receiver cards and file metadata
    ConversationListSerializer: List row with the other participant and unread count

    StartConversationSerializer: {playerId, text}
    SendMessageSerializer: multipart {conversationId, text, file}
    MarkReadSerializer: {conversationId}
    DeleteConversationsSerializer: {conversationIds}

    MessagePageQuerySerializer: ?page&limit
    ConversationListQuerySerializer: ?type=request

Design Decisions:
    - Field names follow the client contract (camelCase)
    - Read and write serializers are separate
    - File URLs are absolute (request host, or SITE_URL outside a request)
    - The same MessageSerializer output is pushed over WebSocket events
"""

from __future__ import annotations

from django.conf import settings
from rest_framework import serializers

from authentication.serializers import ParticipantSerializer
from chat.constants import CONVERSATION_FILTER, MESSAGE_CONFIG
from chat.models import Conversation, Message


def absolute_url(url: str, request=None) -> str:
    if request is not None:
        return request.build_absolute_uri(url)
    return f"{settings.SITE_URL.rstrip('/')}{url}"


# =============================================================================
# Message Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Message as seen by either participant.

    ``file`` is {url, name, size} for image and file messages, None for text.
    """

    conversationId = serializers.IntegerField(source="conversation_id", read_only=True)
    messageType = serializers.CharField(source="message_type", read_only=True)
    senderRole = serializers.CharField(source="sender_role", read_only=True)
    sender = ParticipantSerializer(read_only=True)
    receiver = ParticipantSerializer(read_only=True)
    file = serializers.SerializerMethodField()
    isRead = serializers.BooleanField(source="is_read", read_only=True)
    readAt = serializers.DateTimeField(source="read_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversationId",
            "messageType",
            "text",
            "file",
            "sender",
            "senderRole",
            "receiver",
            "isRead",
            "readAt",
            "createdAt",
        ]
        read_only_fields = fields

    def get_file(self, obj: Message) -> dict | None:
        if not obj.has_attachment:
            return None
        return {
            "url": absolute_url(obj.attachment.url, self.context.get("request")),
            "name": obj.file_name,
            "size": obj.file_size,
        }


class SendMessageSerializer(serializers.Serializer):
    """Validate a REST send. Either text or file is required."""

    conversationId = serializers.IntegerField(min_value=1)
    text = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        max_length=MESSAGE_CONFIG.MAX_TEXT_LENGTH,
    )
    file = serializers.FileField(required=False, allow_empty_file=False)

    def validate(self, attrs):
        if not attrs.get("text", "").strip() and not attrs.get("file"):
            raise serializers.ValidationError(
                {"text": ["Message text required"]},
                code="EMPTY_MESSAGE",
            )
        return attrs


class MarkReadSerializer(serializers.Serializer):
    conversationId = serializers.IntegerField(min_value=1)


class MessagePageQuerySerializer(serializers.Serializer):
    """Query parameters for message history. Oversized limits are capped."""

    page = serializers.IntegerField(min_value=1, default=MESSAGE_CONFIG.DEFAULT_PAGE)
    limit = serializers.IntegerField(
        min_value=1, default=MESSAGE_CONFIG.DEFAULT_PAGE_SIZE
    )

    def validate_limit(self, value: int) -> int:
        return min(value, MESSAGE_CONFIG.MAX_PAGE_SIZE)


# =============================================================================
# Conversation Serializers
# =============================================================================


class ConversationListSerializer(serializers.ModelSerializer):
    """
    Conversation row for the list screen.

    Requires ``context["user"]`` (the viewer). ``participant`` is the other
    side's directory card; ``unreadCount`` uses the queryset annotation when
    present.
    """

    participant = serializers.SerializerMethodField()
    participants = serializers.SerializerMethodField()
    initiatedBy = serializers.SerializerMethodField()
    isUnlocked = serializers.BooleanField(source="is_unlocked", read_only=True)
    hasPlayerReplied = serializers.BooleanField(
        source="has_player_replied", read_only=True
    )
    hasCoachReplied = serializers.BooleanField(source="has_coach_replied", read_only=True)
    lastMessage = serializers.SerializerMethodField()
    unreadCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Conversation
        fields = [
            "id",
            "participant",
            "participants",
            "initiatedBy",
            "isUnlocked",
            "hasPlayerReplied",
            "hasCoachReplied",
            "lastMessage",
            "unreadCount",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def _viewer_id(self):
        return self.context["user"].id

    def get_participant(self, obj: Conversation) -> dict | None:
        viewer_id = self._viewer_id()
        if obj.coach_id == viewer_id:
            other = obj.player
        elif obj.player_id == viewer_id:
            other = obj.coach
        else:
            return None
        return ParticipantSerializer(other, context=self.context).data

    def get_participants(self, obj: Conversation) -> list[dict]:
        return [{"userId": p.user_id, "role": p.role} for p in obj.participants]

    def get_initiatedBy(self, obj: Conversation) -> dict:
        return {"userId": obj.initiated_by_id, "role": obj.initiated_by_role}

    def get_lastMessage(self, obj: Conversation) -> dict | None:
        snapshot = obj.last_message
        if snapshot is None:
            return None
        snapshot["createdAt"] = serializers.DateTimeField().to_representation(
            snapshot["createdAt"]
        )
        return snapshot

    def get_unreadCount(self, obj: Conversation) -> int:
        annotated = getattr(obj, "unread_count", None)
        if annotated is not None:
            return annotated
        return obj.messages.filter(receiver_id=self._viewer_id(), is_read=False).count()


class StartConversationSerializer(serializers.Serializer):
    playerId = serializers.IntegerField(min_value=1)
    text = serializers.CharField(max_length=MESSAGE_CONFIG.MAX_TEXT_LENGTH)


class DeleteConversationsSerializer(serializers.Serializer):
    conversationIds = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
        error_messages={"empty": "conversationIds array is required"},
    )


class ConversationListQuerySerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=CONVERSATION_FILTER.CHOICES,
        required=False,
        allow_blank=True,
    )
