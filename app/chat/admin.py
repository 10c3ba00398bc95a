"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation inspection
- Message moderation
"""

from django.contrib import admin

from chat.models import Conversation, Message


class MessageInline(admin.TabularInline):
    """Recent messages inside the conversation admin."""

    model = Message
    extra = 0
    fields = ["sender", "message_type", "text", "is_read", "created_at"]
    readonly_fields = fields
    raw_id_fields = ["sender"]
    ordering = ["-created_at"]
    show_change_link = True


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "coach",
        "coach_role",
        "player",
        "is_unlocked",
        "has_coach_replied",
        "has_player_replied",
        "last_message_at",
        "created_at",
    ]
    list_filter = ["coach_role", "is_unlocked", "has_coach_replied", "has_player_replied"]
    search_fields = ["id", "coach__email", "player__email"]
    readonly_fields = [
        "created_at",
        "updated_at",
        "last_message_text",
        "last_message_type",
        "last_message_file_name",
        "last_message_sender",
        "last_message_sender_role",
        "last_message_at",
    ]
    raw_id_fields = ["coach", "player", "initiated_by", "deleted_for"]
    inlines = [MessageInline]
    ordering = ["-updated_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "sender_role",
        "receiver",
        "message_type",
        "is_read",
        "created_at",
    ]
    list_filter = ["message_type", "sender_role", "is_read", "created_at"]
    search_fields = ["text", "file_name", "sender__email", "receiver__email"]
    readonly_fields = ["created_at", "updated_at", "read_at"]
    raw_id_fields = ["conversation", "sender", "receiver"]
    ordering = ["-created_at"]
