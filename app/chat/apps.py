"""
Chat application configuration.

This app provides coach/scout to player messaging with:
- Coach-initiated conversations, player sends gated by unlock
- Read tracking and unread counts
- Per-user soft delete of conversations
- Live delivery, typing and presence over WebSocket
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """
    Configuration for the chat application.

    Owns the process-wide PresenceRegistry used by every ChatConsumer.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    def ready(self):
        from chat.presence import PresenceRegistry

        self.presence = PresenceRegistry()
