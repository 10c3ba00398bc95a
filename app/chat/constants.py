"""
Constants and configuration for the messaging subsystem.

Values that operators may tune (page size, attachment limit) are read from
Django settings once at import time.

Import example:
    from chat.constants import MESSAGE_CONFIG, ATTACHMENT_CONFIG, GATEWAY_CONFIG
"""

from typing import Final

from django.conf import settings


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    MAX_TEXT_LENGTH: Final[int] = 5000  # Characters

    # Offset pagination for message history (page/limit query params)
    DEFAULT_PAGE: Final[int] = 1
    DEFAULT_PAGE_SIZE: Final[int] = getattr(settings, "CHAT_MESSAGE_PAGE_SIZE", 20)
    MAX_PAGE_SIZE: Final[int] = 100


# =============================================================================
# Attachment Configuration
# =============================================================================


class ATTACHMENT_CONFIG:
    """Configuration for files sent through the REST send endpoint."""

    MAX_SIZE_MB: Final[int] = getattr(settings, "CHAT_MAX_ATTACHMENT_MB", 10)

    UPLOAD_TO: Final[str] = "chat/attachments/%Y/%m/"

    ALLOWED_CONTENT_TYPES: Final[tuple] = (
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


# =============================================================================
# Gateway Configuration
# =============================================================================


class GATEWAY_CONFIG:
    """Configuration for the WebSocket gateway."""

    # Close codes (4000-4999 are reserved for application use)
    CLOSE_UNAUTHENTICATED: Final[int] = 4001

    # Room (channel layer group) naming
    USER_ROOM_PREFIX: Final[str] = "user_"
    CHAT_ROOM_PREFIX: Final[str] = "chat_"
    PRESENCE_GROUP: Final[str] = "presence"

    # Subprotocol used to carry the access token: ["jwt", "<token>"]
    TOKEN_SUBPROTOCOL: Final[str] = "jwt"


# =============================================================================
# Conversation list filters
# =============================================================================


class CONVERSATION_FILTER:
    """Values accepted by the ?type= query parameter of the list endpoint."""

    REQUEST: Final[str] = "request"
    CHOICES: Final[tuple] = (REQUEST,)
