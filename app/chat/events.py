"""
Real-time event fan-out.

Every server-to-client push goes through a channel layer group ("room"):
    user_<id>   personal room, joined by every connection of that user
    chat_<id>   conversation room, joined explicitly for typing signals
    presence    all connections, for online/offline broadcasts

The payload builders below are shared by the WebSocket consumer and the
REST views so both surfaces emit identical events. The consumer publishes
with ``publish()``; synchronous views use ``publish_sync()``.

Group messages use the "chat.event" type and are delivered to clients as
flat frames: {"type": <event name>, ...payload}.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NamedTuple

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from chat.constants import GATEWAY_CONFIG

if TYPE_CHECKING:
    from chat.models import ParticipantRef
    from chat.services import DeletedMessage, ReadReceipt

logger = logging.getLogger(__name__)

PRESENCE_GROUP = GATEWAY_CONFIG.PRESENCE_GROUP


class ServerEvent:
    """Event names pushed to clients."""

    NEW_MESSAGE = "newMessage"
    MESSAGE_SENT = "messageSent"
    UNREAD_UPDATE = "unreadUpdate"
    MESSAGE_READ = "messageRead"
    TYPING = "typing"
    STOP_TYPING = "stopTyping"
    USER_ONLINE = "userOnline"
    USER_OFFLINE = "userOffline"
    ONLINE_USERS = "onlineUsers"
    ERROR = "error"
    CONVERSATION_DELETED = "conversationDeleted"
    MESSAGE_DELETED = "messageDeleted"


class Outbound(NamedTuple):
    """One event addressed to one room."""

    group: str
    event: str
    payload: dict[str, Any]


def user_room(user_id) -> str:
    return f"{GATEWAY_CONFIG.USER_ROOM_PREFIX}{user_id}"


def chat_room(conversation_id) -> str:
    return f"{GATEWAY_CONFIG.CHAT_ROOM_PREFIX}{conversation_id}"


def frame(event: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Client-facing JSON frame for an event."""
    return {"type": event, **payload}


# =============================================================================
# Payload builders
# =============================================================================


def message_created(
    message_data: dict[str, Any],
    conversation_id: int,
    sender: ParticipantRef,
    receiver_id: int,
    unread_count: int,
) -> list[Outbound]:
    """New message plus the receiver's refreshed unread count."""
    room = user_room(receiver_id)
    return [
        Outbound(
            room,
            ServerEvent.NEW_MESSAGE,
            {
                "chatId": conversation_id,
                "message": message_data,
                "sender": {"id": sender.user_id, "role": sender.role},
            },
        ),
        Outbound(
            room,
            ServerEvent.UNREAD_UPDATE,
            {"chatId": conversation_id, "unreadCount": unread_count},
        ),
    ]


def message_sent(message_id: int) -> dict[str, Any]:
    """Delivery confirmation sent straight back to the sending connection."""
    return {"messageId": message_id, "status": "delivered"}


def conversation_read(receipt: ReadReceipt) -> list[Outbound]:
    """Read receipt for the other participant, unread reset for the reader."""
    return [
        Outbound(
            user_room(receipt.other_participant.user_id),
            ServerEvent.MESSAGE_READ,
            {
                "chatId": receipt.conversation_id,
                "readBy": receipt.reader_id,
                "messageIds": receipt.message_ids,
            },
        ),
        Outbound(
            user_room(receipt.reader_id),
            ServerEvent.UNREAD_UPDATE,
            {"chatId": receipt.conversation_id, "unreadCount": 0},
        ),
    ]


def conversations_deleted(
    deleted: list[tuple[Any, ParticipantRef]],
    deleted_by: int,
) -> list[Outbound]:
    return [
        Outbound(
            user_room(other.user_id),
            ServerEvent.CONVERSATION_DELETED,
            {"conversationId": conversation.id, "deletedBy": deleted_by},
        )
        for conversation, other in deleted
    ]


def message_deleted(deleted: DeletedMessage) -> list[Outbound]:
    return [
        Outbound(
            user_room(deleted.receiver_id),
            ServerEvent.MESSAGE_DELETED,
            {"messageId": deleted.message_id, "chatId": deleted.conversation_id},
        )
    ]


def typing(conversation_id, user_id: int, stopped: bool = False) -> Outbound:
    return Outbound(
        chat_room(conversation_id),
        ServerEvent.STOP_TYPING if stopped else ServerEvent.TYPING,
        {"chatId": conversation_id, "userId": user_id},
    )


def presence_changed(user_id: int, online: bool) -> Outbound:
    return Outbound(
        PRESENCE_GROUP,
        ServerEvent.USER_ONLINE if online else ServerEvent.USER_OFFLINE,
        {"userId": user_id},
    )


# =============================================================================
# Publishing
# =============================================================================


async def publish(
    outbound: list[Outbound],
    channel_layer=None,
    exclude_channel: str | None = None,
) -> None:
    """
    Send events to their rooms.

    ``exclude_channel`` suppresses delivery to one connection (the sender
    of a typing signal or presence broadcast).
    """
    layer = channel_layer or get_channel_layer()
    for item in outbound:
        await layer.group_send(
            item.group,
            {
                "type": "chat.event",
                "event": item.event,
                "payload": item.payload,
                "exclude_channel": exclude_channel,
            },
        )


def publish_sync(outbound: list[Outbound]) -> None:
    """
    Publish from synchronous code (REST views).

    The triggering write is already committed, so a channel layer failure
    is logged and the request still succeeds.
    """
    if not outbound:
        return
    try:
        async_to_sync(publish)(outbound)
    except Exception:
        logger.exception(
            f"Failed to publish {len(outbound)} chat events "
            f"({', '.join(sorted({item.event for item in outbound}))})"
        )
