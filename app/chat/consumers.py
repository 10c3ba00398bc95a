"""
WebSocket consumer for real-time messaging.

One connection per client device at ``ws/chat/``. The connection is bound to
the authenticated user, not to a conversation: conversation-scoped actions
name their conversation in the frame.

Authentication:
    JWTAuthMiddleware attaches the user to self.scope["user"]. Anonymous
    connections are closed with code 4001 before the handshake completes.

Channel Groups:
    user_<id>    every connection of a user; all targeted pushes
    chat_<id>    joined on request; typing signals only
    presence     every connection; online/offline broadcasts

Frames (client -> server), keyed by "type":
    sendMessage          {chatId, text}
    joinChat/leaveChat   {chatId}
    joinConversation     {conversationId}
    typing/stopTyping    {chatId}
    markAsRead           {chatId}
    deleteConversations  {conversationIds}

Frames (server -> client): see chat.events.ServerEvent. Failures are sent
as {"type": "error", "message", "error_code"} to this connection only and
never close it.
"""

from __future__ import annotations

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.apps import apps

from core.exceptions import (
    BaseApplicationError,
    PermissionDeniedError,
    ValidationError,
    exception_for,
)

from chat import events
from chat.constants import GATEWAY_CONFIG
from chat.events import ServerEvent
from chat.models import ParticipantRef
from chat.presence import PresenceRegistry
from chat.serializers import MessageSerializer
from chat.services import ConversationService, MessageService

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    Real-time gateway for one authenticated connection.

    Handles:
        - Connection authentication, presence registration and room joins
        - Sending messages and delivery confirmation
        - Chat room membership for typing indicators
        - Read receipts and conversation soft delete
        - Relaying channel-layer events to the client

    Attributes:
        presence: PresenceRegistry shared by all connections in the process
        user: Authenticated user (after connect)
        chat_rooms: Chat room groups this connection has joined
    """

    presence: PresenceRegistry | None = None

    def __init__(self, *args, presence: PresenceRegistry | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.presence = presence or apps.get_app_config("chat").presence
        self.user = None
        self.user_room: str | None = None
        self.chat_rooms: set[str] = set()

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self):
        user = self.scope.get("user")

        if not user or not user.is_authenticated:
            logger.warning("Rejected unauthenticated WebSocket connection")
            await self.close(code=GATEWAY_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        self.user = user
        self.user_room = events.user_room(user.id)

        await self.channel_layer.group_add(self.user_room, self.channel_name)
        await self.channel_layer.group_add(events.PRESENCE_GROUP, self.channel_name)

        subprotocols = self.scope.get("subprotocols") or []
        if GATEWAY_CONFIG.TOKEN_SUBPROTOCOL in subprotocols:
            await self.accept(subprotocol=GATEWAY_CONFIG.TOKEN_SUBPROTOCOL)
        else:
            await self.accept()

        await self.presence.connect(user.id, self.channel_name)
        await events.publish(
            [events.presence_changed(user.id, online=True)],
            channel_layer=self.channel_layer,
            exclude_channel=self.channel_name,
        )
        await self.send_event(
            ServerEvent.ONLINE_USERS,
            {"users": self.presence.list_online()},
        )

        logger.info(
            f"User {user.id} connected "
            f"({self.presence.connection_count(user.id)} live connections)"
        )

    async def disconnect(self, close_code):
        if self.user is None:
            return

        for room in self.chat_rooms:
            await self.channel_layer.group_discard(room, self.channel_name)
        self.chat_rooms.clear()
        await self.channel_layer.group_discard(self.user_room, self.channel_name)
        await self.channel_layer.group_discard(events.PRESENCE_GROUP, self.channel_name)

        went_offline = await self.presence.disconnect(self.user.id, self.channel_name)
        if went_offline:
            await events.publish(
                [events.presence_changed(self.user.id, online=False)],
                channel_layer=self.channel_layer,
            )

        logger.info(
            f"User {self.user.id} disconnected (code={close_code}, "
            f"offline={went_offline})"
        )

    # =========================================================================
    # Inbound frames
    # =========================================================================

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        """Decode a text frame; undecodable or binary frames get an error event."""
        if text_data is None:
            await self.send_error(
                ValidationError("Frames must be JSON text", error_code="VALIDATION_ERROR")
            )
            return
        try:
            content = await self.decode_json(text_data)
        except json.JSONDecodeError:
            await self.send_error(
                ValidationError("Frame is not valid JSON", error_code="VALIDATION_ERROR")
            )
            return
        await self.receive_json(content, **kwargs)

    async def receive_json(self, content, **kwargs):
        """
        Dispatch a client frame to its handler.

        Application errors become an error event; anything unexpected is
        logged with traceback and reported without internal detail.
        """
        event_type = content.get("type") if isinstance(content, dict) else None
        handler = self.handlers.get(event_type)

        if handler is None:
            await self.send_error(
                ValidationError(
                    f"Unknown event type: {event_type}",
                    error_code="UNKNOWN_EVENT",
                )
            )
            return

        try:
            await handler(self, content)
        except BaseApplicationError as e:
            logger.info(f"User {self.user.id} {event_type} rejected: {e}")
            await self.send_error(e)
        except Exception:
            logger.exception(f"Unhandled error in {event_type} for user {self.user.id}")
            await self.send_json(
                events.frame(
                    ServerEvent.ERROR,
                    {"message": "Something went wrong", "error_code": "SERVER_ERROR"},
                )
            )

    async def handle_send_message(self, content):
        chat_id = self._require_id(content, "chatId")
        text = content.get("text") or ""
        if not isinstance(text, str):
            raise ValidationError("text must be a string", error_code="VALIDATION_ERROR")

        message_data, sender, receiver_id, unread_count = await self._send_message(
            chat_id, text
        )

        await events.publish(
            events.message_created(
                message_data,
                conversation_id=message_data["conversationId"],
                sender=sender,
                receiver_id=receiver_id,
                unread_count=unread_count,
            ),
            channel_layer=self.channel_layer,
        )
        await self.send_event(
            ServerEvent.MESSAGE_SENT,
            events.message_sent(message_data["id"]),
        )

    async def handle_join_chat(self, content, key: str = "chatId"):
        chat_id = self._require_id(content, key)
        await self._get_conversation(chat_id)

        room = events.chat_room(chat_id)
        await self.channel_layer.group_add(room, self.channel_name)
        self.chat_rooms.add(room)
        logger.debug(f"User {self.user.id} joined {room}")

    async def handle_join_conversation(self, content):
        await self.handle_join_chat(content, key="conversationId")

    async def handle_leave_chat(self, content):
        room = events.chat_room(self._require_id(content, "chatId"))
        await self.channel_layer.group_discard(room, self.channel_name)
        self.chat_rooms.discard(room)
        logger.debug(f"User {self.user.id} left {room}")

    async def handle_typing(self, content, stopped: bool = False):
        chat_id = self._require_id(content, "chatId")
        if events.chat_room(chat_id) not in self.chat_rooms:
            raise PermissionDeniedError(
                "Join the chat before sending typing signals",
                error_code="NOT_PARTICIPANT",
            )
        await events.publish(
            [events.typing(chat_id, self.user.id, stopped=stopped)],
            channel_layer=self.channel_layer,
            exclude_channel=self.channel_name,
        )

    async def handle_stop_typing(self, content):
        await self.handle_typing(content, stopped=True)

    async def handle_mark_as_read(self, content):
        chat_id = self._require_id(content, "chatId")
        receipt = await self._mark_read(chat_id)
        await events.publish(
            events.conversation_read(receipt),
            channel_layer=self.channel_layer,
        )

    async def handle_delete_conversations(self, content):
        conversation_ids = content.get("conversationIds")
        if not isinstance(conversation_ids, list):
            raise ValidationError(
                "conversationIds array is required",
                error_code="NO_CONVERSATIONS",
            )
        conversation_ids = [
            self._coerce_id(value, "conversationIds")
            for value in conversation_ids
        ]
        deleted = await self._soft_delete(conversation_ids)
        await events.publish(
            events.conversations_deleted(deleted, deleted_by=self.user.id),
            channel_layer=self.channel_layer,
        )

    handlers = {
        "sendMessage": handle_send_message,
        "joinChat": handle_join_chat,
        "joinConversation": handle_join_conversation,
        "leaveChat": handle_leave_chat,
        "typing": handle_typing,
        "stopTyping": handle_stop_typing,
        "markAsRead": handle_mark_as_read,
        "deleteConversations": handle_delete_conversations,
    }

    # =========================================================================
    # Outbound frames
    # =========================================================================

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Relays the event to the client unless this connection is excluded.
        """
        if event.get("exclude_channel") == self.channel_name:
            return
        await self.send_event(event["event"], event["payload"])

    async def send_event(self, event: str, payload: dict):
        await self.send_json(events.frame(event, payload))

    async def send_error(self, error: BaseApplicationError):
        await self.send_event(
            ServerEvent.ERROR,
            {"message": error.message, "error_code": error.error_code},
        )

    # =========================================================================
    # Database access
    # =========================================================================

    @staticmethod
    def _coerce_id(value, key: str) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(
                f"{key} must be a conversation id",
                error_code="VALIDATION_ERROR",
            ) from None

    @classmethod
    def _require_id(cls, content: dict, key: str) -> int:
        return cls._coerce_id(content.get(key), key)

    def _load_conversation(self, chat_id):
        result = ConversationService.get_for_participant(chat_id, self.user)
        if not result.success:
            raise exception_for(result.error, result.error_code)
        return result.data

    @database_sync_to_async
    def _get_conversation(self, chat_id):
        return self._load_conversation(chat_id)

    @database_sync_to_async
    def _send_message(self, chat_id, text: str) -> tuple[dict, ParticipantRef, int, int]:
        """
        Persist a text message.

        Returns:
            (serialized message, sender ref, receiver id, receiver's unread count)
        """
        conversation = self._load_conversation(chat_id)
        result = MessageService.send_message(conversation, self.user, text=text)
        if not result.success:
            raise exception_for(result.error, result.error_code)

        message = result.data
        unread_count = MessageService.unread_count(conversation.id, message.receiver_id)
        return (
            MessageSerializer(message).data,
            ParticipantRef(message.sender_id, message.sender_role),
            message.receiver_id,
            unread_count,
        )

    @database_sync_to_async
    def _mark_read(self, chat_id):
        conversation = self._load_conversation(chat_id)
        result = MessageService.mark_conversation_read(conversation, self.user)
        if not result.success:
            raise exception_for(result.error, result.error_code)
        return result.data

    @database_sync_to_async
    def _soft_delete(self, conversation_ids):
        result = ConversationService.soft_delete(conversation_ids, self.user)
        if not result.success:
            raise exception_for(result.error, result.error_code)
        return result.data

