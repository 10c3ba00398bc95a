"""
Messaging service layer.

Services:
    ConversationService: find-or-create, listing, participant lookup, soft delete
    MessageService: send, page, mark read, delete, unread counts

Design Principles:
    - Services are stateless (class methods only)
    - Expected failures return ServiceResult.failure() with an error code
    - Unexpected failures raise
    - The message insert and the conversation snapshot update share one
      transaction
    - Services never publish real-time events; callers fan out the result

Usage:
    from chat.services import ConversationService, MessageService

    result = ConversationService.start_conversation(coach, player_id, "Hello")
    if result.success:
        conversation = result.data.conversation

    result = MessageService.send_message(conversation, player, text="Hi back")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.services import BaseService, ServiceResult
from core.validators import validate_content_type, validate_file_size

from chat.constants import ATTACHMENT_CONFIG, CONVERSATION_FILTER, MESSAGE_CONFIG
from chat.content import message_type_for_mime
from chat.models import (
    INITIATOR_ROLES,
    Conversation,
    Message,
    ParticipantRef,
    ParticipantRole,
)
from chat.tasks import delete_attachment_file

if TYPE_CHECKING:
    from django.core.files.uploadedfile import UploadedFile
    from django.db.models import QuerySet

    from authentication.models import User


@dataclass
class StartedConversation:
    """Result of a coach opening (or reopening) a conversation."""

    conversation: Conversation
    message: Message
    created: bool


@dataclass
class MessagePage:
    """One page of history, oldest first."""

    messages: list[Message]
    page: int
    limit: int
    total: int

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total


@dataclass
class ReadReceipt:
    """Messages flipped to read by a mark-as-read call."""

    conversation_id: int
    reader_id: int
    other_participant: ParticipantRef
    message_ids: list[int]
    sender_ids: list[int]


@dataclass
class DeletedMessage:
    """Identity of a removed message, kept for event fan-out."""

    message_id: int
    conversation_id: int
    sender_id: int
    receiver_id: int


class ConversationService(BaseService):
    """
    Service for conversation lifecycle operations.

    Methods:
        find_or_create: Conversation for a (coach, player) pair
        start_conversation: find_or_create plus the first message
        list_for_user: Visible conversations with unread counts
        get_for_participant: Load a conversation the user belongs to
        record_message_sent: Update snapshot and reply flags
        soft_delete: Hide conversations for one participant
    """

    @classmethod
    def find_or_create(
        cls,
        coach: User,
        player: User,
    ) -> ServiceResult[tuple[Conversation, bool]]:
        """
        Return the conversation for the pair, creating it if needed.

        New conversations are opened by the coach side and start unlocked.
        A concurrent create for the same pair loses on the unique constraint
        and falls back to reading the winner's row.

        Returns:
            ServiceResult with (conversation, created)

        Error codes:
            SAME_USER: Coach and player are the same user
            INVALID_ROLE: Coach is not a coach/scout or player is not a player
        """
        if coach.id == player.id:
            return ServiceResult.failure(
                "Cannot start a conversation with yourself",
                error_code="SAME_USER",
            )

        if coach.role not in INITIATOR_ROLES:
            return ServiceResult.failure(
                "Only coach can start conversation",
                error_code="INVALID_ROLE",
            )

        if player.role != ParticipantRole.PLAYER:
            return ServiceResult.failure(
                "Conversations can only be started with a player",
                error_code="INVALID_ROLE",
            )

        existing = Conversation.objects.filter(coach=coach, player=player).first()
        if existing:
            cls.get_logger().debug(
                f"Found existing conversation {existing.id} "
                f"between coach {coach.id} and player {player.id}"
            )
            return ServiceResult.success((existing, False))

        try:
            with transaction.atomic():
                conversation = Conversation.objects.create(
                    coach=coach,
                    coach_role=coach.role,
                    player=player,
                    initiated_by=coach,
                    initiated_by_role=coach.role,
                    is_unlocked=True,
                )
        except IntegrityError:
            conversation = Conversation.objects.get(coach=coach, player=player)
            cls.get_logger().info(
                f"Concurrent create for coach {coach.id} and player {player.id}; "
                f"using conversation {conversation.id}"
            )
            return ServiceResult.success((conversation, False))

        cls.get_logger().info(
            f"Created conversation {conversation.id} "
            f"between coach {coach.id} and player {player.id}"
        )
        return ServiceResult.success((conversation, True))

    @classmethod
    def start_conversation(
        cls,
        coach: User,
        player_id: int,
        text: str,
    ) -> ServiceResult[StartedConversation]:
        """
        Open (or reuse) the conversation with a player and send the first message.

        Error codes:
            INVALID_ROLE: Caller is not a coach or scout
            EMPTY_MESSAGE: Text is blank
            USER_NOT_FOUND: No active player with that id
            SAME_USER: Coach and player are the same user
        """
        if coach.role not in INITIATOR_ROLES:
            return ServiceResult.failure(
                "Only coach can start conversation",
                error_code="INVALID_ROLE",
            )

        if not (text or "").strip():
            return ServiceResult.failure(
                "Message text is required",
                error_code="EMPTY_MESSAGE",
            )

        User = get_user_model()
        player = User.objects.filter(
            id=player_id,
            role=ParticipantRole.PLAYER,
            is_active=True,
        ).first()
        if not player:
            return ServiceResult.failure(
                "Player not found",
                error_code="USER_NOT_FOUND",
            )

        with cls.atomic():
            found = cls.find_or_create(coach, player)
            if not found.success:
                return ServiceResult.failure(found.error, error_code=found.error_code)
            conversation, created = found.data

            sent = MessageService.send_message(conversation, coach, text=text)
            if not sent.success:
                transaction.set_rollback(True)
                return ServiceResult.failure(sent.error, error_code=sent.error_code)

        return ServiceResult.success(
            StartedConversation(
                conversation=conversation,
                message=sent.data,
                created=created,
            )
        )

    @classmethod
    def list_for_user(
        cls,
        user: User,
        list_filter: str | None = None,
    ) -> QuerySet[Conversation]:
        """
        Conversations visible to ``user``, newest activity first.

        Each row is annotated with ``unread_count`` (messages addressed to
        the user that are still unread).

        With ``list_filter="request"`` only conversations opened by the
        opposite side that the viewer has not answered yet are returned:
        for a player, coach/scout-initiated threads without a player reply;
        for a coach or scout, player-initiated threads without a coach reply.
        """
        queryset = (
            Conversation.objects.visible_to(user.id)
            .with_unread_count(user.id)
            .select_related("coach", "player", "initiated_by")
            .order_by("-updated_at", "-id")
        )

        if list_filter == CONVERSATION_FILTER.REQUEST:
            if user.role == ParticipantRole.PLAYER:
                queryset = queryset.filter(
                    player=user,
                    initiated_by_role__in=INITIATOR_ROLES,
                    has_player_replied=False,
                )
            elif user.role in INITIATOR_ROLES:
                queryset = queryset.filter(
                    coach=user,
                    initiated_by_role=ParticipantRole.PLAYER,
                    has_coach_replied=False,
                )
            else:
                queryset = queryset.none()

        return queryset

    @classmethod
    def get_for_participant(
        cls,
        conversation_id,
        user: User,
    ) -> ServiceResult[Conversation]:
        """
        Load a conversation the user participates in.

        Unknown ids and conversations the user is not part of fail the same
        way so callers cannot probe for existence.

        Error codes:
            NOT_PARTICIPANT: Missing conversation or user is not a participant
        """
        conversation = (
            Conversation.objects.select_related("coach", "player")
            .filter(id=conversation_id)
            .first()
        )
        if not conversation or not conversation.is_participant(user.id):
            return ServiceResult.failure(
                "Access denied",
                error_code="NOT_PARTICIPANT",
            )
        return ServiceResult.success(conversation)

    @classmethod
    def record_message_sent(
        cls,
        conversation: Conversation,
        message: Message,
    ) -> Conversation:
        """
        Refresh the last-message snapshot and the sender side's reply flag.

        Safe to repeat for the same message. Must run in the transaction
        that created ``message``.
        """
        conversation.last_message_text = message.text
        conversation.last_message_type = message.message_type
        conversation.last_message_file_name = message.file_name
        conversation.last_message_sender_id = message.sender_id
        conversation.last_message_sender_role = message.sender_role
        conversation.last_message_at = message.created_at

        update_fields = [
            "last_message_text",
            "last_message_type",
            "last_message_file_name",
            "last_message_sender",
            "last_message_sender_role",
            "last_message_at",
            "updated_at",
        ]

        if message.sender_role == ParticipantRole.PLAYER:
            conversation.has_player_replied = True
            update_fields.append("has_player_replied")
        else:
            conversation.has_coach_replied = True
            update_fields.append("has_coach_replied")

        conversation.save(update_fields=update_fields)
        return conversation

    @classmethod
    def soft_delete(
        cls,
        conversation_ids: list[int],
        user: User,
    ) -> ServiceResult[list[tuple[Conversation, ParticipantRef]]]:
        """
        Hide conversations from ``user``'s list.

        Ids the user does not participate in, or has already hidden, are
        skipped. The other participant keeps the conversation and messages.

        Returns:
            ServiceResult with (conversation, other participant) for each
            conversation actually hidden

        Error codes:
            NO_CONVERSATIONS: Empty id list
        """
        if not conversation_ids:
            return ServiceResult.failure(
                "conversationIds array is required",
                error_code="NO_CONVERSATIONS",
            )

        deleted = []
        with cls.atomic():
            conversations = Conversation.objects.visible_to(user.id).filter(
                id__in=conversation_ids
            )
            for conversation in conversations:
                conversation.deleted_for.add(user)
                deleted.append(
                    (conversation, conversation.get_other_participant(user.id))
                )

        cls.get_logger().info(
            f"User {user.id} deleted {len(deleted)} of "
            f"{len(conversation_ids)} requested conversations"
        )
        return ServiceResult.success(deleted)


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        send_message: Text or attachment message from a participant
        page: Offset-paginated history, oldest first
        mark_conversation_read: Flip unread messages addressed to the reader
        delete_own_message: Sender-only hard delete
        unread_count: Unread messages addressed to a user
    """

    @classmethod
    def send_message(
        cls,
        conversation: Conversation,
        sender: User,
        text: str = "",
        upload: UploadedFile | None = None,
    ) -> ServiceResult[Message]:
        """
        Send a message to the other participant.

        The receiver and the sender's role are derived from the conversation,
        never taken from the client. The message type follows the upload's
        MIME type (image/* -> image, other -> file, no upload -> text).

        Error codes:
            NOT_PARTICIPANT: Sender is not in this conversation
            CONVERSATION_LOCKED: Player sending before the coach side unlocked it
            EMPTY_MESSAGE: No text and no attachment
            FILE_TOO_LARGE: Attachment above the size limit
            UNSUPPORTED_FILE_TYPE: Attachment MIME type not allowed
        """
        sender_role = conversation.role_of(sender.id)
        if sender_role is None:
            return ServiceResult.failure(
                "Not allowed in this chat",
                error_code="NOT_PARTICIPANT",
            )

        if sender_role == ParticipantRole.PLAYER and not conversation.is_unlocked:
            return ServiceResult.failure(
                "Player cannot send message until coach initiates",
                error_code="CONVERSATION_LOCKED",
            )

        text = (text or "").strip()
        if not text and upload is None:
            return ServiceResult.failure(
                "Message text required",
                error_code="EMPTY_MESSAGE",
            )

        if upload is not None:
            try:
                validate_file_size(ATTACHMENT_CONFIG.MAX_SIZE_MB)(upload)
                validate_content_type(ATTACHMENT_CONFIG.ALLOWED_CONTENT_TYPES)(upload)
            except DjangoValidationError as e:
                error_code = (
                    "FILE_TOO_LARGE" if e.code == "file_too_large" else "UNSUPPORTED_FILE_TYPE"
                )
                return ServiceResult.failure(e.messages[0], error_code=error_code)

        receiver = conversation.get_other_participant(sender.id)

        with cls.atomic():
            message = Message.objects.create(
                conversation=conversation,
                sender=sender,
                sender_role=sender_role,
                receiver_id=receiver.user_id,
                message_type=message_type_for_mime(getattr(upload, "content_type", None)),
                text=text,
                attachment=upload,
                file_name=upload.name if upload else "",
                file_size=upload.size if upload else None,
            )
            ConversationService.record_message_sent(conversation, message)

        cls.get_logger().debug(
            f"User {sender.id} sent {message.message_type} message {message.id} "
            f"to conversation {conversation.id}"
        )
        return ServiceResult.success(message)

    @classmethod
    def page(
        cls,
        conversation: Conversation,
        page: int = MESSAGE_CONFIG.DEFAULT_PAGE,
        limit: int = MESSAGE_CONFIG.DEFAULT_PAGE_SIZE,
    ) -> MessagePage:
        """
        Return one page of history.

        Page 1 holds the newest ``limit`` messages. Rows are fetched newest
        first and reversed so each page reads oldest to newest.
        """
        page = max(page, 1)
        limit = max(1, min(limit, MESSAGE_CONFIG.MAX_PAGE_SIZE))
        offset = (page - 1) * limit

        queryset = conversation.messages.select_related("sender", "receiver")
        messages = list(queryset.order_by("-created_at", "-id")[offset : offset + limit])
        messages.reverse()

        return MessagePage(
            messages=messages,
            page=page,
            limit=limit,
            total=queryset.count(),
        )

    @classmethod
    def mark_conversation_read(
        cls,
        conversation: Conversation,
        reader: User,
    ) -> ServiceResult[ReadReceipt]:
        """
        Mark every unread message addressed to ``reader`` as read.

        Only the rows found unread at the start are flipped, so a message
        arriving mid-call stays unread.

        Error codes:
            NOT_PARTICIPANT: Reader is not in this conversation
        """
        other = conversation.get_other_participant(reader.id)
        if other is None:
            return ServiceResult.failure(
                "Not allowed in this chat",
                error_code="NOT_PARTICIPANT",
            )

        with cls.atomic():
            unread = list(
                Message.objects.filter(
                    conversation=conversation,
                    receiver=reader,
                    is_read=False,
                ).values_list("id", "sender_id")
            )
            message_ids = [message_id for message_id, _ in unread]
            if message_ids:
                Message.objects.filter(id__in=message_ids).update(
                    is_read=True,
                    read_at=timezone.now(),
                )

        cls.get_logger().debug(
            f"User {reader.id} read {len(message_ids)} messages "
            f"in conversation {conversation.id}"
        )
        return ServiceResult.success(
            ReadReceipt(
                conversation_id=conversation.id,
                reader_id=reader.id,
                other_participant=other,
                message_ids=message_ids,
                sender_ids=sorted({sender_id for _, sender_id in unread}),
            )
        )

    @classmethod
    def delete_own_message(
        cls,
        message_id,
        requester: User,
    ) -> ServiceResult[DeletedMessage]:
        """
        Delete a message sent by ``requester``.

        The record is removed immediately. Attachment cleanup is handed to a
        Celery task after commit; storage failures are logged there and
        never block the delete.

        Error codes:
            MESSAGE_NOT_FOUND: No such message
            PERMISSION_DENIED: Requester is not the sender
        """
        message = Message.objects.filter(id=message_id).first()
        if not message:
            return ServiceResult.failure(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
            )

        if message.sender_id != requester.id:
            return ServiceResult.failure(
                "You can only delete your own messages",
                error_code="PERMISSION_DENIED",
            )

        deleted = DeletedMessage(
            message_id=message.id,
            conversation_id=message.conversation_id,
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
        )
        storage_name = message.attachment.name if message.attachment else None

        with cls.atomic():
            message.delete()
            if storage_name:
                transaction.on_commit(
                    lambda: delete_attachment_file.delay(storage_name),
                    robust=True,
                )

        cls.get_logger().info(
            f"User {requester.id} deleted message {deleted.message_id} "
            f"in conversation {deleted.conversation_id}"
        )
        return ServiceResult.success(deleted)

    @classmethod
    def unread_count(cls, conversation_id, user_id) -> int:
        """Count unread messages in the conversation addressed to the user."""
        return Message.objects.filter(
            conversation_id=conversation_id,
            receiver_id=user_id,
            is_read=False,
        ).count()
