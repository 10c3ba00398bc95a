"""
Views for chat API.

This module provides REST API endpoints for the messaging system. Every
mutation publishes the same real-time events as the WebSocket gateway, so
the other participant sees live updates whichever surface was used.

URL Structure:
    /api/v1/chat/conversations/start/            POST
    /api/v1/chat/conversations/                  GET, DELETE
    /api/v1/chat/messages/send/                  POST (multipart)
    /api/v1/chat/messages/read/                  PATCH
    /api/v1/chat/messages/{conversation_id}/     GET
    /api/v1/chat/messages/{message_id}/          DELETE

Design Decisions:
    - APIViews call the service layer; no business rules in views
    - Service error codes map to HTTP status in one place (ERROR_STATUS)
    - Message reads answer 403 for unknown and foreign conversations alike
    - Events are published after the service call commits
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat import events
from chat.models import ParticipantRef
from chat.permissions import HasMessagingRole, IsCoachOrScout
from chat.serializers import (
    ConversationListQuerySerializer,
    ConversationListSerializer,
    DeleteConversationsSerializer,
    MarkReadSerializer,
    MessagePageQuerySerializer,
    MessageSerializer,
    SendMessageSerializer,
    StartConversationSerializer,
)
from chat.services import ConversationService, MessageService

ERROR_STATUS = {
    "NOT_PARTICIPANT": status.HTTP_403_FORBIDDEN,
    "CONVERSATION_NOT_FOUND": status.HTTP_403_FORBIDDEN,
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "INVALID_ROLE": status.HTTP_403_FORBIDDEN,
    "CONVERSATION_LOCKED": status.HTTP_403_FORBIDDEN,
    "MESSAGE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


def error_response(result) -> Response:
    """Failed ServiceResult as an API error; unmapped codes are 400."""
    return Response(
        result.to_response(),
        status=ERROR_STATUS.get(result.error_code, status.HTTP_400_BAD_REQUEST),
    )


def publish_message(message, message_data: dict) -> None:
    """Fan out a newly sent message to its receiver."""
    events.publish_sync(
        events.message_created(
            message_data,
            conversation_id=message.conversation_id,
            sender=ParticipantRef(message.sender_id, message.sender_role),
            receiver_id=message.receiver_id,
            unread_count=MessageService.unread_count(
                message.conversation_id, message.receiver_id
            ),
        )
    )


# =============================================================================
# Conversation Views
# =============================================================================


class StartConversationView(APIView):
    """
    Open (or reuse) a conversation with a player and send the first message.

    POST /api/v1/chat/conversations/start/
        Coach and scout only.

    Payload:
        playerId: Player to message
        text: First message
    """

    permission_classes = [IsAuthenticated, IsCoachOrScout]

    @extend_schema(
        operation_id="start_conversation",
        summary="Start conversation",
        request=StartConversationSerializer,
        responses={
            201: OpenApiResponse(description="Conversation, participant and first message"),
            403: OpenApiResponse(description="Caller is not a coach or scout"),
            404: OpenApiResponse(description="Player not found"),
        },
        tags=["Chat - Conversations"],
    )
    def post(self, request):
        serializer = StartConversationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ConversationService.start_conversation(
            coach=request.user,
            player_id=serializer.validated_data["playerId"],
            text=serializer.validated_data["text"],
        )
        if not result.success:
            return error_response(result)

        started = result.data
        context = {"request": request, "user": request.user}
        conversation_data = ConversationListSerializer(
            started.conversation, context=context
        ).data
        message_data = MessageSerializer(started.message, context=context).data

        publish_message(started.message, message_data)

        return Response(
            {
                "conversation": conversation_data,
                "participant": conversation_data["participant"],
                "message": message_data,
                "unreadCount": 0,
            },
            status=status.HTTP_201_CREATED,
        )


class ConversationListView(APIView):
    """
    List or soft-delete the current user's conversations.

    GET /api/v1/chat/conversations/?type=request
        Newest activity first, with unread counts.

    DELETE /api/v1/chat/conversations/
        Payload: {conversationIds: [...]}. Hides them for the caller only.
    """

    permission_classes = [IsAuthenticated, HasMessagingRole]

    @extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        parameters=[
            OpenApiParameter(
                name="type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                enum=["request"],
                description="Only unanswered conversations opened by the other side",
                required=False,
            ),
        ],
        responses={200: ConversationListSerializer(many=True)},
        tags=["Chat - Conversations"],
    )
    def get(self, request):
        query = ConversationListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        conversations = ConversationService.list_for_user(
            request.user,
            list_filter=query.validated_data.get("type") or None,
        )
        serializer = ConversationListSerializer(
            conversations,
            many=True,
            context={"request": request, "user": request.user},
        )
        return Response(serializer.data)

    @extend_schema(
        operation_id="delete_conversations",
        summary="Delete conversations",
        request=DeleteConversationsSerializer,
        responses={200: OpenApiResponse(description="Ids actually hidden")},
        tags=["Chat - Conversations"],
    )
    def delete(self, request):
        serializer = DeleteConversationsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ConversationService.soft_delete(
            serializer.validated_data["conversationIds"],
            request.user,
        )
        if not result.success:
            return error_response(result)

        events.publish_sync(
            events.conversations_deleted(result.data, deleted_by=request.user.id)
        )
        return Response(
            {
                "success": True,
                "deleted": [conversation.id for conversation, _ in result.data],
            }
        )


# =============================================================================
# Message Views
# =============================================================================


class MessageView(APIView):
    """
    Message history and single-message delete.

    GET /api/v1/chat/messages/{conversation_id}/?page=1&limit=20
        Participants only; oldest to newest within the page.

    DELETE /api/v1/chat/messages/{message_id}/
        Sender only.
    """

    permission_classes = [IsAuthenticated, HasMessagingRole]

    @extend_schema(
        operation_id="list_messages",
        summary="Get messages",
        parameters=[MessagePageQuerySerializer],
        responses={
            200: MessageSerializer(many=True),
            403: OpenApiResponse(description="Access denied"),
        },
        tags=["Chat - Messages"],
    )
    def get(self, request, pk):
        query = MessagePageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        result = ConversationService.get_for_participant(pk, request.user)
        if not result.success:
            return error_response(result)

        page = MessageService.page(
            result.data,
            page=query.validated_data["page"],
            limit=query.validated_data["limit"],
        )
        serializer = MessageSerializer(
            page.messages, many=True, context={"request": request}
        )
        return Response(
            {
                "results": serializer.data,
                "page": page.page,
                "limit": page.limit,
                "total": page.total,
                "has_more": page.has_more,
            }
        )

    @extend_schema(
        operation_id="delete_message",
        summary="Delete message",
        responses={
            200: OpenApiResponse(description="Message deleted"),
            403: OpenApiResponse(description="Not the sender"),
            404: OpenApiResponse(description="Message not found"),
        },
        tags=["Chat - Messages"],
    )
    def delete(self, request, pk):
        result = MessageService.delete_own_message(pk, request.user)
        if not result.success:
            return error_response(result)

        events.publish_sync(events.message_deleted(result.data))
        return Response({"success": True})


class SendMessageView(APIView):
    """
    Send a text or attachment message.

    POST /api/v1/chat/messages/send/
        Multipart: conversationId, text, optional file (max 10 MB).
    """

    permission_classes = [IsAuthenticated, HasMessagingRole]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    @extend_schema(
        operation_id="send_message",
        summary="Send message",
        request={"multipart/form-data": SendMessageSerializer},
        responses={
            201: MessageSerializer,
            403: OpenApiResponse(description="Not a participant or conversation locked"),
        },
        tags=["Chat - Messages"],
    )
    def post(self, request):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ConversationService.get_for_participant(
            data["conversationId"], request.user
        )
        if not result.success:
            return error_response(result)

        sent = MessageService.send_message(
            result.data,
            request.user,
            text=data.get("text", ""),
            upload=data.get("file"),
        )
        if not sent.success:
            return error_response(sent)

        message_data = MessageSerializer(sent.data, context={"request": request}).data
        publish_message(sent.data, message_data)
        return Response(message_data, status=status.HTTP_201_CREATED)


class MarkReadView(APIView):
    """
    Mark every unread message addressed to the caller as read.

    PATCH /api/v1/chat/messages/read/
        Payload: {conversationId}
    """

    permission_classes = [IsAuthenticated, HasMessagingRole]

    @extend_schema(
        operation_id="mark_messages_read",
        summary="Mark conversation as read",
        request=MarkReadSerializer,
        responses={
            200: OpenApiResponse(description="Ids of messages flipped to read"),
            403: OpenApiResponse(description="Access denied"),
        },
        tags=["Chat - Messages"],
    )
    def patch(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ConversationService.get_for_participant(
            serializer.validated_data["conversationId"], request.user
        )
        if not result.success:
            return error_response(result)

        receipt = MessageService.mark_conversation_read(result.data, request.user)
        if not receipt.success:
            return error_response(receipt)

        events.publish_sync(events.conversation_read(receipt.data))
        return Response({"success": True, "messageIds": receipt.data.message_ids})
