"""
Tests for chat API views.

This module tests all chat view endpoints:
- StartConversationView: coach/scout opens a thread with a first message
- ConversationListView: list (with request filter) and bulk soft delete
- MessageView: paginated history and sender-only delete
- SendMessageView: text and multipart attachment sends
- MarkReadView: bulk mark-as-read

Testing Philosophy:
    Tests focus on observable HTTP behavior plus the real-time events each
    mutation publishes. publish_sync is patched so the published events can
    be asserted without a live channel layer.
"""

from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework import status

from chat.models import Conversation, Message
from chat.services import MessageService


# =============================================================================
# URL Constants
# =============================================================================


START_URL = "/api/v1/chat/conversations/start/"
CONVERSATIONS_URL = "/api/v1/chat/conversations/"
SEND_URL = "/api/v1/chat/messages/send/"
READ_URL = "/api/v1/chat/messages/read/"


def messages_url(pk):
    return f"/api/v1/chat/messages/{pk}/"


def published(mock_publish):
    """Flatten every Outbound passed to publish_sync into (group, event, payload)."""
    return [tuple(item) for call in mock_publish.call_args_list for item in call.args[0]]


@pytest.fixture
def mock_publish():
    with patch("chat.events.publish_sync") as mock:
        yield mock


def send(conversation, sender, text="Hello"):
    return MessageService.send_message(conversation, sender, text=text).data


# =============================================================================
# TestStartConversationView
# =============================================================================


@pytest.mark.django_db
class TestStartConversationView:
    """
    Tests for StartConversationView.

    POST /api/v1/chat/conversations/start/
    """

    def test_coach_starts_conversation(self, coach_client, coach, player, mock_publish):
        """
        Coach opens a thread; the player gets the message live.

        Why it matters: This is how every conversation comes into existence.
        """
        response = coach_client.post(
            START_URL, {"playerId": player.id, "text": "Hello"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.data
        assert data["unreadCount"] == 0
        assert data["participant"]["id"] == player.id
        assert data["participant"]["firstName"] == "Jordan"
        assert data["conversation"]["isUnlocked"] is True
        assert data["conversation"]["hasCoachReplied"] is True
        assert data["conversation"]["hasPlayerReplied"] is False
        assert data["conversation"]["participants"] == [
            {"userId": coach.id, "role": "coach"},
            {"userId": player.id, "role": "player"},
        ]
        assert data["message"]["text"] == "Hello"
        assert data["message"]["sender"]["id"] == coach.id
        assert data["message"]["receiver"]["id"] == player.id
        assert data["message"]["messageType"] == "text"

        events = published(mock_publish)
        assert [(group, event) for group, event, _ in events] == [
            (f"user_{player.id}", "newMessage"),
            (f"user_{player.id}", "unreadUpdate"),
        ]
        assert events[1][2]["unreadCount"] == 1

    def test_scout_can_start(self, scout_client, player, mock_publish):
        response = scout_client.post(
            START_URL, {"playerId": player.id, "text": "Scouting you"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["message"]["senderRole"] == "scout"

    def test_second_start_reuses_conversation(
        self, coach_client, conversation, player, mock_publish
    ):
        response = coach_client.post(
            START_URL, {"playerId": player.id, "text": "Again"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["conversation"]["id"] == conversation.id
        assert Conversation.objects.count() == 1

    def test_player_cannot_start(self, player_client, other_player, mock_publish):
        response = player_client.post(
            START_URL, {"playerId": other_player.id, "text": "Hi"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["detail"] == "Only coach can start conversation"
        mock_publish.assert_not_called()

    def test_unknown_player_returns_404(self, coach_client, mock_publish):
        response = coach_client.post(
            START_URL, {"playerId": 999999, "text": "Hi"}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "USER_NOT_FOUND"

    def test_missing_text_returns_400(self, coach_client, player, mock_publish):
        response = coach_client.post(START_URL, {"playerId": player.id}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "text" in response.data

    def test_blank_text_returns_400(self, coach_client, player, mock_publish):
        response = coach_client.post(
            START_URL, {"playerId": player.id, "text": "   "}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Conversation.objects.exists()

    def test_requires_authentication(self, api_client, player):
        response = api_client.post(
            START_URL, {"playerId": player.id, "text": "Hi"}, format="json"
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# TestConversationListView
# =============================================================================


@pytest.mark.django_db
class TestConversationListView:
    """
    Tests for ConversationListView GET.

    GET /api/v1/chat/conversations/
    """

    def test_list_enriched_with_other_participant(
        self, player_client, conversation, coach, player
    ):
        send(conversation, coach, "One")
        send(conversation, coach, "Two")

        response = player_client.get(CONVERSATIONS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        row = response.data[0]
        assert row["id"] == conversation.id
        assert row["participant"] == {
            "id": coach.id,
            "firstName": "Dana",
            "lastName": "Reyes",
            "role": "coach",
            "profileImage": None,
        }
        assert row["unreadCount"] == 2
        assert row["lastMessage"]["text"] == "Two"
        assert row["lastMessage"]["senderId"] == coach.id
        assert row["initiatedBy"] == {"userId": coach.id, "role": "coach"}

    def test_request_filter(self, player_client, conversation, scout_conversation, player):
        send(conversation, player, "Thanks coach")

        response = player_client.get(CONVERSATIONS_URL, {"type": "request"})

        assert [row["id"] for row in response.data] == [scout_conversation.id]

    def test_unknown_filter_returns_400(self, player_client):
        response = player_client.get(CONVERSATIONS_URL, {"type": "archived"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_empty_list(self, coach_client):
        response = coach_client.get(CONVERSATIONS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []

    def test_role_without_messaging_forbidden(self, client_for, super_admin):
        response = client_for(super_admin).get(CONVERSATIONS_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestConversationDelete:
    """
    Tests for ConversationListView DELETE.

    DELETE /api/v1/chat/conversations/
    """

    def test_soft_delete_notifies_other_participant(
        self, coach_client, player_client, conversation, coach, player, mock_publish
    ):
        """
        Deleting hides the thread for the caller and tells the other side.

        Why it matters: The other participant keeps the conversation.
        """
        response = coach_client.delete(
            CONVERSATIONS_URL, {"conversationIds": [conversation.id]}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"success": True, "deleted": [conversation.id]}
        assert coach_client.get(CONVERSATIONS_URL).data == []
        assert len(player_client.get(CONVERSATIONS_URL).data) == 1
        assert published(mock_publish) == [
            (
                f"user_{player.id}",
                "conversationDeleted",
                {"conversationId": conversation.id, "deletedBy": coach.id},
            )
        ]

    def test_foreign_ids_are_skipped(self, client_for, outsider, conversation, mock_publish):
        response = client_for(outsider).delete(
            CONVERSATIONS_URL, {"conversationIds": [conversation.id]}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["deleted"] == []

    def test_empty_list_returns_400(self, coach_client, mock_publish):
        response = coach_client.delete(
            CONVERSATIONS_URL, {"conversationIds": []}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["conversationIds"] == ["conversationIds array is required"]

    def test_missing_ids_returns_400(self, coach_client, mock_publish):
        response = coach_client.delete(CONVERSATIONS_URL, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# TestMessageView
# =============================================================================


@pytest.mark.django_db
class TestMessageHistory:
    """
    Tests for MessageView GET.

    GET /api/v1/chat/messages/{conversation_id}/?page&limit
    """

    def test_paginated_history(self, player_client, conversation, coach):
        for i in range(3):
            send(conversation, coach, f"m{i}")

        response = player_client.get(messages_url(conversation.id), {"page": 1, "limit": 2})

        assert response.status_code == status.HTTP_200_OK
        assert [m["text"] for m in response.data["results"]] == ["m1", "m2"]
        assert response.data["page"] == 1
        assert response.data["limit"] == 2
        assert response.data["total"] == 3
        assert response.data["has_more"] is True

    def test_default_paging(self, player_client, conversation):
        response = player_client.get(messages_url(conversation.id))

        assert response.data["page"] == 1
        assert response.data["limit"] == 20
        assert response.data["results"] == []

    def test_oversized_limit_is_capped(self, player_client, conversation):
        response = player_client.get(messages_url(conversation.id), {"limit": 500})

        assert response.data["limit"] == 100

    def test_non_participant_forbidden(self, client_for, outsider, conversation):
        response = client_for(outsider).get(messages_url(conversation.id))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "NOT_PARTICIPANT"

    def test_unknown_conversation_forbidden(self, player_client):
        """
        Unknown conversations answer 403, not 404.

        Why it matters: Status codes must not reveal which ids exist.
        """
        response = player_client.get(messages_url(999999))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_invalid_page_returns_400(self, player_client, conversation):
        response = player_client.get(messages_url(conversation.id), {"page": 0})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestMessageDelete:
    """
    Tests for MessageView DELETE.

    DELETE /api/v1/chat/messages/{message_id}/
    """

    def test_sender_deletes_message(
        self, coach_client, conversation, coach, player, mock_publish
    ):
        message = send(conversation, coach, "oops")

        response = coach_client.delete(messages_url(message.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"success": True}
        assert not Message.objects.filter(id=message.id).exists()
        assert published(mock_publish) == [
            (
                f"user_{player.id}",
                "messageDeleted",
                {"messageId": message.id, "chatId": conversation.id},
            )
        ]

    def test_receiver_cannot_delete(self, player_client, conversation, coach, mock_publish):
        message = send(conversation, coach, "keep")

        response = player_client.delete(messages_url(message.id))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "PERMISSION_DENIED"
        mock_publish.assert_not_called()

    def test_unknown_message_returns_404(self, coach_client, mock_publish):
        response = coach_client.delete(messages_url(999999))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "MESSAGE_NOT_FOUND"


# =============================================================================
# TestSendMessageView
# =============================================================================


@pytest.mark.django_db
class TestSendMessageView:
    """
    Tests for SendMessageView.

    POST /api/v1/chat/messages/send/
    """

    def test_player_replies(self, player_client, conversation, coach, player, mock_publish):
        response = player_client.post(
            SEND_URL,
            {"conversationId": conversation.id, "text": "Hi back"},
            format="multipart",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["text"] == "Hi back"
        assert response.data["sender"]["id"] == player.id
        assert response.data["receiver"]["id"] == coach.id
        assert response.data["senderRole"] == "player"
        assert response.data["file"] is None

        conversation.refresh_from_db()
        assert conversation.has_player_replied is True

        events = published(mock_publish)
        assert events[0][0] == f"user_{coach.id}"
        assert events[0][1] == "newMessage"
        assert events[0][2]["sender"] == {"id": player.id, "role": "player"}
        assert events[1][2] == {"chatId": conversation.id, "unreadCount": 1}

    def test_image_upload(self, coach_client, conversation, mock_publish):
        upload = SimpleUploadedFile("combine.png", b"png-data", content_type="image/png")

        response = coach_client.post(
            SEND_URL,
            {"conversationId": conversation.id, "file": upload},
            format="multipart",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["messageType"] == "image"
        assert response.data["file"]["name"] == "combine.png"
        assert response.data["file"]["size"] == len(b"png-data")
        assert response.data["file"]["url"].startswith("http://testserver/")

    def test_unsupported_upload_returns_400(self, coach_client, conversation, mock_publish):
        upload = SimpleUploadedFile("script.sh", b"#!/bin/sh", content_type="application/x-sh")

        response = coach_client.post(
            SEND_URL,
            {"conversationId": conversation.id, "file": upload},
            format="multipart",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "UNSUPPORTED_FILE_TYPE"

    def test_json_body_accepted(self, coach_client, conversation, mock_publish):
        response = coach_client.post(
            SEND_URL, {"conversationId": conversation.id, "text": "json"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED

    def test_empty_message_returns_400(self, coach_client, conversation, mock_publish):
        response = coach_client.post(
            SEND_URL, {"conversationId": conversation.id, "text": ""}, format="multipart"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["text"] == ["Message text required"]

    def test_locked_conversation_forbidden(
        self, client_for, other_player, locked_conversation, mock_publish
    ):
        response = client_for(other_player).post(
            SEND_URL,
            {"conversationId": locked_conversation.id, "text": "Hi"},
            format="multipart",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "CONVERSATION_LOCKED"
        mock_publish.assert_not_called()

    def test_non_participant_forbidden(self, client_for, outsider, conversation, mock_publish):
        response = client_for(outsider).post(
            SEND_URL, {"conversationId": conversation.id, "text": "Hi"}, format="multipart"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "NOT_PARTICIPANT"

    def test_channel_layer_outage_still_returns_201(self, coach_client, conversation):
        """
        The message is committed even if live delivery fails.

        Why it matters: Clients retry on errors; a false failure would
        cause duplicate messages.
        """
        with patch("chat.events.get_channel_layer", side_effect=ConnectionError("down")):
            response = coach_client.post(
                SEND_URL, {"conversationId": conversation.id, "text": "Hi"}, format="json"
            )

        assert response.status_code == status.HTTP_201_CREATED
        assert Message.objects.count() == 1


# =============================================================================
# TestMarkReadView
# =============================================================================


@pytest.mark.django_db
class TestMarkReadView:
    """
    Tests for MarkReadView.

    PATCH /api/v1/chat/messages/read/
    """

    def test_mark_read_notifies_sender(
        self, player_client, conversation, coach, player, mock_publish
    ):
        sent = [send(conversation, coach, f"m{i}") for i in range(2)]

        response = player_client.patch(
            READ_URL, {"conversationId": conversation.id}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["success"] is True
        assert sorted(response.data["messageIds"]) == sorted(m.id for m in sent)
        assert MessageService.unread_count(conversation.id, player.id) == 0

        events = published(mock_publish)
        assert events[0][:2] == (f"user_{coach.id}", "messageRead")
        assert events[0][2]["readBy"] == player.id
        assert events[1] == (
            f"user_{player.id}",
            "unreadUpdate",
            {"chatId": conversation.id, "unreadCount": 0},
        )

    def test_non_participant_forbidden(self, client_for, outsider, conversation, coach, mock_publish):
        send(conversation, coach, "private")

        response = client_for(outsider).patch(
            READ_URL, {"conversationId": conversation.id}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Message.objects.filter(is_read=False).count() == 1
        mock_publish.assert_not_called()

    def test_missing_conversation_id_returns_400(self, player_client):
        response = player_client.patch(READ_URL, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
