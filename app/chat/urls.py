"""
URL configuration for chat API.

URL Structure:
    Conversations:
        /conversations/start/                    POST
        /conversations/                          GET, DELETE

    Messages:
        /messages/send/                          POST
        /messages/read/                          PATCH
        /messages/{id}/                          GET (conversation id), DELETE (message id)

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import path

from chat.views import (
    ConversationListView,
    MarkReadView,
    MessageView,
    SendMessageView,
    StartConversationView,
)

app_name = "chat"

urlpatterns = [
    path(
        "conversations/start/",
        StartConversationView.as_view(),
        name="conversation-start",
    ),
    path("conversations/", ConversationListView.as_view(), name="conversation-list"),
    path("messages/send/", SendMessageView.as_view(), name="message-send"),
    path("messages/read/", MarkReadView.as_view(), name="message-read"),
    path("messages/<int:pk>/", MessageView.as_view(), name="message-detail"),
]
