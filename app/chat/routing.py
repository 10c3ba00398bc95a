"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/ - One connection per device; conversations are named per frame

Authentication:
    JWT access token as ?token=<jwt> or subprotocols ["jwt", <jwt>].
    JWTAuthMiddleware validates it and attaches the user to the scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/chat/", consumers.ChatConsumer.as_asgi()),
]
