"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Conversation, Message model tests
- test_services.py: ConversationService and MessageService tests
- test_presence.py: PresenceRegistry tests
- test_events.py: Event payload builders and publishing
- test_middleware.py: WebSocket JWT authentication
- test_consumers.py: WebSocket gateway tests
- test_views.py: REST API endpoint tests
- test_tasks.py: Celery task tests

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
