"""
Chat app for coach/scout to player messaging.

This app handles:
- Conversations between one coach or scout and one player
- Text, image and file messages with read state
- WebSocket real-time delivery, typing indicators and presence
- REST endpoints mirroring every real-time action

Related apps:
    - authentication: User model and JWT tokens
    - core: BaseModel, ServiceResult, exceptions

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import ConversationService, MessageService

    result = ConversationService.start_conversation(coach, player_id, "Hello")
    conversation = result.data.conversation

    MessageService.send_message(conversation, player, text="Hi back")
"""
