"""
Factory Boy factories for chat models.

Provides test data for:
- Conversation: coach/scout to player thread (unlocked, as created by the
  coach side)
- Message: text message whose receiver is the conversation's other side

Usage:
    from chat.tests.factories import ConversationFactory, MessageFactory

    conversation = ConversationFactory(coach=coach, player=player)
    locked = ConversationFactory(is_unlocked=False)

    # Defaults to a message from the coach slot
    message = MessageFactory(conversation=conversation)
    reply = MessageFactory(conversation=conversation, sender=player)

Note:
    MessageFactory writes the row only. Use MessageService.send_message when
    the conversation snapshot and reply flags must follow.
"""

import factory

from authentication.tests.factories import CoachFactory, PlayerFactory
from chat.models import Conversation, Message, MessageType


class ConversationFactory(factory.django.DjangoModelFactory):
    """
    Factory for Conversation model.

    Examples:
        conversation = ConversationFactory()
        scout_thread = ConversationFactory(coach=ScoutFactory())
    """

    class Meta:
        model = Conversation
        skip_postgeneration_save = True

    coach = factory.SubFactory(CoachFactory)
    coach_role = factory.LazyAttribute(lambda o: o.coach.role)
    player = factory.SubFactory(PlayerFactory)
    initiated_by = factory.SelfAttribute("coach")
    initiated_by_role = factory.LazyAttribute(lambda o: o.initiated_by.role)
    is_unlocked = True


class MessageFactory(factory.django.DjangoModelFactory):
    """Factory for Message model."""

    class Meta:
        model = Message

    conversation = factory.SubFactory(ConversationFactory)
    sender = factory.SelfAttribute("conversation.coach")
    sender_role = factory.LazyAttribute(lambda o: o.conversation.role_of(o.sender.id))
    receiver = factory.LazyAttribute(
        lambda o: (
            o.conversation.player
            if o.sender.id == o.conversation.coach_id
            else o.conversation.coach
        )
    )
    message_type = MessageType.TEXT
    text = factory.Faker("sentence", nb_words=6)
    is_read = False
