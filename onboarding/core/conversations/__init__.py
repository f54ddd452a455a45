from onboarding.core.conversations.controller import Conversation, ConversationController
from onboarding.core.conversations.models import ConversationAttributes, ConversationType

__all__ = ["Conversation", "ConversationController", "ConversationAttributes", "ConversationType"]
