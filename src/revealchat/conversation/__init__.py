"""Conversation storage and per-message animation state."""

from .base import DEFAULT_LIST_LIMIT, ConversationStore
from .factory import create_conversation_store
from .in_memory import InMemoryConversationStore
from .models import Conversation, ConversationSummary, Message, MessageImage, Role
from .tracker import AnimationTracker

__all__ = [
    "DEFAULT_LIST_LIMIT",
    "AnimationTracker",
    "Conversation",
    "ConversationStore",
    "ConversationSummary",
    "InMemoryConversationStore",
    "Message",
    "MessageImage",
    "Role",
    "create_conversation_store",
]
