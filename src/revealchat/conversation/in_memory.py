"""In-memory conversation store.

Simple dict-based storage for session-only chats.
Data is lost when the application exits.
"""

from .base import DEFAULT_LIST_LIMIT, ConversationStore
from .models import Conversation, ConversationSummary, Message


class InMemoryConversationStore(ConversationStore):
    """In-memory conversation store (session-only).

    Suitable for single-session use or testing.
    """

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    def _active(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None or not conversation.is_active:
            raise KeyError(f"Conversation not found: {conversation_id}")
        return conversation

    async def create_conversation(self, conversation: Conversation) -> Conversation:
        self._conversations[conversation.id] = conversation.model_copy(deep=True)
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation:
        return self._active(conversation_id).model_copy(deep=True)

    async def list_summaries(self, limit: int = DEFAULT_LIST_LIMIT) -> list[ConversationSummary]:
        active = [c for c in self._conversations.values() if c.is_active]
        active.sort(key=lambda c: c.updated_at, reverse=True)
        return [c.summary() for c in active[:limit]]

    async def rename_conversation(self, conversation_id: str, title: str) -> None:
        conversation = self._active(conversation_id)
        conversation.title = title
        conversation.touch()

    async def set_model(self, conversation_id: str, model: str) -> None:
        conversation = self._active(conversation_id)
        conversation.model = model
        conversation.touch()

    async def delete_conversation(self, conversation_id: str) -> None:
        conversation = self._active(conversation_id)
        conversation.is_active = False
        conversation.touch()

    async def append_message(self, conversation_id: str, message: Message) -> None:
        conversation = self._active(conversation_id)
        conversation.messages.append(message.model_copy(deep=True))
        conversation.touch()

    async def update_message(self, conversation_id: str, message: Message) -> None:
        conversation = self._active(conversation_id)
        index = conversation.index_of(message.id)
        conversation.messages[index] = message.model_copy(deep=True)
        conversation.touch()

    async def truncate_after(self, conversation_id: str, message_id: str) -> None:
        conversation = self._active(conversation_id)
        index = conversation.index_of(message_id)
        del conversation.messages[index + 1:]
        conversation.touch()

    async def remove_message(self, conversation_id: str, message_id: str) -> None:
        conversation = self._active(conversation_id)
        index = conversation.index_of(message_id)
        del conversation.messages[index]
        conversation.touch()

    @property
    def backend_type(self) -> str:
        return "memory"
