"""Abstract base class for conversation stores.

This module defines the interface for conversation persistence.
The abstraction hides:
- Storage format (rows, JSON columns, in-memory objects)
- Persistence mechanism (file, database, in-memory)
- Connection management

Stores return copies: mutating a returned conversation does not change
what is stored until it is written back through the store.
"""

from abc import ABC, abstractmethod

from .models import Conversation, ConversationSummary, Message

DEFAULT_LIST_LIMIT = 50


class ConversationStore(ABC):
    """Abstract conversation store.

    Missing or soft-deleted conversations raise KeyError.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def create_conversation(self, conversation: Conversation) -> Conversation:
        """Persist a new conversation with its messages."""

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Conversation:
        """Fetch an active conversation with all messages in order."""

    @abstractmethod
    async def list_summaries(self, limit: int = DEFAULT_LIST_LIMIT) -> list[ConversationSummary]:
        """List active conversations, most recently updated first."""

    @abstractmethod
    async def rename_conversation(self, conversation_id: str, title: str) -> None:
        """Change a conversation's title."""

    @abstractmethod
    async def set_model(self, conversation_id: str, model: str) -> None:
        """Change the model a conversation uses."""

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> None:
        """Soft-delete a conversation."""

    @abstractmethod
    async def append_message(self, conversation_id: str, message: Message) -> None:
        """Add a message at the end of a conversation."""

    @abstractmethod
    async def update_message(self, conversation_id: str, message: Message) -> None:
        """Overwrite a stored message with the same id."""

    @abstractmethod
    async def truncate_after(self, conversation_id: str, message_id: str) -> None:
        """Remove every message after the given one."""

    @abstractmethod
    async def remove_message(self, conversation_id: str, message_id: str) -> None:
        """Remove one message."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "ConversationStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.disconnect()
