"""Data models for conversations.

These models define messages and conversations independent of the storage
backend. Attributes are snake_case; dumping with ``by_alias=True`` gives the
camelCase wire names (``hasAnimated``, ``publicId``, ...).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_TITLE_LENGTH = 200
PREVIEW_LENGTH = 100


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """JSON-able dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class MessageImage(_WireModel):
    """Image attached to a message."""

    id: str = Field(default_factory=_new_id)
    url: str = Field(description="Remote URL or local file path")
    public_id: str | None = Field(default=None, description="Id assigned by the upload provider")
    filename: str | None = Field(default=None, description="Original file name")

    def to_api_dict(self) -> dict[str, Any]:
        """Dict for API requests: no id, unset optional fields omitted."""
        data: dict[str, Any] = {"url": self.url}
        if self.public_id is not None:
            data["publicId"] = self.public_id
        if self.filename is not None:
            data["filename"] = self.filename
        return data


class Message(_WireModel):
    """One turn in a conversation.

    ``has_animated`` only ever goes from False to True for a given id.
    Regenerated or edited replies are new message entries with their own
    reveal cycle.
    """

    id: str = Field(default_factory=_new_id)
    role: Role = Field(description="Who sent the message")
    content: str = Field(description="Full message text")
    images: list[MessageImage] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utc_now)
    has_animated: bool = Field(default=False, description="Reveal has run to completion")
    model_used: str | None = Field(default=None, description="Model that produced the reply")
    tokens_used: int | None = Field(default=None, description="Provider token usage for the reply")
    processing_time_ms: int | None = Field(default=None, description="Provider round trip time")

    @property
    def is_user(self) -> bool:
        return self.role == Role.USER

    @property
    def is_assistant(self) -> bool:
        return self.role == Role.ASSISTANT

    @property
    def has_images(self) -> bool:
        return bool(self.images)


class Conversation(_WireModel):
    """A titled, ordered list of messages."""

    id: str = Field(default_factory=_new_id)
    title: str = Field(default="New Chat", max_length=MAX_TITLE_LENGTH)
    model: str = Field(default="gpt-3.5-turbo", description="Selected model id")
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    is_active: bool = Field(default=True, description="False once soft-deleted")

    def find_message(self, message_id: str) -> Message | None:
        for message in self.messages:
            if message.id == message_id:
                return message
        return None

    def index_of(self, message_id: str) -> int:
        """Position of a message.

        Raises:
            KeyError: If no message has this id
        """
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                return index
        raise KeyError(f"Message not found: {message_id}")

    def touch(self) -> None:
        self.updated_at = utc_now()

    @property
    def last_message_preview(self) -> str:
        if not self.messages:
            return ""
        return self.messages[-1].content[:PREVIEW_LENGTH]

    @property
    def total_tokens_used(self) -> int:
        return sum(message.tokens_used or 0 for message in self.messages)

    @property
    def last_model_used(self) -> str | None:
        for message in reversed(self.messages):
            if message.model_used:
                return message.model_used
        return None

    def summary(self) -> "ConversationSummary":
        return ConversationSummary(
            id=self.id,
            title=self.title,
            model=self.model,
            last_message=self.last_message_preview,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ConversationSummary(_WireModel):
    """Listing entry for a conversation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    model: str
    last_message: str = ""
    created_at: datetime
    updated_at: datetime
