from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a chat message sent to a provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")
    image_urls: list[str] = Field(
        default_factory=list,
        description="Image URLs or data URLs attached to a user message"
    )

    @property
    def has_images(self) -> bool:
        return bool(self.image_urls)


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )

    @property
    def total_tokens(self) -> int | None:
        if not self.usage:
            return None
        return self.usage.get("total_tokens")
