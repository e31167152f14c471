"""Model catalog and request shaping.

Hides which models are offered, which one answers image turns, how many
output tokens each may produce, and the prompts sent alongside the
conversation.
"""

from pydantic import BaseModel, ConfigDict, Field

from .models import ChatMessage

VISION_MODEL = "gpt-4o"
DEFAULT_OUTPUT_TOKENS = 4096

# Output ceilings per model; the catalog's max_tokens is the context size
_OUTPUT_TOKENS = {
    "gpt-4": 8192,
    "gpt-4o": 16384,
    "gpt-4-turbo": 4096,
    "gpt-3.5-turbo": 16384,
}

# Requests containing these words are left without an output ceiling
_LARGE_REQUEST_WORDS = ("create", "generate", "build", "write", "develop")
LARGE_REQUEST_CHARS = 500

SYSTEM_PROMPT = """You are a helpful and comprehensive AI assistant. Provide detailed, well-structured and informative responses that thoroughly address the user's questions or requests.

Guidelines for your responses:
- Be comprehensive and detailed in your explanations
- Use clear structure with numbered steps, tables, notes and checklists when appropriate
- Provide examples, context and background information when relevant
- Break down complex topics into digestible sections
- Use plain text formatting without markdown symbols for headers and important points
- For image analysis, be thorough in your descriptions"""

TITLE_PROMPT = (
    "Generate a concise, descriptive title (max 5 words) for a chat conversation "
    "based on the user's first message. Only return the title, nothing else. "
    "Make it specific and informative."
)
TITLE_MAX_TOKENS = 20
TITLE_FALLBACK_LENGTH = 50


class AIModel(BaseModel):
    """A model the user can pick."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider model id")
    name: str = Field(description="Display name")
    description: str = Field(default="")
    max_tokens: int = Field(description="Context window size")
    cost_per_1k_tokens: float = Field(default=0.0)
    is_default: bool = Field(default=False)


DEFAULT_MODELS: list[AIModel] = [
    AIModel(
        id="gpt-3.5-turbo",
        name="GPT-3.5 Turbo",
        description="Fast and efficient for most conversations",
        max_tokens=16384,
        cost_per_1k_tokens=0.002,
        is_default=True,
    ),
    AIModel(
        id="gpt-4",
        name="GPT-4",
        description="More capable but slower, best for complex tasks",
        max_tokens=8192,
        cost_per_1k_tokens=0.03,
    ),
    AIModel(
        id="gpt-4o",
        name="GPT-4o",
        description="Multimodal model with vision and text capabilities",
        max_tokens=16384,
        cost_per_1k_tokens=0.03,
    ),
    AIModel(
        id="gpt-4-turbo",
        name="GPT-4 Turbo",
        description="Latest GPT-4 model with improved performance",
        max_tokens=128000,
        cost_per_1k_tokens=0.01,
    ),
]


def get_model(model_id: str) -> AIModel | None:
    for model in DEFAULT_MODELS:
        if model.id == model_id:
            return model
    return None


def default_model() -> AIModel:
    for model in DEFAULT_MODELS:
        if model.is_default:
            return model
    return DEFAULT_MODELS[0]


def route_model(model_id: str, has_images: bool) -> str:
    """Model that should answer a turn; image turns go to the vision model."""
    return VISION_MODEL if has_images else model_id


def is_large_request(messages: list[ChatMessage]) -> bool:
    """Long prompts and generation requests get no output ceiling."""
    for message in messages:
        lower = message.content.lower()
        if len(message.content) > LARGE_REQUEST_CHARS:
            return True
        if any(word in lower for word in _LARGE_REQUEST_WORDS):
            return True
    return False


def output_token_limit(model_id: str, messages: list[ChatMessage]) -> int | None:
    """Output ceiling for a request, or None to let the model decide."""
    if is_large_request(messages):
        return None
    return _OUTPUT_TOKENS.get(model_id, DEFAULT_OUTPUT_TOKENS)


def with_system_prompt(messages: list[ChatMessage]) -> list[ChatMessage]:
    return [ChatMessage(role="system", content=SYSTEM_PROMPT), *messages]


def fallback_title(content: str) -> str:
    """First 50 characters of the message, with an ellipsis when cut."""
    text = content.strip()
    if len(text) > TITLE_FALLBACK_LENGTH:
        return text[:TITLE_FALLBACK_LENGTH] + "..."
    return text or "New Chat"
