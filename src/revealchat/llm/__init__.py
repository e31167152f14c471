from .base import LLMProvider
from .catalog import DEFAULT_MODELS, AIModel, default_model, get_model
from .factory import create_llm_provider
from .models import ChatMessage, LLMResponse
from .providers import EchoProvider, OpenAIProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "ChatMessage",
    "LLMResponse",
    "AIModel",
    "DEFAULT_MODELS",
    "default_model",
    "get_model",
    "EchoProvider",
    "OpenAIProvider",
]
