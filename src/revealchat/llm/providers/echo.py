from typing import Any

from ..base import LLMProvider
from ..catalog import TITLE_PROMPT
from ..models import ChatMessage, LLMResponse

_SAMPLES: dict[str, str] = {
    "table": (
        "Here is a comparison:\n\n"
        "| Feature | Status |\n"
        "| --- | --- |\n"
        "| Tables | Supported |\n"
        "| Notes | Supported |\n\n"
        "Overall, both render as structured blocks."
    ),
    "code": (
        "Here is an example:\n\n"
        "```python\n"
        "def greet(name):\n"
        "    return f\"Hello, {name}!\"\n"
        "```\n\n"
        "Note: Functions are first-class objects."
    ),
    "steps": (
        "1. Open the settings\n"
        "2. Choose a model\n"
        "3. Send your message"
    ),
    "checklist": (
        "✅ Connection configured\n"
        "✅ Model selected\n"
        "❌ API key verified"
    ),
}


class EchoProvider(LLMProvider):
    """Offline provider that answers without any network access.

    Replies echo the last user message. Messages mentioning ``table``,
    ``code``, ``steps`` or ``checklist`` get a canned structured reply so
    the renderer can be tried without an API key.

    Hidden design decisions:
    - Canned reply selection
    - Fake token accounting
    """

    def __init__(self, model: str = "gpt-3.5-turbo", fail_with: Exception | None = None):
        """Initialize echo provider.

        Args:
            model: Model name reported in responses
            fail_with: Exception raised by every completion (for testing)
        """
        self._model = model
        self._fail_with = fail_with
        self.calls: list[dict[str, Any]] = []

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        model_to_use = model or self._model
        self.calls.append({
            "messages": list(messages),
            "model": model_to_use,
            "max_tokens": max_tokens,
        })
        if self._fail_with is not None:
            raise self._fail_with

        user_messages = [m for m in messages if m.role == "user"]
        last = user_messages[-1] if user_messages else None
        prompt = last.content if last else ""

        if messages and messages[0].role == "system" and messages[0].content == TITLE_PROMPT:
            content = " ".join(prompt.split()[:5]).title()
        else:
            content = self._reply(prompt, bool(last and last.has_images))

        prompt_tokens = sum(len(m.content.split()) for m in messages)
        completion_tokens = len(content.split())
        return LLMResponse(
            content=content,
            model=model_to_use,
            usage={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
        )

    @staticmethod
    def _reply(prompt: str, has_images: bool) -> str:
        lower = prompt.lower()
        for keyword, sample in _SAMPLES.items():
            if keyword in lower:
                return sample
        if has_images:
            return "I received your image. Note: Image analysis needs a vision model."
        return f"You said: {prompt}"

    async def close(self) -> None:
        pass
