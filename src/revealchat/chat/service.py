"""Chat service: sends turns to the model and keeps the conversation.

Hides how the conversation store, the LLM provider and the animation
tracker cooperate for send, regenerate and edit. Assistant messages
returned by this service are fresh (``has_animated`` False) and are the
only ones eligible for a reveal; conversations loaded from storage never
re-animate.
"""

import time
from typing import Any

from ..conversation.base import DEFAULT_LIST_LIMIT, ConversationStore
from ..conversation.models import (
    MAX_TITLE_LENGTH,
    Conversation,
    ConversationSummary,
    Message,
    MessageImage,
    Role,
)
from ..conversation.tracker import AnimationTracker
from ..llm.base import LLMProvider
from ..llm.catalog import (
    TITLE_MAX_TOKENS,
    TITLE_PROMPT,
    VISION_MODEL,
    default_model,
    fallback_title,
    get_model,
    output_token_limit,
    route_model,
    with_system_prompt,
)
from ..llm.models import ChatMessage


class ChatError(RuntimeError):
    """A turn could not be completed; no assistant message was created."""


class ChatService:
    """Orchestrates one active conversation.

    Usage:
        service = ChatService(store, llm)
        reply = await service.send_message("Hello")
        ...
        service.mark_animated(reply.id)
    """

    def __init__(
        self,
        store: ConversationStore,
        llm: LLMProvider,
        default_model_id: str | None = None,
        temperature: float = 0.7,
    ) -> None:
        self._store = store
        self._llm = llm
        self._temperature = temperature
        self.selected_model = default_model_id or default_model().id
        self.conversation: Conversation | None = None
        self.tracker: AnimationTracker | None = None
        self._debug_callback: Any = None

    def set_debug_callback(self, callback: Any) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback
        if self.tracker is not None:
            self.tracker.set_debug_callback(callback)

    def _debug(self, level: str, component: str, message: str) -> None:
        """Send debug message if callback is set."""
        if self._debug_callback:
            self._debug_callback(level, component, message)

    def _attach(self, conversation: Conversation) -> None:
        self.conversation = conversation
        self.tracker = AnimationTracker(conversation, self._store)
        self.tracker.set_debug_callback(self._debug_callback)

    @property
    def messages(self) -> list[Message]:
        return self.conversation.messages if self.conversation else []

    # Conversation management

    def new_conversation(self) -> None:
        """Start an empty chat; it is stored on the first send."""
        self.conversation = None
        self.tracker = None

    async def load_conversation(self, conversation_id: str) -> Conversation:
        """Load a stored conversation and mark all of it as animated.

        Raises:
            KeyError: If the conversation does not exist or was deleted
        """
        conversation = await self._store.get_conversation(conversation_id)
        self._attach(conversation)
        self.tracker.force_all_animated()
        if get_model(conversation.model) is not None:
            self.selected_model = conversation.model
        self._debug("info", "Chat", f"Loaded conversation {conversation_id} ({len(conversation.messages)} messages)")
        return conversation

    async def list_conversations(self, limit: int = DEFAULT_LIST_LIMIT) -> list[ConversationSummary]:
        return await self._store.list_summaries(limit)

    async def rename(self, conversation_id: str, title: str) -> str:
        """Rename a conversation.

        Raises:
            ValueError: If the title is blank
            KeyError: If the conversation does not exist
        """
        clean = title.strip()
        if not clean:
            raise ValueError("Title cannot be empty")
        clean = clean[:MAX_TITLE_LENGTH]
        await self._store.rename_conversation(conversation_id, clean)
        if self.conversation is not None and self.conversation.id == conversation_id:
            self.conversation.title = clean
        return clean

    async def delete(self, conversation_id: str) -> None:
        """Soft-delete a conversation; clears it if it is the active one."""
        await self._store.delete_conversation(conversation_id)
        if self.conversation is not None and self.conversation.id == conversation_id:
            self.new_conversation()

    async def select_model(self, model_id: str) -> bool:
        """Switch the model for the following turns.

        Returns:
            False when the model is not in the catalog (nothing changes)
        """
        if get_model(model_id) is None:
            self._debug("warning", "Chat", f"Ignoring unknown model: {model_id}")
            return False
        self.selected_model = model_id
        if self.conversation is not None:
            self.conversation.model = model_id
            await self._store.set_model(self.conversation.id, model_id)
        return True

    # Turns

    async def generate_title(self, content: str) -> str:
        """Short title for a new chat, falling back to the message start."""
        try:
            response = await self._llm.chat_completion(
                [
                    ChatMessage(role="system", content=TITLE_PROMPT),
                    ChatMessage(role="user", content=content),
                ],
                model=self.selected_model,
                temperature=self._temperature,
                max_tokens=TITLE_MAX_TOKENS,
            )
        except Exception as e:
            self._debug("warning", "Chat", f"Title generation failed: {e}")
            return fallback_title(content)

        title = response.content.strip().strip('"').strip()
        return title[:MAX_TITLE_LENGTH] if title else fallback_title(content)

    async def send_message(
        self,
        content: str,
        images: list[MessageImage] | None = None,
    ) -> Message | None:
        """Send a user turn and return the assistant reply.

        Returns:
            The new assistant message, or None when there is nothing to send

        Raises:
            ChatError: If the provider fails; the user message is kept
        """
        if not content.strip() and not images:
            return None

        text = content if content.strip() else "Image"
        if self.conversation is None:
            title = await self.generate_title(text)
            conversation = Conversation(title=title, model=self.selected_model)
            await self._store.create_conversation(conversation)
            self._attach(conversation)
            self._debug("info", "Chat", f"Created conversation '{title}'")

        user_message = Message(role=Role.USER, content=text, images=list(images or []))
        self.conversation.messages.append(user_message)
        await self._store.append_message(self.conversation.id, user_message)
        return await self._complete()

    async def regenerate_last(self, model: str | None = None) -> Message:
        """Replace the last assistant reply with a new one.

        Args:
            model: Model for this one request; the selected model is kept

        Raises:
            ChatError: If there is no user message to answer or the provider fails
        """
        if self.conversation is None or not self.conversation.messages:
            raise ChatError("No messages to regenerate")

        last = self.conversation.messages[-1]
        if not any(m.is_user for m in self.conversation.messages):
            raise ChatError("No messages to regenerate")

        if last.is_assistant:
            self.conversation.messages.pop()
            await self._store.remove_message(self.conversation.id, last.id)

        override = model if model and get_model(model) is not None else None
        return await self._complete(override)

    async def edit_and_resend(self, message_id: str, new_content: str) -> Message:
        """Edit a user message, drop everything after it and ask again.

        The edited message keeps its id.

        Raises:
            KeyError: If the message does not exist
            ValueError: If it is not a user message or the new content is blank
            ChatError: If the provider fails
        """
        if self.conversation is None:
            raise KeyError(f"Message not found: {message_id}")
        if not new_content.strip():
            raise ValueError("Message cannot be empty")

        index = self.conversation.index_of(message_id)
        original = self.conversation.messages[index]
        if not original.is_user:
            raise ValueError("Only user messages can be edited")

        edited = original.model_copy(update={"content": new_content})
        del self.conversation.messages[index:]
        self.conversation.messages.append(edited)
        await self._store.truncate_after(self.conversation.id, message_id)
        await self._store.update_message(self.conversation.id, edited)
        return await self._complete()

    async def _complete(self, model_override: str | None = None) -> Message:
        """Ask the provider to answer the conversation so far."""
        history = self.conversation.messages
        last_user = next((m for m in reversed(history) if m.is_user), None)
        model = route_model(
            model_override or self.selected_model,
            last_user is not None and last_user.has_images,
        )

        chat_messages = [
            ChatMessage(
                role=m.role.value,
                content=m.content,
                image_urls=[image.url for image in m.images] if model == VISION_MODEL else [],
            )
            for m in history
        ]
        max_tokens = output_token_limit(model, chat_messages)
        self._debug("info", "LLM", f"Requesting completion from {model} ({len(chat_messages)} messages)")

        started = time.perf_counter()
        try:
            response = await self._llm.chat_completion(
                with_system_prompt(chat_messages),
                model=model,
                temperature=self._temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            self._debug("error", "LLM", f"Completion failed: {e}")
            raise ChatError(f"Failed to get a response: {e}") from e
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        reply = Message(
            role=Role.ASSISTANT,
            content=response.content,
            model_used=response.model,
            tokens_used=response.total_tokens,
            processing_time_ms=elapsed_ms,
        )
        self.conversation.messages.append(reply)
        await self._store.append_message(self.conversation.id, reply)
        self._debug("info", "LLM", f"Response received ({len(reply.content)} chars, {elapsed_ms} ms)")
        return reply

    # Animation state

    def needs_reveal(self, message: Message) -> bool:
        return self.tracker is not None and self.tracker.needs_reveal(message)

    def mark_animated(self, message_id: str) -> None:
        if self.tracker is not None:
            self.tracker.mark_animated(message_id)

    async def flush(self) -> None:
        """Persist pending animation flags."""
        if self.tracker is not None:
            await self.tracker.flush()
