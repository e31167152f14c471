"""Animation-state tracker.

Hides how the "already revealed" flag of each message is read, flipped and
persisted. The flag lives on the Message objects of the active conversation;
the tracker flips it in memory right away and writes it to the store later,
in a background flush, never once per revealed token.
"""

import asyncio
from typing import Any

from .base import ConversationStore
from .models import Conversation, Message


class AnimationTracker:
    """Tracks which messages of a conversation have finished their reveal.

    Usage:
        tracker = AnimationTracker(conversation, store)
        if tracker.needs_reveal(message):
            session = RevealSession(..., on_complete=tracker.mark_animated)
    """

    def __init__(self, conversation: Conversation, store: ConversationStore | None = None) -> None:
        self.conversation = conversation
        self._store = store
        self._dirty: set[str] = set()
        self._flush_task: asyncio.Task[None] | None = None
        self._debug_callback: Any = None

    def set_debug_callback(self, callback: Any) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        """Send debug message if callback is set."""
        if self._debug_callback:
            self._debug_callback(level, component, message)

    @property
    def pending(self) -> frozenset[str]:
        """Ids flipped in memory but not yet persisted."""
        return frozenset(self._dirty)

    def is_animated(self, message_id: str) -> bool:
        message = self.conversation.find_message(message_id)
        return message is not None and message.has_animated

    def needs_reveal(self, message: Message) -> bool:
        """Only assistant messages that never finished a reveal get one."""
        return message.is_assistant and not message.has_animated

    def mark_animated(self, message_id: str) -> None:
        """Flip the flag for a message; repeated calls do nothing.

        Persistence happens in a background flush when an event loop is
        running, otherwise on the next explicit ``flush()``.
        """
        message = self.conversation.find_message(message_id)
        if message is None:
            self._debug("warning", "Tracker", f"Unknown message id: {message_id}")
            return
        if message.has_animated:
            return

        message.has_animated = True
        self._debug("debug", "Tracker", f"Marked {message_id} as animated")
        if self._store is not None:
            self._dirty.add(message_id)
            self._schedule_flush()

    def force_all_animated(self) -> None:
        """Mark every message as animated without persisting.

        Used when a conversation is loaded from storage: history never
        re-animates, whatever the stored flags say.
        """
        for message in self.conversation.messages:
            message.has_animated = True

    def _schedule_flush(self) -> None:
        if self._flush_task is not None and not self._flush_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._flush_task = loop.create_task(self._background_flush())

    async def _background_flush(self) -> None:
        try:
            await self.flush()
        except (KeyError, RuntimeError) as e:
            self._debug("error", "Tracker", f"Failed to persist animation state: {e}")

    async def flush(self) -> None:
        """Persist every pending flag through the store.

        Raises:
            KeyError: If the conversation or a message is not in the store
            RuntimeError: If the store is not connected
        """
        if self._store is None:
            self._dirty.clear()
            return

        while self._dirty:
            message_id = next(iter(self._dirty))
            message = self.conversation.find_message(message_id)
            if message is not None:
                await self._store.update_message(self.conversation.id, message)
            self._dirty.discard(message_id)
        self._debug("debug", "Tracker", "Animation state persisted")
