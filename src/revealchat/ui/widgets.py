"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Status line formatting
- Log rendering and scrolling
- Chat message rendering and the reveal animation of replies
"""

from datetime import datetime
from typing import Any

from rich.markup import escape
from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, RichLog, Static, TextArea

from ..conversation.models import Message as ConversationMessage
from ..streaming.models import RevealStatus
from ..streaming.scheduler import Scheduler
from ..streaming.session import RevealSession
from .config import (
    DEFAULT_REVEAL_SPEED,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    LogLevel,
)
from .formatting import code_blocks, render_message_renderable, render_text_styled


class ClickableMessage(Vertical):
    """A chat message container that copies its raw content when clicked."""

    def __init__(self, message: ConversationMessage, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.message = message

    def on_click(self, event: Click) -> None:
        event.stop()
        self.app.copy_to_clipboard(self.message.content)
        self.app.notify("Copied to clipboard", timeout=2)

    def _header(self, name: str, icon: str) -> Static:
        timestamp = self.message.timestamp.astimezone().strftime("%H:%M:%S")
        return Static(f"{icon} {name} [{timestamp}]", classes="message-header", markup=False)


class UserMessage(ClickableMessage):
    """A user turn, shown as plain text with its attached images listed."""

    def __init__(self, message: ConversationMessage, *args, **kwargs) -> None:
        super().__init__(message, *args, classes="chat-message user-message", **kwargs)

    def compose(self):
        yield self._header("You", ">")
        yield Static(render_text_styled(self.message.content), classes="message-content")
        if self.message.has_images:
            names = ", ".join(image.filename or image.url for image in self.message.images)
            yield Static(f"📎 {names}", classes="message-footer", markup=False)


class RevealingMessage(ClickableMessage):
    """An assistant reply that may reveal itself token by token.

    Owns at most one RevealSession, created only when the message still
    needs its first reveal. Every update re-renders the visible prefix
    through the section renderer. The session is disposed on unmount, so
    a reply removed mid-reveal is canceled and never marked as animated.
    """

    class Finished(Message):
        """Posted once when the reveal completes or is canceled."""

        def __init__(self, message_id: str, status: RevealStatus) -> None:
            super().__init__()
            self.message_id = message_id
            self.status = status

    def __init__(
        self,
        message: ConversationMessage,
        *args,
        reveal: bool = False,
        speed: float = DEFAULT_REVEAL_SPEED,
        debug_callback: Any = None,
        scheduler: Scheduler | None = None,
        **kwargs,
    ) -> None:
        super().__init__(message, *args, classes="chat-message assistant-message", **kwargs)
        self._reveal = reveal
        self._speed = speed
        self._scheduler = scheduler
        self._debug_callback = debug_callback
        self._user_stopped = False
        self._closing = False
        self.session: RevealSession | None = None

    def compose(self):
        yield self._header("Assistant", "<")
        yield Static(classes="message-content")
        yield Static(classes="message-footer")

    def on_mount(self) -> None:
        if not self._reveal:
            self._show_full()
            return

        self.session = RevealSession(
            self.message.id,
            self.message.content,
            scheduler=self._scheduler,
            on_update=self._on_reveal_update,
            on_complete=self._on_reveal_complete,
            on_cancel=self._on_reveal_cancel,
            speed=self._speed,
        )
        self.session.set_debug_callback(self._debug_callback)
        self.add_class("-revealing")
        self.session.start()

    def on_unmount(self) -> None:
        self._closing = True
        if self.session is not None:
            self.session.dispose()

    @property
    def is_revealing(self) -> bool:
        return self.session is not None and self.session.is_active

    def toggle_pause(self) -> RevealStatus | None:
        """Pause or resume the reveal; returns the new status."""
        if not self.is_revealing:
            return None
        self.session.toggle_pause()
        self.set_class(self.session.status == RevealStatus.PAUSED, "-paused")
        return self.session.status

    def stop(self) -> bool:
        """Cancel the reveal, leaving the revealed part on screen."""
        if not self.is_revealing:
            return False
        self._user_stopped = True
        self.session.stop()
        return True

    def code_blocks(self) -> list[str]:
        return code_blocks(self.message.content)

    def _content(self) -> Static:
        return self.query_one(".message-content", Static)

    def _show_full(self) -> None:
        self._content().update(render_message_renderable(self.message.content))
        self._show_footer()

    def _show_footer(self) -> None:
        parts = []
        if self.message.model_used:
            parts.append(self.message.model_used)
        if self.message.tokens_used:
            parts.append(f"{self.message.tokens_used} tokens")
        if self.message.processing_time_ms is not None:
            parts.append(f"{self.message.processing_time_ms / 1000:.1f}s")
        self.query_one(".message-footer", Static).update(Text(" · ".join(parts)))

    def _on_reveal_update(self, text: str) -> None:
        self._content().update(render_message_renderable(text))
        parent = self.parent
        if isinstance(parent, VerticalScroll):
            parent.scroll_end(animate=False)

    def _on_reveal_complete(self, message_id: str) -> None:
        self.remove_class("-revealing", "-paused")
        self._show_footer()
        self.post_message(self.Finished(message_id, RevealStatus.COMPLETED))

    def _on_reveal_cancel(self, message_id: str) -> None:
        self.remove_class("-revealing", "-paused")
        if self._closing:
            return
        if not self._user_stopped:
            # Rendering failed mid-reveal
            self._content().update(Text(self.message.content))
        self.post_message(self.Finished(message_id, RevealStatus.CANCELED))


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self.submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self.submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:  # Up
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:  # Down
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if value:
            if not self._history or self._history[-1] != value:
                self._history.append(value)
                del self._history[:-INPUT_HISTORY_MAX_SIZE]
            self._history_index = -1
            text_area.text = ""
            self.post_message(self.Submitted(value))

    def set_text(self, value: str) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.text = value
        text_area.move_cursor(text_area.document.end)
        text_area.focus()

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class StatusBar(Static):
    """One-line summary of the model, conversation and reveal state."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = ""
        self._title = "New Chat"
        self._tokens = 0
        self._state = "ready"

    def on_mount(self) -> None:
        self._update_display()

    def update_status(
        self,
        model: str | None = None,
        title: str | None = None,
        tokens: int | None = None,
        state: str | None = None,
    ) -> None:
        if model is not None:
            self._model = model
        if title is not None:
            self._title = title
        if tokens is not None:
            self._tokens = tokens
        if state is not None:
            self._state = state
        self._update_display()

    def _update_display(self) -> None:
        state_colors = {
            "ready": "green",
            "thinking": "yellow",
            "revealing": "cyan",
            "paused": "magenta",
        }
        color = state_colors.get(self._state, "white")
        text = Text()
        text.append("● ", style=color)
        text.append(self._state, style=f"bold {color}")
        text.append("  │  ", style="dim")
        text.append(self._title, style="bold")
        text.append("  │  ", style="dim")
        text.append(self._model or "-", style="magenta")
        text.append("  │  ", style="dim")
        text.append(f"{self._tokens} tokens", style="dim")
        self.update(text)

    def get_plain_text(self) -> str:
        return f"{self._state} | {self._title} | {self._model} | {self._tokens} tokens"


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log(
        self,
        component: str,
        message: str,
        level: int = LogLevel.DEBUG
    ) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (TUI, Chat, LLM, Reveal, Tracker, ...)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        component_colors = {
            "TUI": "cyan",
            "Chat": "green",
            "LLM": "magenta",
            "Reveal": "bright_blue",
            "Tracker": "bright_green",
            "Store": "yellow",
        }
        level_color = level_colors.get(level, "white")
        comp_color = component_colors.get(component, "white")
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}]\\[{component}][/] {escape(message)}"
        )

    def debug(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history of user turns and revealing replies."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "New conversation"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._message_count = 0

    def _mounted(self, widget: ClickableMessage) -> None:
        self._message_count += 1
        self.border_subtitle = f"{self._message_count} messages"
        self.mount(widget)
        self.scroll_end(animate=False)

    def add_user_message(self, message: ConversationMessage) -> UserMessage:
        widget = UserMessage(message)
        self._mounted(widget)
        return widget

    def add_assistant_message(
        self,
        message: ConversationMessage,
        reveal: bool = False,
        speed: float = DEFAULT_REVEAL_SPEED,
        debug_callback: Any = None,
        scheduler: Scheduler | None = None,
    ) -> RevealingMessage:
        widget = RevealingMessage(
            message,
            reveal=reveal,
            speed=speed,
            debug_callback=debug_callback,
            scheduler=scheduler,
        )
        self._mounted(widget)
        return widget

    def add_message(self, message: ConversationMessage) -> ClickableMessage:
        """Add a stored message without animation."""
        if message.is_assistant:
            return self.add_assistant_message(message)
        return self.add_user_message(message)

    def last_reply(self) -> RevealingMessage | None:
        replies = self.query(RevealingMessage)
        return replies.last() if replies else None

    def active_reveal(self) -> RevealingMessage | None:
        for reply in reversed(list(self.query(RevealingMessage))):
            if reply.is_revealing:
                return reply
        return None

    def get_last_response(self) -> str | None:
        reply = self.last_reply()
        return reply.message.content if reply else None

    async def remove_messages_from(self, message_id: str) -> None:
        """Remove the message with this id and everything after it."""
        widgets = list(self.query(ClickableMessage))
        for index, widget in enumerate(widgets):
            if widget.message.id == message_id:
                doomed = widgets[index:]
                self._message_count -= len(doomed)
                self.border_subtitle = f"{self._message_count} messages"
                await self.remove_children(doomed)
                return

    async def clear_history(self) -> None:
        self._message_count = 0
        await self.remove_children()
        self.border_subtitle = "New conversation"
