"""Main Textual TUI application.

Orchestrates the UI components and the chat service: sends turns in a
background worker and lets each fresh reply reveal itself.
"""

import asyncio
import contextlib
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..chat.service import ChatError, ChatService
from ..conversation.base import ConversationStore
from ..conversation.models import Message as ConversationMessage, Role
from ..llm.base import LLMProvider
from ..llm.catalog import DEFAULT_MODELS, get_model
from ..streaming.models import RevealStatus
from ..streaming.scheduler import Scheduler
from .config import DEFAULT_REVEAL_SPEED, LogLevel
from .screens import ConversationPickerScreen, ModelPickerScreen, PickerResult
from .styles import APP_CSS
from .themes import REVEALCHAT_DARK
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    RevealingMessage,
    StatusBar,
)


class RevealChatApp(App):
    """Textual TUI for chatting with revealed replies."""

    CSS = APP_CSS
    TITLE = "RevealChat"
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+j", "send", "Send", show=False),
        Binding("ctrl+p", "toggle_reveal", "Pause/Resume"),
        Binding("escape", "stop_reveal", "Stop"),
        Binding("ctrl+r", "regenerate", "Regenerate"),
        Binding("ctrl+e", "edit_last", "Edit"),
        Binding("ctrl+n", "new_chat", "New Chat"),
        Binding("ctrl+o", "open_conversations", "History"),
        Binding("ctrl+t", "pick_model", "Model"),
        Binding("ctrl+y", "copy_last_response", "Copy Response"),
        Binding("ctrl+k", "copy_code", "Copy Code", show=False),
        Binding("ctrl+d", "toggle_debug", "Log"),
    ]

    def __init__(
        self,
        service: ChatService,
        speed: float = DEFAULT_REVEAL_SPEED,
        log_level: str | None = None,
        conversation_id: str | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__()
        self._service = service
        self._speed = speed
        self._scheduler = scheduler
        self._log_level = log_level
        self._initial_conversation = conversation_id
        self._editing_id: str | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield DebugPanel(id="debug-panel")
        with Vertical(id="bottom-bar"):
            yield StatusBar(id="status-bar")
            yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(REVEALCHAT_DARK)
        self.theme = "revealchat-dark"

        if self._log_level is not None:
            log_panel = self.query_one("#debug-panel", DebugPanel)
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        self._service.set_debug_callback(self._debug_callback)
        self.sub_title = self._service.selected_model
        self._refresh_status()

        if self._initial_conversation:
            self._load(self._initial_conversation)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _debug_callback(self, level: str, component: str, message: str) -> None:
        """Route debug messages to the log panel."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        if level == "debug":
            log_panel.debug(component, message)
        elif level == "info":
            log_panel.info(component, message)
        elif level == "warning":
            log_panel.warning(component, message)
        elif level == "error":
            log_panel.error(component, message)

    def _chat(self) -> ChatHistoryWidget:
        return self.query_one("#chat-history", ChatHistoryWidget)

    def _refresh_status(self, state: str | None = None) -> None:
        conversation = self._service.conversation
        self.query_one("#status-bar", StatusBar).update_status(
            model=self._service.selected_model,
            title=conversation.title if conversation else "New Chat",
            tokens=conversation.total_tokens_used if conversation else 0,
            state=state,
        )

    def _show_reply(self, reply: ConversationMessage) -> None:
        reveal = self._service.needs_reveal(reply)
        self._chat().add_assistant_message(
            reply,
            reveal=reveal,
            speed=self._speed,
            debug_callback=self._debug_callback,
            scheduler=self._scheduler,
        )
        self._refresh_status("revealing" if reveal else "ready")

    # Turns

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self._editing_id is not None:
            message_id, self._editing_id = self._editing_id, None
            self.query_one("#chat-input-bar", ChatInputBar).remove_class("-editing")
            self._edit(message_id, event.value)
        else:
            self._send(event.value)

    @work(exclusive=True, group="turn")
    async def _send(self, content: str) -> None:
        chat = self._chat()
        self._refresh_status("thinking")
        widget = chat.add_user_message(ConversationMessage(role=Role.USER, content=content))
        try:
            first_turn = self._service.conversation is None
            reply = await self._service.send_message(content)
            if first_turn and self._service.conversation is not None:
                self._chat().border_title = self._service.conversation.title
            if reply is not None:
                self._show_reply(reply)
            else:
                self._refresh_status("ready")
        except ChatError as e:
            self._refresh_status("ready")
            self.notify(str(e), severity="error", timeout=5)
        except asyncio.CancelledError:
            self._refresh_status("ready")
            self.notify("Request cancelled", severity="warning", timeout=2)
        finally:
            # Keep the stored id so the message can be edited later
            last_user = next((m for m in reversed(self._service.messages) if m.is_user), None)
            if last_user is not None:
                widget.message = last_user

    @work(exclusive=True, group="turn")
    async def _regenerate(self) -> None:
        chat = self._chat()
        messages = self._service.messages
        if messages and messages[-1].is_assistant:
            await chat.remove_messages_from(messages[-1].id)
        self._refresh_status("thinking")
        try:
            reply = await self._service.regenerate_last()
            self._show_reply(reply)
        except ChatError as e:
            self._refresh_status("ready")
            self.notify(str(e), severity="error", timeout=5)
        except asyncio.CancelledError:
            self._refresh_status("ready")

    @work(exclusive=True, group="turn")
    async def _edit(self, message_id: str, content: str) -> None:
        chat = self._chat()
        await chat.remove_messages_from(message_id)
        self._refresh_status("thinking")
        try:
            reply = await self._service.edit_and_resend(message_id, content)
        except (ChatError, KeyError, ValueError) as e:
            self.notify(f"Edit failed: {e}", severity="error", timeout=5)
            reply = None
        except asyncio.CancelledError:
            reply = None

        conversation = self._service.conversation
        edited = conversation.find_message(message_id) if conversation else None
        if edited is not None:
            chat.add_user_message(edited)
        if reply is not None:
            self._show_reply(reply)
        else:
            self._refresh_status("ready")

    @work(exclusive=True, group="history")
    async def _load(self, conversation_id: str) -> None:
        chat = self._chat()
        try:
            conversation = await self._service.load_conversation(conversation_id)
        except KeyError:
            self.notify("Conversation not found", severity="error", timeout=3)
            return
        await chat.clear_history()
        for message in conversation.messages:
            chat.add_message(message)
        chat.border_title = conversation.title
        self.sub_title = self._service.selected_model
        self._refresh_status("ready")

    @work(exclusive=True, group="history")
    async def _show_picker(self) -> None:
        summaries = await self._service.list_conversations()
        self.push_screen(ConversationPickerScreen(summaries), self._on_picked)

    def _on_picked(self, result: PickerResult | None) -> None:
        if result is None:
            return
        if result.action == "open":
            self._load(result.conversation_id)
        elif result.action == "delete":
            self._delete(result.conversation_id)

    @work(exclusive=True, group="history")
    async def _delete(self, conversation_id: str) -> None:
        current = self._service.conversation
        was_current = current is not None and current.id == conversation_id
        try:
            await self._service.delete(conversation_id)
        except KeyError:
            self.notify("Conversation not found", severity="error", timeout=3)
            return
        if was_current:
            await self._chat().clear_history()
            self._chat().border_title = "Chat"
        self._refresh_status()
        self.notify("Conversation deleted", timeout=2)

    @work(exclusive=True, group="history")
    async def _select_model(self, model_id: str) -> None:
        if await self._service.select_model(model_id):
            self.sub_title = model_id
            self._refresh_status()
            model = get_model(model_id)
            self.notify(f"Model: {model.name if model else model_id}", timeout=2)

    def on_revealing_message_finished(self, event: RevealingMessage.Finished) -> None:
        """Record completed reveals so the reply never animates again."""
        if event.status == RevealStatus.COMPLETED:
            self._service.mark_animated(event.message_id)
        active = self._chat().active_reveal()
        self._refresh_status("revealing" if active else "ready")

    # Actions

    def action_send(self) -> None:
        self.query_one("#chat-input-bar", ChatInputBar).submit()

    def action_toggle_reveal(self) -> None:
        """Pause or resume the newest running reveal."""
        reply = self._chat().active_reveal()
        if reply is None:
            return
        status = reply.toggle_pause()
        self._refresh_status("paused" if status == RevealStatus.PAUSED else "revealing")

    def action_stop_reveal(self) -> None:
        """Stop the newest reveal, or cancel a pending request."""
        if self._editing_id is not None:
            self._editing_id = None
            bar = self.query_one("#chat-input-bar", ChatInputBar)
            bar.remove_class("-editing")
            bar.set_text("")
            return
        reply = self._chat().active_reveal()
        if reply is not None:
            reply.stop()
            return
        for worker in self.workers:
            if worker.is_running:
                worker.cancel()

    def action_regenerate(self) -> None:
        if not self._service.messages:
            self.notify("Nothing to regenerate", severity="warning", timeout=2)
            return
        self._regenerate()

    def action_edit_last(self) -> None:
        """Put the last user message in the input for editing."""
        last_user = next((m for m in reversed(self._service.messages) if m.is_user), None)
        if last_user is None:
            self.notify("No message to edit", severity="warning", timeout=2)
            return
        self._editing_id = last_user.id
        bar = self.query_one("#chat-input-bar", ChatInputBar)
        bar.add_class("-editing")
        bar.set_text(last_user.content)

    async def action_new_chat(self) -> None:
        self._service.new_conversation()
        await self._chat().clear_history()
        self._chat().border_title = "Chat"
        self._refresh_status("ready")
        self.notify("New chat", timeout=2)

    def action_open_conversations(self) -> None:
        self._show_picker()

    def action_pick_model(self) -> None:
        self.push_screen(
            ModelPickerScreen(DEFAULT_MODELS, self._service.selected_model),
            lambda model_id: self._select_model(model_id) if model_id else None,
        )

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        response = self._chat().get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")

    def action_copy_code(self) -> None:
        """Copy the last code block of the last response."""
        reply = self._chat().last_reply()
        blocks = reply.code_blocks() if reply else []
        if blocks:
            self.copy_to_clipboard(blocks[-1])
            self.notify("Code copied")
        else:
            self.notify("No code to copy", severity="warning")

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)


async def run_textual_tui(
    store: ConversationStore,
    llm: LLMProvider,
    model: str | None = None,
    speed: float = DEFAULT_REVEAL_SPEED,
    log_level: str | None = None,
    conversation_id: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        store: Conversation store (connected here, disconnected on exit)
        llm: LLM provider instance
        model: Model for new turns; the catalog default when None
        speed: Reveal speed multiplier
        log_level: Log level for panel (debug/info/warning/error), None to hide
        conversation_id: Conversation to open on start
    """
    await store.connect()
    service = ChatService(store, llm, default_model_id=model)
    app = RevealChatApp(
        service,
        speed=speed,
        log_level=log_level,
        conversation_id=conversation_id,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(KeyError, RuntimeError):
            await service.flush()
        await store.disconnect()
        await llm.close()
