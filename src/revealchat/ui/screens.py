"""Modal screens for the TUI.

This module hides the design decisions about:
- Conversation picker appearance and keyboard shortcuts
- Delete confirmation dialog layout
- Model picker layout

To change how dialogs look, modify only this file.
"""

from dataclasses import dataclass

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, OptionList, Static
from textual.widgets.option_list import Option

from ..conversation.models import ConversationSummary
from ..llm.catalog import AIModel
from .config import PICKER_PREVIEW_WIDTH, PICKER_TITLE_WIDTH

_DIALOG_CSS = """
    {screen} {{
        align: center middle;
        background: $background 70%;
    }}

    .dialog {{
        width: 80;
        height: auto;
        max-height: 30;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }}

    .dialog-title {{
        width: 100%;
        height: auto;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }}

    .dialog-hint {{
        width: 100%;
        height: auto;
        color: $text-muted;
        text-align: center;
        margin-top: 1;
    }}

    .dialog OptionList {{
        height: auto;
        max-height: 20;
    }}
"""


@dataclass(frozen=True)
class PickerResult:
    """What the user chose in the conversation picker."""

    action: str  # "open" or "delete"
    conversation_id: str


def _clip(text: str, width: int) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 1] + "…"


class ConfirmDeleteScreen(ModalScreen[bool]):
    """Asks before a conversation is deleted."""

    CSS = _DIALOG_CSS.format(screen="ConfirmDeleteScreen") + """
    #delete-prompt {
        width: 100%;
        height: auto;
        text-align: center;
        padding: 1 2;
        background: $panel;
        border: round $border;
        margin-bottom: 1;
    }

    #delete-buttons {
        width: 100%;
        height: 3;
        align: center middle;
    }

    #delete-buttons Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("y", "confirm_yes", "Yes", show=False),
        Binding("n", "confirm_no", "No", show=False),
        Binding("escape", "confirm_no", "Cancel", show=False),
    ]

    def __init__(self, title: str) -> None:
        super().__init__()
        self._title = title

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Delete Conversation", classes="dialog-title")
            yield Static(f"Delete '{self._title}'? This cannot be undone.", id="delete-prompt", markup=False)
            with Horizontal(id="delete-buttons"):
                yield Button("Yes", id="btn-yes", variant="error")
                yield Button("No", id="btn-no", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-yes")

    def action_confirm_yes(self) -> None:
        self.dismiss(True)

    def action_confirm_no(self) -> None:
        self.dismiss(False)


class ConversationPickerScreen(ModalScreen[PickerResult | None]):
    """Lists saved conversations, newest first.

    Enter opens the highlighted conversation, ``d`` asks to delete it.
    """

    CSS = _DIALOG_CSS.format(screen="ConversationPickerScreen")

    BINDINGS = [
        Binding("d", "delete", "Delete", show=False),
        Binding("escape", "close", "Close", show=False),
    ]

    def __init__(self, summaries: list[ConversationSummary]) -> None:
        super().__init__()
        self._summaries = {summary.id: summary for summary in summaries}

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Conversations", classes="dialog-title")
            if self._summaries:
                yield OptionList(
                    *(
                        Option(Text(self._label(summary)), id=summary.id)
                        for summary in self._summaries.values()
                    ),
                    id="conversation-list",
                )
            else:
                yield Static("No saved conversations yet.", classes="dialog-hint")
            yield Static("enter open · d delete · esc close", classes="dialog-hint")

    @staticmethod
    def _label(summary: ConversationSummary) -> str:
        updated = summary.updated_at.astimezone().strftime("%Y-%m-%d %H:%M")
        title = _clip(summary.title, PICKER_TITLE_WIDTH)
        preview = _clip(summary.last_message, PICKER_PREVIEW_WIDTH)
        label = f"{title}  ({summary.model}, {updated})"
        return f"{label}\n  {preview}" if preview else label

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.dismiss(PickerResult("open", event.option.id))

    def action_delete(self) -> None:
        if not self._summaries:
            return
        option_list = self.query_one("#conversation-list", OptionList)
        if option_list.highlighted is None:
            return
        conversation_id = option_list.get_option_at_index(option_list.highlighted).id
        summary = self._summaries[conversation_id]

        def confirmed(yes: bool | None) -> None:
            if yes:
                self.dismiss(PickerResult("delete", conversation_id))

        self.app.push_screen(ConfirmDeleteScreen(summary.title), confirmed)

    def action_close(self) -> None:
        self.dismiss(None)


class ModelPickerScreen(ModalScreen[str | None]):
    """Lets the user pick the model for the following turns."""

    CSS = _DIALOG_CSS.format(screen="ModelPickerScreen")

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
    ]

    def __init__(self, models: list[AIModel], selected: str) -> None:
        super().__init__()
        self._models = models
        self._selected = selected

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Model", classes="dialog-title")
            yield OptionList(
                *(
                    Option(
                        Text(f"{'● ' if model.id == self._selected else '  '}{model.name}  {model.description}"),
                        id=model.id,
                    )
                    for model in self._models
                ),
                id="model-list",
            )

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.dismiss(event.option.id)

    def action_close(self) -> None:
        self.dismiss(None)
