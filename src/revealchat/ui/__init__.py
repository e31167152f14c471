"""Terminal UI: a Textual chat app whose replies reveal themselves."""

from .app import RevealChatApp, run_textual_tui
from .formatting import render_message_renderable, to_renderable

__all__ = [
    "RevealChatApp",
    "render_message_renderable",
    "run_textual_tui",
    "to_renderable",
]
