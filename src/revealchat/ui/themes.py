"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)
- Colors of the typed message blocks (notes, checklists, steps)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

from ..rendering.models import NoteKind

# Catppuccin Mocha palette
ROSEWATER = "#f5e0dc"
MAUVE = "#cba6f7"
RED = "#f38ba8"
PEACH = "#fab387"
YELLOW = "#f9e2af"
GREEN = "#a6e3a1"
TEAL = "#94e2d5"
SKY = "#89dceb"
BLUE = "#89b4fa"
LAVENDER = "#b4befe"
TEXT = "#cdd6f4"
OVERLAY = "#6c7086"
SURFACE = "#313244"
BASE = "#1e1e2e"
MANTLE = "#181825"
CRUST = "#11111b"

REVEALCHAT_DARK = Theme(
    name="revealchat-dark",
    primary=BLUE,
    secondary=MAUVE,
    accent=YELLOW,
    foreground=TEXT,
    background=CRUST,
    success=GREEN,
    warning=PEACH,
    error=RED,
    surface=BASE,
    panel=MANTLE,
    dark=True,
    variables={
        "block-cursor-foreground": CRUST,
        "block-cursor-background": ROSEWATER,
        "block-cursor-text-style": "bold",
        "input-cursor-background": TEXT,
        "input-cursor-foreground": CRUST,
        "input-selection-background": f"{BLUE} 30%",
        "border": "#45475a",
        "border-blurred": SURFACE,
        "scrollbar": SURFACE,
        "scrollbar-hover": "#45475a",
        "scrollbar-active": BLUE,
        "scrollbar-background": MANTLE,
        "footer-foreground": "#bac2de",
        "footer-background": CRUST,
        "footer-key-foreground": YELLOW,
        "footer-key-background": SURFACE,
        "text-muted": OVERLAY,
    },
)

# Rich styles for rendered message blocks
NOTE_STYLES: dict[NoteKind, str] = {
    NoteKind.NOTE: BLUE,
    NoteKind.TIP: GREEN,
    NoteKind.WARNING: PEACH,
    NoteKind.IMPORTANT: RED,
}

NOTE_ICONS: dict[NoteKind, str] = {
    NoteKind.NOTE: "ℹ",
    NoteKind.TIP: "💡",
    NoteKind.WARNING: "⚠",
    NoteKind.IMPORTANT: "❗",
}

BLOCK_STYLES: dict[str, str] = {
    "code_border": SURFACE,
    "table_border": LAVENDER,
    "table_header": f"bold {BLUE}",
    "question": f"bold {SKY}",
    "answer": TEXT,
    "speaker": f"bold {MAUVE}",
    "term": f"bold {YELLOW}",
    "step_number": f"bold {TEAL}",
    "timeline_label": f"bold {PEACH}",
    "timeline_dot": PEACH,
    "checked": GREEN,
    "unchecked": RED,
    "formula": f"italic {LAVENDER}",
    "rule": OVERLAY,
    "collapsible": MAUVE,
    "cursor": BLUE,
}

CODE_THEME = "monokai"
