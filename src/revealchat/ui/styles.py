"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Dialog styles live with the screens in screens.py.
"""

APP_CSS = """
/* Chat on top, log panel and input bar below */
Screen {
    layout: grid;
    grid-size: 1 3;
    grid-rows: 1fr auto auto;
    background: $background;
}

#chat-history {
    height: 100%;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

/* Hidden until ctrl+d or --log-level */
#debug-panel {
    height: auto;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    padding: 0 1;
}

#bottom-bar {
    height: auto;
    background: $panel;
}

#status-bar {
    height: 1;
    padding: 0 2;
    background: $surface;
}

ChatInputBar {
    height: 5;
    border: round $primary 60%;

    &:focus-within {
        border: round $primary;
    }

    &.-editing {
        border: round $warning;
        border-title-color: $warning;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin-left: 1;
}

/* Messages */
.chat-message {
    height: auto;
    margin-bottom: 1;
    padding: 1 2;
}

.message-header {
    text-style: bold;
}

.message-footer {
    height: auto;
    color: $text-muted;
    text-style: italic;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
    }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
    }

    /* Reveal state of the reply */
    &.-revealing {
        border-left: tall $accent;
    }

    &.-paused {
        border-left: tall $warning;
    }
}

* {
    scrollbar-size: 1 1;
    scrollbar-color-hover: $primary 50%;
}
"""
