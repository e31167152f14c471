"""Rich presentation of rendered message sections.

Hides how each kind of RenderNode looks in a terminal. Used by the TUI
and by the CLI's ``render`` and ``reveal`` commands.
"""

import re

from rich import box
from rich.console import Group, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from ..rendering.models import ContentType, NoteKind, RenderNode
from ..rendering.renderer import render_message
from .themes import BLOCK_STYLES, CODE_THEME, NOTE_ICONS, NOTE_STYLES

_DETAILS_TAG = re.compile(r"</?(?:details|summary)>", re.IGNORECASE)


def render_text_styled(text: str, style: str = "") -> Text:
    """Plain text with long lines folded."""
    result = Text(text, overflow="fold")
    if style:
        result.stylize(style)
    return result


def _code(node: RenderNode) -> RenderableType:
    language = node.language or "text"
    return Panel(
        Syntax(node.text, language, theme=CODE_THEME, word_wrap=True, background_color="default"),
        title=node.language or "code",
        title_align="left",
        border_style=BLOCK_STYLES["code_border"],
        box=box.ROUNDED,
    )


def _table(node: RenderNode) -> RenderableType:
    table = Table(
        box=box.ROUNDED,
        border_style=BLOCK_STYLES["table_border"],
        header_style=BLOCK_STYLES["table_header"],
        show_lines=False,
    )
    for header in node.headers:
        table.add_column(header, overflow="fold")
    for row in node.table_rows:
        table.add_row(*row)
    return table


def _note(node: RenderNode) -> RenderableType:
    kind = node.note_kind or NoteKind.NOTE
    return Panel(
        render_text_styled(node.text),
        title=f"{NOTE_ICONS[kind]} {kind.value.title()}",
        title_align="left",
        border_style=NOTE_STYLES[kind],
        box=box.ROUNDED,
    )


def _checklist(node: RenderNode) -> RenderableType:
    lines = Text()
    for index, row in enumerate(node.rows):
        if index:
            lines.append("\n")
        if row.checked is None:
            lines.append(row.text)
        elif row.checked:
            lines.append("☑ ", style=BLOCK_STYLES["checked"])
            lines.append(row.text)
        else:
            lines.append("☐ ", style=BLOCK_STYLES["unchecked"])
            lines.append(row.text)
    return lines


def _labelled(node: RenderNode, label_style: str, separator: str) -> RenderableType:
    lines = Text()
    for index, row in enumerate(node.rows):
        if index:
            lines.append("\n")
        if row.label:
            lines.append(row.label, style=label_style)
            lines.append(separator)
        lines.append(row.text)
    return lines


def _qa(node: RenderNode) -> RenderableType:
    lines = Text()
    for index, row in enumerate(node.rows):
        if index:
            lines.append("\n")
        if row.marker == "question":
            lines.append(row.text, style=BLOCK_STYLES["question"])
        else:
            lines.append(row.text, style=BLOCK_STYLES["answer"])
    return lines


def _definitions(node: RenderNode) -> RenderableType:
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style=BLOCK_STYLES["term"], no_wrap=True)
    grid.add_column(overflow="fold")
    for row in node.rows:
        grid.add_row(row.label or "", row.text)
    return grid


def _steps(node: RenderNode) -> RenderableType:
    grid = Table.grid(padding=(0, 1))
    grid.add_column(style=BLOCK_STYLES["step_number"], justify="right", no_wrap=True)
    grid.add_column(overflow="fold")
    for row in node.rows:
        grid.add_row(f"{row.number}." if row.number is not None else "", row.text)
    return grid


def _timeline(node: RenderNode) -> RenderableType:
    lines = Text()
    for index, row in enumerate(node.rows):
        if index:
            lines.append("\n")
        lines.append("● ", style=BLOCK_STYLES["timeline_dot"])
        if row.label:
            lines.append(row.label, style=BLOCK_STYLES["timeline_label"])
            lines.append("  ")
        lines.append(row.text)
    return lines


def _collapsible(node: RenderNode) -> RenderableType:
    body = _DETAILS_TAG.sub("", node.text)
    if node.title:
        body = body.replace(node.title, "", 1)
    return Panel(
        render_text_styled(body.strip()),
        title=f"▸ {node.title or 'Details'}",
        title_align="left",
        border_style=BLOCK_STYLES["collapsible"],
        box=box.ROUNDED,
    )


def to_renderable(node: RenderNode) -> RenderableType:
    """Map a render node to a Rich renderable."""
    kind = node.type

    if kind == ContentType.CODE_BLOCK:
        return _code(node)
    if kind == ContentType.TABLE and node.is_table:
        return _table(node)
    if kind == ContentType.NOTE_BLOCK:
        return _note(node)
    if kind == ContentType.CHECKLIST:
        return _checklist(node)
    if kind == ContentType.DIALOGUE:
        return _labelled(node, BLOCK_STYLES["speaker"], ": ")
    if kind == ContentType.QA:
        return _qa(node)
    if kind == ContentType.DEFINITION_LIST:
        return _definitions(node)
    if kind == ContentType.STEP_BY_STEP:
        return _steps(node)
    if kind == ContentType.TIMELINE:
        return _timeline(node)
    if kind == ContentType.MATH_FORMULA:
        return Panel(Text(node.text, style=BLOCK_STYLES["formula"]), title="Formula", title_align="left", box=box.ROUNDED)
    if kind == ContentType.ASCII_CHART:
        return Text(node.text, no_wrap=True, overflow="crop")
    if kind == ContentType.HORIZONTAL_RULE:
        return Rule(style=BLOCK_STYLES["rule"])
    if kind == ContentType.COLLAPSIBLE:
        return _collapsible(node)
    return Markdown(node.text)


def render_message_renderable(text: str) -> Group:
    """Classify, render and lay out a whole (or partially revealed) message."""
    return Group(*(to_renderable(node) for node in render_message(text)))


def code_blocks(text: str) -> list[str]:
    """Full text of every code block in a message, for copying."""
    return [
        node.text
        for node in render_message(text)
        if node.type == ContentType.CODE_BLOCK
    ]
