"""Section renderer: maps classified sections to presentation nodes.

Hides the per-type prefix stripping and table parsing rules. Rendering is
pure: the same section always yields the same node, and nothing here
touches storage or the network.
"""

from . import predicates as p
from .classifier import classify
from .cleanup import remove_unwanted_markdown_symbols, strip_inline_emphasis
from .latex import clean_latex
from .models import ContentSection, ContentType, RenderNode, RenderRow


def _non_blank(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def _row_cells(line: str) -> list[str]:
    """Split a table line into trimmed cells, dropping the outer borders."""
    cells = [strip_inline_emphasis(cell) for cell in p.table_cells(line.strip())]
    if cells and not cells[0]:
        cells = cells[1:]
    while cells and not cells[-1]:
        cells.pop()
    return cells


def parse_table(text: str) -> tuple[list[str], list[list[str]]]:
    """Parse table text into headers and rows.

    The first non-separator line gives the headers. Separator lines and
    trailing summary sentences are skipped, and every row is padded or
    truncated to the header width.
    """
    headers: list[str] = []
    rows: list[list[str]] = []
    for line in _non_blank(text):
        if p.is_table_separator(line) or p.is_summary_line(line):
            continue
        if not headers:
            headers = _row_cells(line)
            continue
        cells = _row_cells(line)
        if not any(cells):
            continue
        width = len(headers)
        rows.append((cells + [""] * width)[:width])
    return headers, rows


def _render_table(section: ContentSection) -> RenderNode:
    headers, rows = parse_table(section.text)
    if not headers or not rows:
        return RenderNode(type=ContentType.PLAIN, text=section.text)
    return RenderNode(type=ContentType.TABLE, text=section.text, headers=headers, table_rows=rows)


def _qa_rows(text: str) -> list[RenderRow]:
    rows = []
    for line in _non_blank(text):
        marker = None
        if p.is_question_line(line):
            marker = "question"
        elif p.is_answer_line(line):
            marker = "answer"
        rows.append(RenderRow(text=line, marker=marker))
    return rows


def _checklist_rows(text: str) -> list[RenderRow]:
    rows = []
    for line in _non_blank(text):
        if p.is_checklist_line(line):
            checked, body = p.checklist_state(line)
            rows.append(RenderRow(text=body, checked=checked))
        else:
            rows.append(RenderRow(text=line))
    return rows


def _dialogue_rows(text: str) -> list[RenderRow]:
    rows = []
    for line in _non_blank(text):
        parts = p.split_dialogue(line)
        if parts is None:
            rows.append(RenderRow(text=line))
        else:
            rows.append(RenderRow(label=parts[0], text=parts[1]))
    return rows


def _definition_rows(text: str) -> list[RenderRow]:
    rows = []
    for line in _non_blank(text):
        if ":" in line:
            term, definition = p.split_definition(line)
            rows.append(RenderRow(label=strip_inline_emphasis(term), text=definition))
        else:
            rows.append(RenderRow(text=line))
    return rows


def _step_rows(text: str) -> list[RenderRow]:
    """Number steps sequentially, ignoring numbers in the source."""
    rows = []
    number = 0
    for line in _non_blank(text):
        if p.is_step_line(line):
            number += 1
            rows.append(RenderRow(text=p.strip_step_prefix(line), number=number))
        else:
            rows.append(RenderRow(text=line))
    return rows


def _timeline_rows(text: str) -> list[RenderRow]:
    rows = []
    for line in _non_blank(text):
        label, sep, rest = line.partition(":")
        if sep:
            rows.append(RenderRow(label=label.strip(), text=rest.strip()))
        else:
            rows.append(RenderRow(text=line))
    return rows


_ROW_BUILDERS = {
    ContentType.QA: _qa_rows,
    ContentType.CHECKLIST: _checklist_rows,
    ContentType.DIALOGUE: _dialogue_rows,
    ContentType.DEFINITION_LIST: _definition_rows,
    ContentType.STEP_BY_STEP: _step_rows,
    ContentType.TIMELINE: _timeline_rows,
}


def render(section: ContentSection) -> RenderNode:
    """Map one section to its presentation node.

    Args:
        section: Section produced by the classifier

    Returns:
        RenderNode describing what to draw
    """
    kind = section.type

    if kind == ContentType.TABLE:
        return _render_table(section)

    if kind == ContentType.CODE_BLOCK:
        return RenderNode(type=kind, text=section.text, language=section.language)

    if kind == ContentType.NOTE_BLOCK:
        return RenderNode(
            type=kind,
            text=p.strip_note_prefix(section.text),
            note_kind=section.note_kind,
        )

    if kind in _ROW_BUILDERS:
        return RenderNode(type=kind, text=section.text, rows=_ROW_BUILDERS[kind](section.text))

    if kind == ContentType.MATH_FORMULA:
        return RenderNode(type=kind, text=clean_latex(section.text))

    if kind == ContentType.COLLAPSIBLE:
        return RenderNode(type=kind, text=section.text, title=section.title)

    if kind == ContentType.PLAIN:
        return RenderNode(type=kind, text=remove_unwanted_markdown_symbols(section.text))

    # Ascii charts and horizontal rules pass through
    return RenderNode(type=kind, text=section.text)


def render_message(text: str) -> list[RenderNode]:
    """Classify and render a complete or partially revealed message."""
    return [render(section) for section in classify(text)]
