"""Content classifier: partitions message text into typed sections.

Hidden design decisions:
- Line predicates and their priority order
- How continuation lines and blank lines are attached to a section
- Table termination heuristics
- Verbatim handling of fenced code

The scan is a single left-to-right pass over the lines, so it stays cheap
enough to re-run on every revealed prefix of a message.
"""

from collections.abc import Callable

from . import predicates as p
from .cleanup import clean_excessive_symbols
from .models import ContentSection, ContentType, NoteKind

# Priority order for lines outside fenced code
LINE_PREDICATES: list[tuple[ContentType, Callable[[str], bool]]] = [
    (ContentType.TABLE, p.is_table_line),
    (ContentType.QA, p.is_qa_line),
    (ContentType.NOTE_BLOCK, p.is_note_line),
    (ContentType.CHECKLIST, p.is_checklist_line),
    (ContentType.DIALOGUE, p.is_dialogue_line),
    (ContentType.HORIZONTAL_RULE, p.is_horizontal_rule),
    (ContentType.MATH_FORMULA, p.is_math_line),
    (ContentType.DEFINITION_LIST, p.is_definition_line),
    (ContentType.STEP_BY_STEP, p.is_step_line),
    (ContentType.TIMELINE, p.is_timeline_line),
    (ContentType.ASCII_CHART, p.is_ascii_chart_line),
    (ContentType.COLLAPSIBLE, p.is_collapsible_line),
]

# Line types strong enough to break out of a table
_TABLE_BREAKERS = frozenset({
    ContentType.QA,
    ContentType.NOTE_BLOCK,
    ContentType.CHECKLIST,
    ContentType.DIALOGUE,
    ContentType.HORIZONTAL_RULE,
})


def match_line(line: str) -> ContentType | None:
    """Return the first section type whose predicate accepts the line."""
    for content_type, predicate in LINE_PREDICATES:
        if predicate(line):
            return content_type
    return None


def _collapsible_title(text: str) -> str:
    for line in text.split("\n"):
        stripped = line.strip()
        lower = stripped.lower()
        if "<summary>" in lower:
            start = lower.index("<summary>") + len("<summary>")
            end = lower.find("</summary>", start)
            title = stripped[start:end if end != -1 else None].strip()
            if title:
                return title
        for lead in ("Details:", "Show more:", "Expand:"):
            if stripped.startswith(lead):
                return lead[:-1]
    return "Details"


def _trim_code(lines: list[str]) -> str:
    """Drop blank lines around code while keeping indentation."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(line.rstrip() for line in lines[start:end])


class ContentClassifier:
    """Single-pass classifier over the lines of a message.

    Usage:
        sections = ContentClassifier().classify(text)
    """

    def __init__(self, clean: bool = True) -> None:
        self._clean = clean
        self._reset()

    def _reset(self) -> None:
        self._sections: list[ContentSection] = []
        self._lines: list[str] = []
        self._type = ContentType.PLAIN
        self._note_kind: NoteKind | None = None
        self._language: str | None = None
        self._after_blank = False
        self._details_open = False

    def classify(self, text: str) -> list[ContentSection]:
        """Partition text into sections in document order.

        Never raises for string input; returns at least one section.
        """
        self._reset()
        source = clean_excessive_symbols(text) if self._clean else text
        in_code = False

        for line in source.split("\n"):
            if in_code:
                if p.is_fence_line(line):
                    self._flush()
                    in_code = False
                else:
                    self._lines.append(line)
                continue

            if p.is_fence_line(line):
                self._flush()
                self._start(ContentType.CODE_BLOCK)
                self._language = p.fence_language(line) or None
                in_code = True
                continue

            self._feed(line)

        self._flush()
        if not self._sections:
            return [ContentSection(type=ContentType.PLAIN, text=text)]
        return self._sections

    def _feed(self, line: str) -> None:
        if not line.strip():
            if self._lines:
                self._lines.append(line)
            self._after_blank = True
            return

        if self._details_open:
            self._lines.append(line)
            if "</details>" in line.lower():
                self._details_open = False
            self._after_blank = False
            return

        matched = match_line(line)

        if self._type == ContentType.TABLE and matched != ContentType.TABLE:
            if self._continue_table(line, matched):
                self._after_blank = False
                return

        if matched == ContentType.HORIZONTAL_RULE:
            self._flush()
            self._sections.append(ContentSection(type=ContentType.HORIZONTAL_RULE, text=""))
            self._after_blank = False
            return

        if matched is None:
            # Continuation lines stay with their section; a blank line ends it
            if self._type != ContentType.PLAIN and (self._after_blank or not self._lines):
                self._flush()
                self._start(ContentType.PLAIN)
        elif matched != self._type or not self._lines:
            self._flush()
            self._start(matched, line)

        self._lines.append(line)
        self._after_blank = False

    def _continue_table(self, line: str, matched: ContentType | None) -> bool:
        """Decide whether a non-table line still belongs to the current table."""
        if "---" in line:
            return self._fold(line)
        if matched in _TABLE_BREAKERS:
            return False
        if p.is_summary_line(line):
            self._flush()
            self._start(ContentType.PLAIN)
            self._lines.append(line)
            return True
        if self._after_blank:
            return False
        return self._fold(line)

    def _fold(self, line: str) -> bool:
        self._lines.append(line)
        return True

    def _start(self, content_type: ContentType, line: str | None = None) -> None:
        self._type = content_type
        self._language = None
        self._note_kind = None
        if content_type == ContentType.NOTE_BLOCK and line is not None:
            self._note_kind = p.note_kind(line)
        if content_type == ContentType.COLLAPSIBLE and line is not None:
            lower = line.lower()
            self._details_open = "<details>" in lower and "</details>" not in lower

    def _flush(self) -> None:
        lines, self._lines = self._lines, []
        self._details_open = False
        if self._type == ContentType.CODE_BLOCK:
            text = _trim_code(lines)
        else:
            text = "\n".join(lines).strip()

        if text or (self._type == ContentType.CODE_BLOCK and lines):
            self._sections.append(ContentSection(
                type=self._type,
                text=text,
                language=self._language if self._type == ContentType.CODE_BLOCK else None,
                note_kind=self._note_kind if self._type == ContentType.NOTE_BLOCK else None,
                title=_collapsible_title(text) if self._type == ContentType.COLLAPSIBLE else None,
            ))
        self._type = ContentType.PLAIN
        self._language = None
        self._note_kind = None
        self._after_blank = False


def classify(text: str) -> list[ContentSection]:
    """Classify message text into typed sections.

    Args:
        text: Full or partially revealed message content

    Returns:
        Sections in document order; a single plain section when nothing
        else is recognised
    """
    return ContentClassifier().classify(text)
