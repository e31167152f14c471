"""Line-level predicates used by the content classifier.

Each predicate is a pure function of one line so it can be tested on its
own. They are heuristics: ambiguous prose is expected to be misread now and
then, and the classifier falls back to plain text when nothing matches.

The patterns are anchored and free of nested quantifiers so every check is
linear in the line length.
"""

import re

from .models import NoteKind

FENCE = "```"

_QA = re.compile(r"^(?:Question|Q\d*|Answer|A\d*):")
_QUESTION = re.compile(r"^(?:Question|Q\d*):")
_ANSWER = re.compile(r"^(?:Answer|A\d*):")
_NOTE = re.compile(r"^(Note|Tip|Warning|Important|Caution):")
_CHECK_GLYPHS = "✅☑✓✔"
_CROSS_GLYPHS = "❌×✗❎⭕🔴"
_VARIATION = "\ufe0f"
_CHECKLIST = re.compile(rf"^[{_CHECK_GLYPHS}{_CROSS_GLYPHS}]{_VARIATION}?\s")
_DIALOGUE = re.compile(r"^(User|Agent|Support|Customer|Assistant):")
_RULE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$")
_FORMULA_LEAD = re.compile(r"^(?:Formula|Equation):")
_DEFINITION = re.compile(r"^[A-Za-z][^:]*:\s+\S")
_CONTRACTIONS = re.compile(
    r"\b(?:let's|we'll|you'll|i'll|can't|won't|don't|isn't|aren't|wasn't|weren't)\b"
)
_NUMBERED_STEP = re.compile(r"^\d+\.\s+\S")
_NAMED_STEP = re.compile(r"^(?:Step|Phase|Stage)\s+\d+:")
_MONTHS = (
    "January|February|March|April|May|June|July|"
    "August|September|October|November|December"
)
_TIMELINE = re.compile(
    rf"^(?:\d{{4}}(?:-\d{{2}})?(?:-\d{{2}})?|(?:{_MONTHS})\s+\d{{4}}):"
)
_TIMELINE_LEAD = re.compile(r"^(?:Timeline|History):")
_CHART_GLYPHS = frozenset("█▓▒░■□")
_COLLAPSIBLE = re.compile(r"^(?:<details>|<summary>|Details:|Show more:|Expand:)")
_SUMMARY_LEAD = re.compile(
    r"^(?:This table|Summary|Note:|In summary|Overall|Conclusion)", re.IGNORECASE
)

# First words that never start a term/definition pair
_NON_TERMS = frozenset({
    "question", "answer", "user", "agent", "support", "customer", "assistant",
    "note", "tip", "warning", "important", "caution", "certainly", "let",
    "here", "this", "that", "in", "for", "with", "when", "where", "why",
    "how", "what", "the", "a", "an", "step", "phase", "stage", "formula",
    "equation", "timeline", "history", "details", "show", "expand",
    *_MONTHS.lower().split("|"),
})

MAX_DEFINITION_LINE = 100
MAX_TERM_WORDS = 4


def is_fence_line(line: str) -> bool:
    """A triple-backtick fence opening or closing a code block."""
    return line.strip().startswith(FENCE)


def fence_language(line: str) -> str:
    """Language hint trailing a fence, e.g. ``python`` in ```` ```python ````."""
    return line.strip()[len(FENCE):].strip().strip("`").strip()


def table_cells(line: str) -> list[str]:
    """Split a table line on the column separator."""
    return line.split("|")


def is_table_line(line: str) -> bool:
    """Line uses the ``|`` separator and splits into at least three parts."""
    if "|" not in line:
        return False
    parts = table_cells(line)
    return len(parts) >= 3 and any(part.strip() for part in parts)


def is_table_separator(line: str) -> bool:
    return "---" in line or "═══" in line


def is_summary_line(line: str) -> bool:
    """Trailing sentence that closes a table (``Overall, ...``)."""
    return bool(_SUMMARY_LEAD.match(line.strip()))


def is_qa_line(line: str) -> bool:
    return bool(_QA.match(line.strip()))


def is_question_line(line: str) -> bool:
    return bool(_QUESTION.match(line.strip()))


def is_answer_line(line: str) -> bool:
    return bool(_ANSWER.match(line.strip()))


def is_note_line(line: str) -> bool:
    return bool(_NOTE.match(line.strip()))


def note_kind(line: str) -> NoteKind:
    """Note flavour derived from the leading keyword."""
    match = _NOTE.match(line.strip())
    if match is None:
        return NoteKind.NOTE
    keyword = match.group(1).lower()
    if keyword == "tip":
        return NoteKind.TIP
    if keyword in ("warning", "caution"):
        return NoteKind.WARNING
    if keyword == "important":
        return NoteKind.IMPORTANT
    return NoteKind.NOTE


def strip_note_prefix(text: str) -> str:
    return _NOTE.sub("", text.strip(), count=1).lstrip()


def is_checklist_line(line: str) -> bool:
    return bool(_CHECKLIST.match(line.strip()))


def checklist_state(line: str) -> tuple[bool, str]:
    """Return (checked, text) for a checklist line with the glyph removed."""
    text = line.strip()
    if not text:
        return False, text
    glyph = text[0]
    rest = text[1:].lstrip(_VARIATION).strip()
    if glyph in _CHECK_GLYPHS:
        return True, rest
    if glyph in _CROSS_GLYPHS:
        return False, rest
    return False, text


def is_dialogue_line(line: str) -> bool:
    return bool(_DIALOGUE.match(line.strip()))


def split_dialogue(line: str) -> tuple[str, str] | None:
    match = _DIALOGUE.match(line.strip())
    if match is None:
        return None
    return match.group(1), line.strip()[match.end():].strip()


def is_horizontal_rule(line: str) -> bool:
    return bool(_RULE.match(line.strip()))


def _has_pair(line: str, opening: str, closing: str) -> bool:
    start = line.find(opening)
    return start != -1 and line.find(closing, start + len(opening)) != -1


def is_math_line(line: str) -> bool:
    """Display math (``$$..$$``, ``\\[..\\]``, ``\\begin{}..\\end{}``) or a formula lead-in."""
    return (
        _has_pair(line, "$$", "$$")
        or _has_pair(line, "\\[", "\\]")
        or _has_pair(line, "\\begin{", "\\end{")
        or bool(_FORMULA_LEAD.match(line.strip()))
    )


def split_definition(line: str) -> tuple[str, str]:
    term, _, definition = line.strip().partition(":")
    return term.strip(), definition.strip()


def is_definition_line(line: str) -> bool:
    """Short ``term: definition`` pair.

    The term has at most four words, the whole line at most 100 chars, and
    conversational sentences are rejected.
    """
    trimmed = line.strip()
    if len(trimmed) > MAX_DEFINITION_LINE:
        return False
    if not _DEFINITION.match(trimmed):
        return False
    term, definition = split_definition(trimmed)
    words = term.split()
    if not words or len(words) > MAX_TERM_WORDS or not definition:
        return False
    if words[0].lower() in _NON_TERMS:
        return False
    if _CONTRACTIONS.search(trimmed.lower()):
        return False
    return True


def is_step_line(line: str) -> bool:
    trimmed = line.strip()
    return bool(_NUMBERED_STEP.match(trimmed) or _NAMED_STEP.match(trimmed))


def strip_step_prefix(line: str) -> str:
    trimmed = line.strip()
    match = _NUMBERED_STEP.match(trimmed)
    if match is not None:
        return trimmed.split(".", 1)[1].strip()
    match = _NAMED_STEP.match(trimmed)
    if match is not None:
        return trimmed[match.end():].strip()
    return trimmed


def is_timeline_line(line: str) -> bool:
    trimmed = line.strip()
    return bool(_TIMELINE.match(trimmed) or _TIMELINE_LEAD.match(trimmed))


def is_ascii_chart_line(line: str) -> bool:
    trimmed = line.strip()
    if is_table_line(line):
        return False
    if any(ch in _CHART_GLYPHS for ch in trimmed):
        return True
    return "|" in trimmed and "-" in trimmed and len(trimmed) > 10


def is_collapsible_line(line: str) -> bool:
    return bool(_COLLAPSIBLE.match(line.strip()))
