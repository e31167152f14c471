"""Text cleanup for model output.

Hides the details of how stray or runaway markdown symbols are normalised
before a message is classified and rendered.
"""

import re

# Horizontal rules are a section type of their own and survive cleanup verbatim
_RULE_LINE = re.compile(r"^\s*(?:-{3,}|\*{3,}|_{3,})\s*$")
_FENCE_RUN = re.compile(r"`{4,}")
_STAR_RUN = re.compile(r"\*{3,}")
_HASH_RUN = re.compile(r"^(\s*)#{7,}")
_UNDERSCORE_RUN = re.compile(r"_{3,}")
_TILDE_RUN = re.compile(r"~{3,}")
_NOISE_LINE = re.compile(r"^\s*[#*_~]+\s*$")

# Inline emphasis markers, used for table cells
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(.+?)\*")
_CODE = re.compile(r"`(.+?)`")
_STRIKE = re.compile(r"~~(.+?)~~")
_UNDERLINE = re.compile(r"__(.+?)__")

_LONE_BOLD = re.compile(r"(?<!\S)\*\*(?!\S)")
_LONE_HEADING = re.compile(r"(?<!\S)#{3,}(?!#)(?!\s*\w)")


def _is_fence(line: str) -> bool:
    return line.strip().startswith("```")


def clean_line(line: str) -> str:
    """Collapse runaway symbol runs in a single line of prose."""
    if _RULE_LINE.match(line):
        return line
    line = _FENCE_RUN.sub("```", line)
    line = _STAR_RUN.sub("**", line)
    line = _HASH_RUN.sub(r"\1######", line)
    line = _UNDERSCORE_RUN.sub("__", line)
    line = _TILDE_RUN.sub("~~", line)
    return line


def is_noise_line(line: str) -> bool:
    """Check if a line holds nothing but stray markdown symbols.

    A lone ``###`` or ``**`` is noise; a horizontal rule is not.
    """
    return bool(_NOISE_LINE.match(line)) and not _RULE_LINE.match(line)


def clean_excessive_symbols(text: str) -> str:
    """Normalise symbol runs and drop noise lines.

    - 3+ ``*`` become ``**``, 3+ ``_`` become ``__``, 3+ ``~`` become ``~~``
    - 4+ backticks become a three-backtick fence
    - 7+ leading ``#`` become ``######``
    - lines that are only stray symbols are removed

    Lines inside fenced code blocks are left untouched. Applying the
    function twice gives the same result as applying it once.
    """
    if not text:
        return text

    cleaned: list[str] = []
    in_code = False
    for raw in text.split("\n"):
        if in_code:
            fence = _FENCE_RUN.sub("```", raw)
            if _is_fence(fence):
                in_code = False
                cleaned.append(fence)
            else:
                cleaned.append(raw)
            continue

        line = clean_line(raw)
        if _is_fence(line):
            in_code = True
            cleaned.append(line)
            continue
        if is_noise_line(line):
            continue
        cleaned.append(line)
    return "\n".join(cleaned)


def strip_inline_emphasis(text: str) -> str:
    """Remove bold, italic, code and strikethrough markers around words."""
    text = _BOLD.sub(r"\1", text)
    text = _UNDERLINE.sub(r"\1", text)
    text = _STRIKE.sub(r"\1", text)
    text = _CODE.sub(r"\1", text)
    text = _ITALIC.sub(r"\1", text)
    return text.strip()


def remove_unwanted_markdown_symbols(text: str) -> str:
    """Remove standalone ``**`` and ``###`` that wrap no text.

    Used on prose sections right before display.
    """
    lines = []
    for line in text.split("\n"):
        line = _LONE_BOLD.sub("", line)
        line = _LONE_HEADING.sub("", line)
        if is_noise_line(line):
            continue
        lines.append(line.rstrip())
    return "\n".join(lines).strip()
