"""Message rendering: classify model output into sections and render them."""

from .classifier import ContentClassifier, classify
from .cleanup import clean_excessive_symbols
from .latex import clean_latex
from .models import ContentSection, ContentType, NoteKind, RenderNode, RenderRow
from .renderer import parse_table, render, render_message

__all__ = [
    "ContentClassifier",
    "ContentSection",
    "ContentType",
    "NoteKind",
    "RenderNode",
    "RenderRow",
    "classify",
    "clean_excessive_symbols",
    "clean_latex",
    "parse_table",
    "render",
    "render_message",
]
