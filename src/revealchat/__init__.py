"""
RevealChat: a terminal chat client whose replies reveal themselves.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .rendering import ContentSection, ContentType, RenderNode, classify, render, render_message
from .streaming import RevealSession, RevealStatus, tokenize

__all__ = [
    "ContentSection",
    "ContentType",
    "RenderNode",
    "RevealSession",
    "RevealStatus",
    "classify",
    "render",
    "render_message",
    "tokenize",
]
