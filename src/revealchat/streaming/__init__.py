"""Simulated streaming: tokenize a finished message and reveal it over time."""

from .models import RevealStatus, RevealToken
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from .session import CURSOR_GLYPH, RevealSession, reveal_stream
from .timing import token_delay, total_reveal_ms
from .tokenizer import join_tokens, tokenize

__all__ = [
    "CURSOR_GLYPH",
    "AsyncioScheduler",
    "ManualScheduler",
    "RevealSession",
    "RevealStatus",
    "RevealToken",
    "Scheduler",
    "join_tokens",
    "reveal_stream",
    "token_delay",
    "tokenize",
    "total_reveal_ms",
]
