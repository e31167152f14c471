"""Reveal timing.

Hides the content-dependent delay table used between reveal ticks.
"""

import re

from .models import RevealToken

WHITESPACE_DELAY_MS = 10
SENTENCE_END_DELAY_MS = 80
CLAUSE_DELAY_MS = 40
CODE_DELAY_MS = 60
SYMBOL_DELAY_MS = 50
LONG_WORD_DELAY_MS = 35
MEDIUM_WORD_DELAY_MS = 25
SHORT_WORD_DELAY_MS = 20

_SENTENCE_END = re.compile(r"^[.!?]+$")
_CLAUSE = re.compile(r"^[,;:]+$")
_SYMBOL = re.compile(r'[{}()\[\]<>"]')


def token_delay(token: RevealToken | str, previous: RevealToken | str | None = None) -> int:
    """Delay in milliseconds before revealing ``token``.

    Rules are checked in order; the first match wins. ``previous`` is
    accepted for callers that track it but does not change the result.
    """
    text = token.text if isinstance(token, RevealToken) else token
    trimmed = text.strip()

    if not trimmed:
        return WHITESPACE_DELAY_MS
    if _SENTENCE_END.match(trimmed):
        return SENTENCE_END_DELAY_MS
    if _CLAUSE.match(trimmed):
        return CLAUSE_DELAY_MS
    if "`" in text:
        return CODE_DELAY_MS
    if _SYMBOL.search(text):
        return SYMBOL_DELAY_MS
    if len(trimmed) > 8:
        return LONG_WORD_DELAY_MS
    if len(trimmed) > 5:
        return MEDIUM_WORD_DELAY_MS
    return SHORT_WORD_DELAY_MS


def total_reveal_ms(tokens: list[RevealToken]) -> int:
    """Time a full reveal takes at normal speed; the first token is immediate."""
    return sum(
        token_delay(token, tokens[index - 1])
        for index, token in enumerate(tokens)
        if index > 0
    )
