"""Tokenizer for simulated streaming.

Hides how a completed message is cut into reveal units. Two strategies are
used: word tokens for prose, and whole-line tokens inside fenced code so
code appears line by line. Joining the tokens always gives back the exact
input text.
"""

from .models import RevealToken

FENCE = "```"

# Punctuation split off a word so it can get its own pause
SPLIT_PUNCTUATION = ".!?,;:"


def _word_tokens(words: list[str], first_prefix: str) -> list[str]:
    """Turn the words of one line into token strings.

    The first word gets ``first_prefix``, later words a single space.
    """
    tokens: list[str] = []
    for index, word in enumerate(words):
        prefix = first_prefix if index == 0 else " "
        if len(word) > 2 and word[-1] in SPLIT_PUNCTUATION:
            tokens.append(prefix + word[:-1])
            tokens.append(word[-1])
        else:
            tokens.append(prefix + word)
    return tokens


def _tokenize_plain(text: str) -> list[str]:
    return _word_tokens(text.split(" "), "")


def _tokenize_with_code(text: str) -> list[str]:
    tokens: list[str] = []
    in_code = False
    for index, line in enumerate(text.split("\n")):
        prefix = "" if index == 0 else "\n"
        if line.strip().startswith(FENCE):
            in_code = not in_code
            tokens.append(prefix + line)
        elif in_code:
            tokens.append(prefix + line)
        else:
            tokens.extend(_word_tokens(line.split(" "), prefix))
    return tokens


def tokenize(text: str) -> list[RevealToken]:
    """Split a message into reveal tokens.

    Args:
        text: Full message content

    Returns:
        Tokens whose concatenation equals ``text`` exactly
    """
    if not text:
        return []
    raw = _tokenize_with_code(text) if FENCE in text else _tokenize_plain(text)
    return [RevealToken(text=token) for token in raw if token]


def join_tokens(tokens: list[RevealToken]) -> str:
    """Concatenate tokens back into text."""
    return "".join(token.text for token in tokens)
