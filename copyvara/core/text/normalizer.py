"""
Text normalization and lexical tokenization.

Both functions are pure and total: any string (including empty) is valid.
"""

import re

# Anything that is not a lowercase Latin letter, digit, Hangul syllable or whitespace
_STRIP_PATTERN = re.compile(r"[^a-z0-9가-힣\s]")
_WHITESPACE_PATTERN = re.compile(r"\s+")

# Boundary between a Latin letter and a Hangul syllable, in either order.
# Korean particles attach directly to Latin terms ("RAG가", "React를").
_SCRIPT_BOUNDARY = re.compile(r"(?<=[a-z])(?=[가-힣])|(?<=[가-힣])(?=[a-z])")

MIN_TOKEN_LENGTH = 2


def normalize(text: str) -> str:
    """
    Normalize text for lexical comparison.

    Lower-cases, replaces every character outside [a-z0-9], Hangul syllables
    and whitespace with a space, collapses whitespace runs and trims.

    Args:
        text: Arbitrary input text

    Returns:
        Normalized text (possibly empty)
    """
    if not text:
        return ""
    stripped = _STRIP_PATTERN.sub(" ", text.lower())
    return _WHITESPACE_PATTERN.sub(" ", stripped).strip()


def tokenize(text: str) -> list[str]:
    """
    Split text into lexical tokens.

    Applies normalize(), separates Latin runs from adjacent Hangul runs,
    splits on whitespace and discards tokens shorter than two characters.
    Order is preserved and duplicates are kept.

    Args:
        text: Arbitrary input text

    Returns:
        Token list; empty for empty or punctuation-only input
    """
    normalized = normalize(text)
    if not normalized:
        return []
    separated = _SCRIPT_BOUNDARY.sub(" ", normalized)
    return [token for token in separated.split() if len(token) >= MIN_TOKEN_LENGTH]
