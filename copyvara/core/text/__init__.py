"""
Lexical text processing used by every scoring step.

Normalization keeps lowercase Latin letters, digits and Hangul syllables;
tokenization splits normalized text into multi-character tokens.
"""

from copyvara.core.text.normalizer import normalize, tokenize

__all__ = ["normalize", "tokenize"]
