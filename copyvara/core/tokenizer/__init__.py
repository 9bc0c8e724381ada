"""
Token counting for text handed to the text-generation service.

Provides accurate token counting using tiktoken with fast approximation fallback.
Used to keep raw document text inside the analysis prompt budget.
"""

from copyvara.config import TokenizerConfig
from copyvara.core.tokenizer.token_counter import TokenCounter

__all__ = ["TokenCounter", "TokenizerConfig"]
