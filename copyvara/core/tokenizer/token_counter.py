"""
Token counting utilities for prompt budgets.

Uses tiktoken for accurate OpenAI-compatible token counting with
character-based approximation as fallback.
"""

import tiktoken

from copyvara.config import TokenizerConfig


class TokenCounter:
    """
    Token counter with budget truncation.

    Usage:
        counter = TokenCounter()
        count = counter.count_tokens("Hello world")
        clipped = counter.truncate(long_text, max_tokens=12000)
    """

    def __init__(self, config: TokenizerConfig | None = None):
        """
        Initialize token counter with configuration.

        Args:
            config: Optional tokenizer configuration. Uses defaults if not provided.
        """
        self.config = config or TokenizerConfig()
        self._encoder: tiktoken.Encoding | None = None

    @property
    def encoder(self) -> tiktoken.Encoding:
        """
        Lazy-load tiktoken encoder.

        Returns:
            Tiktoken encoding instance
        """
        if self._encoder is None:
            self._encoder = tiktoken.get_encoding(self.config.model)
        return self._encoder

    @property
    def is_approximate(self) -> bool:
        return self.config.provider == "approximate"

    def count_tokens(self, text: str) -> int:
        """
        Count tokens, exactly with tiktoken or approximately.

        Args:
            text: Text to count tokens for

        Returns:
            Token count
        """
        if not text:
            return 0

        if self.is_approximate:
            return self.estimate_tokens(text)

        return len(self.encoder.encode(text))

    def estimate_tokens(self, text: str) -> int:
        """
        Fast approximate token count using character ratio.

        Args:
            text: Text to estimate tokens for

        Returns:
            Approximate token count
        """
        if not text:
            return 0
        return int(len(text) / self.config.chars_per_token)

    def truncate(self, text: str, max_tokens: int) -> str:
        """
        Clip text to at most max_tokens tokens.

        Args:
            text: Text to clip
            max_tokens: Token budget

        Returns:
            Original text if within budget, otherwise its leading part
        """
        if not text or max_tokens <= 0:
            return ""

        if self.is_approximate:
            max_chars = int(max_tokens * self.config.chars_per_token)
            return text if len(text) <= max_chars else text[:max_chars]

        tokens = self.encoder.encode(text)
        if len(tokens) <= max_tokens:
            return text
        return self.encoder.decode(tokens[:max_tokens])
