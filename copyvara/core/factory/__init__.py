"""
Factory classes for creating providers from configuration.
"""

from copyvara.core.factory.llm_factory import LLMFactory

__all__ = ["LLMFactory"]
