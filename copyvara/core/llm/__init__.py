"""
LLM provider abstraction layer for text generation.

Supported providers:
- OpenAI (official SDK)
- Ollama (native SDK)
"""
from copyvara.core.llm.base import LLMProvider
from copyvara.core.llm.ollama import OllamaLLM
from copyvara.core.llm.openai import OpenAILLM

__all__ = [
    "LLMProvider",
    "OllamaLLM",
    "OpenAILLM",
]
