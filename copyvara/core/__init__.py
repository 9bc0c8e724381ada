"""Core building blocks: text processing, token budgets, LLM providers, storage."""
