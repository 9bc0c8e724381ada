"""
Tests for factories.

Tests the creation of LLM providers and knowledge stores from configuration.
"""

import pytest

from copyvara.config import Config, LLMConfig, StorageConfig
from copyvara.core.factory import LLMFactory
from copyvara.core.llm.base import LLMProvider
from copyvara.core.llm.ollama import OllamaLLM
from copyvara.core.llm.openai import OpenAILLM
from copyvara.core.storage import (
    KnowledgeStore,
    SQLiteKnowledgeStore,
    SupabaseKnowledgeStore,
    create_knowledge_store,
)
from copyvara.utils.exceptions import ConfigurationError


class TestLLMFactory:
    """Test LLM factory."""

    def test_create_openai_llm(self):
        llm = LLMFactory.create(LLMConfig(provider="openai", model="gpt-4o-mini", api_key="sk-test"))

        assert isinstance(llm, OpenAILLM)
        assert isinstance(llm, LLMProvider)
        assert llm.model == "gpt-4o-mini"

    def test_create_openai_without_api_key_raises_error(self):
        with pytest.raises(ConfigurationError, match="API key"):
            LLMFactory.create(LLMConfig(provider="openai", api_key=None))

    def test_create_ollama_llm(self):
        llm = LLMFactory.create(LLMConfig(provider="ollama", model="qwen2.5"))

        assert isinstance(llm, OllamaLLM)
        assert llm.host == "http://localhost:11434"
        assert llm.model == "qwen2.5"

    def test_create_ollama_with_base_url(self):
        llm = LLMFactory.create(
            LLMConfig(provider="ollama", model="qwen2.5", base_url="http://gpu:11434")
        )
        assert llm.host == "http://gpu:11434"

    def test_unsupported_provider(self):
        with pytest.raises(ConfigurationError, match="Unsupported LLM provider"):
            LLMFactory.create(LLMConfig(provider="gemini"))


class TestKnowledgeStoreFactory:
    """Test knowledge store factory."""

    def test_default_is_sqlite(self, tmp_path):
        config = Config(storage=StorageConfig(sqlite_path=str(tmp_path / "kb.db")), workspace_id="w7")

        store = create_knowledge_store(config)

        assert isinstance(store, SQLiteKnowledgeStore)
        assert isinstance(store, KnowledgeStore)
        assert store.workspace_id == "w7"

    def test_supabase(self):
        config = Config(
            storage=StorageConfig(
                backend="supabase", supabase_url="https://abc.supabase.co/", supabase_anon_key="anon"
            )
        )

        store = create_knowledge_store(config)

        assert isinstance(store, SupabaseKnowledgeStore)
        assert store.url == "https://abc.supabase.co"

    def test_supabase_requires_url(self):
        config = Config(storage=StorageConfig(backend="supabase", supabase_anon_key="anon"))
        with pytest.raises(ConfigurationError):
            create_knowledge_store(config)

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError, match="Unknown storage backend"):
            create_knowledge_store(Config(storage=StorageConfig(backend="neo4j")))
