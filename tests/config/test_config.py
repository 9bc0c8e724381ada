"""
Tests for configuration management.

Tests config loading from:
1. Environment variables (including legacy fallbacks)
2. YAML files
3. Combined (env overrides YAML)
"""

import pytest
import pydantic
import yaml

from copyvara.config import Config, LinkConfig, LLMConfig, RetrievalConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove variables that would leak into from_env()."""
    for key in (
        "OPENAI_API_KEY",
        "VITE_SUPABASE_URL",
        "VITE_SUPABASE_ANON_KEY",
        "COPYVARA_LLM_API_KEY",
        "COPYVARA_LLM_PROVIDER",
        "COPYVARA_SUPABASE_URL",
        "COPYVARA_SUPABASE_ANON_KEY",
        "COPYVARA_EVIDENCE_MODE",
        "COPYVARA_RETRIEVAL_LIMIT",
        "COPYVARA_STORAGE_BACKEND",
        "COPYVARA_LINK_MAX_CANDIDATES",
        "COPYVARA_LINK_MIN_SHARED_TAGS",
    ):
        monkeypatch.delenv(key, raising=False)


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        config = Config()

        assert config.llm.provider == "openai"
        assert config.llm.model == "gpt-4o-mini"
        assert config.llm.api_key is None
        assert config.llm.temperature == 0.0

        assert config.retrieval.evidence_mode == "ranked"
        assert config.retrieval.limit == 8
        assert config.retrieval.document_load_limit == 300
        assert config.retrieval.history_load_limit == 50
        assert config.retrieval.question_history_limit == 30
        assert config.retrieval.max_memory_items == 2000

        assert config.links.max_candidates == 5
        assert config.links.min_shared_tags == 1

        assert config.storage.backend == "sqlite"
        assert config.workspace_id == "w1"

    def test_llm_config_creation(self):
        llm_config = LLMConfig(provider="ollama", model="llama3.1:8b", temperature=0.7)
        assert llm_config.provider == "ollama"
        assert llm_config.temperature == 0.7

    def test_invalid_evidence_mode(self):
        with pytest.raises(pydantic.ValidationError):
            RetrievalConfig(evidence_mode="semantic")

    def test_limit_must_be_positive(self):
        with pytest.raises(pydantic.ValidationError):
            RetrievalConfig(limit=0)

    def test_min_shared_tags_must_be_positive(self):
        with pytest.raises(pydantic.ValidationError):
            LinkConfig(min_shared_tags=0)


class TestConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env_basic(self, monkeypatch):
        monkeypatch.setenv("COPYVARA_LLM_PROVIDER", "ollama")
        monkeypatch.setenv("COPYVARA_LLM_MODEL", "llama3.1:8b")
        monkeypatch.setenv("COPYVARA_EVIDENCE_MODE", "recent")
        monkeypatch.setenv("COPYVARA_RETRIEVAL_LIMIT", "5")

        config = Config.from_env()

        assert config.llm.provider == "ollama"
        assert config.llm.model == "llama3.1:8b"
        assert config.retrieval.evidence_mode == "recent"
        assert config.retrieval.limit == 5

    def test_from_env_with_numbers(self, monkeypatch):
        monkeypatch.setenv("COPYVARA_LLM_TEMPERATURE", "0.3")
        monkeypatch.setenv("COPYVARA_LLM_MAX_TOKENS", "4000")

        config = Config.from_env()

        assert config.llm.temperature == 0.3
        assert config.llm.max_tokens == 4000

    def test_from_env_link_settings(self, monkeypatch):
        monkeypatch.setenv("COPYVARA_LINK_MAX_CANDIDATES", "0")
        monkeypatch.setenv("COPYVARA_LINK_MIN_SHARED_TAGS", "2")

        config = Config.from_env()

        assert config.links.max_candidates == 0
        assert config.links.min_shared_tags == 2

    def test_from_env_with_booleans(self, monkeypatch):
        monkeypatch.setenv("COPYVARA_LOG_TO_FILE", "false")
        monkeypatch.setenv("COPYVARA_LOG_SERIALIZE", "0")

        config = Config.from_env()

        assert config.logging.log_to_file is False
        assert config.logging.serialize is False

    def test_api_key_falls_back_to_openai_variable(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-legacy")
        assert Config.from_env().llm.api_key == "sk-legacy"

    def test_prefixed_api_key_wins(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-legacy")
        monkeypatch.setenv("COPYVARA_LLM_API_KEY", "sk-prefixed")
        assert Config.from_env().llm.api_key == "sk-prefixed"

    def test_supabase_falls_back_to_vite_variables(self, monkeypatch):
        monkeypatch.setenv("VITE_SUPABASE_URL", "https://abc.supabase.co")
        monkeypatch.setenv("VITE_SUPABASE_ANON_KEY", "anon")

        config = Config.from_env()

        assert config.storage.supabase_url == "https://abc.supabase.co"
        assert config.storage.supabase_anon_key == "anon"

    def test_from_env_with_dotenv_file(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env.test"
        env_file.write_text("COPYVARA_STORAGE_BACKEND=supabase\n")
        # Registered with monkeypatch so the value loaded from the file is undone
        monkeypatch.setenv("COPYVARA_STORAGE_BACKEND", "unset")
        monkeypatch.delenv("COPYVARA_STORAGE_BACKEND")

        config = Config.from_env(env_file=env_file)

        assert config.storage.backend == "supabase"


class TestConfigFromYaml:
    """Test loading configuration from YAML."""

    def test_from_yaml_basic(self, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.dump(
                {
                    "llm": {"provider": "ollama", "model": "qwen2.5"},
                    "retrieval": {"evidence_mode": "recent", "limit": 3},
                    "workspace_id": "w2",
                }
            )
        )

        config = Config.from_yaml(yaml_file)

        assert config.llm.provider == "ollama"
        assert config.retrieval.evidence_mode == "recent"
        assert config.retrieval.limit == 3
        assert config.workspace_id == "w2"
        # Untouched sections keep defaults
        assert config.storage.backend == "sqlite"

    def test_from_yaml_empty_file(self, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("")
        assert Config.from_yaml(yaml_file) == Config()

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "missing.yaml")


class TestConfigFromEnvOrYaml:
    """Test combined loading."""

    def test_env_overrides_yaml(self, monkeypatch, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(yaml.dump({"storage": {"backend": "sqlite", "sqlite_path": "x.db"}}))
        monkeypatch.setenv("COPYVARA_STORAGE_BACKEND", "supabase")

        config = Config.from_env_or_yaml(yaml_path=yaml_file)

        assert config.storage.backend == "supabase"

    def test_yaml_used_when_env_is_default(self, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(yaml.dump({"retrieval": {"limit": 4}}))

        config = Config.from_env_or_yaml(yaml_path=yaml_file)

        assert config.retrieval.limit == 4

    def test_no_yaml(self):
        config = Config.from_env_or_yaml(yaml_path=None)
        assert config.llm.provider == "openai"
