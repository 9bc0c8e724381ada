"""
Configuration for Copyvara.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "openai"  # openai, ollama
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    api_key: str | None = None
    temperature: float = 0.0
    max_tokens: int = 2000
    timeout: float = 120.0


class TokenizerConfig(BaseModel):
    """Token counting configuration."""

    provider: str = "tiktoken"  # tiktoken, approximate
    model: str = "cl100k_base"
    chars_per_token: float = 4.0


class AnalysisConfig(BaseModel):
    """Document analysis configuration."""

    max_input_tokens: int = 12000
    max_tokens: int = 2000


class RetrievalConfig(BaseModel):
    """Evidence selection and collection limits."""

    # ranked: relevance-ranked retrieval, recent: 20 most recent documents
    evidence_mode: Literal["ranked", "recent"] = "ranked"
    limit: int = Field(default=8, ge=1)
    document_load_limit: int = 300
    history_load_limit: int = 50
    question_history_limit: int = 30
    max_memory_items: int = 2000


class LinkConfig(BaseModel):
    """Link suggestion between documents sharing topic tags."""

    max_candidates: int = Field(default=5, ge=0)
    min_shared_tags: int = Field(default=1, ge=1)


class StorageConfig(BaseModel):
    """Persistence backend configuration."""

    backend: str = "sqlite"  # sqlite, supabase
    sqlite_path: str = "data/copyvara.db"
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    timeout: float = 30.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    links: LinkConfig = Field(default_factory=LinkConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    workspace_id: str = "w1"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            COPYVARA_LLM_PROVIDER: LLM provider (openai, ollama)
            COPYVARA_LLM_MODEL: LLM model name
            COPYVARA_LLM_BASE_URL: LLM base URL
            COPYVARA_LLM_API_KEY: LLM API key (falls back to OPENAI_API_KEY)
            COPYVARA_TOKENIZER_PROVIDER: tiktoken or approximate
            COPYVARA_EVIDENCE_MODE: ranked or recent
            COPYVARA_RETRIEVAL_LIMIT: Number of ranked evidence documents
            COPYVARA_LINK_MAX_CANDIDATES: Link suggestions per new document (0 disables)
            COPYVARA_STORAGE_BACKEND: sqlite or supabase
            COPYVARA_SQLITE_PATH: SQLite database file
            COPYVARA_SUPABASE_URL: Supabase project URL (falls back to VITE_SUPABASE_URL)
            COPYVARA_SUPABASE_ANON_KEY: Supabase anon key (falls back to VITE_SUPABASE_ANON_KEY)
            COPYVARA_LOG_LEVEL: Log level
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None, fallback_key: str | None = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if (value is None or value == "") and fallback_key:
                value = os.getenv(fallback_key)
            if value is None:
                return default
            if value == "":
                return default
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            llm=LLMConfig(
                provider=get_env("COPYVARA_LLM_PROVIDER", "openai"),
                model=get_env("COPYVARA_LLM_MODEL", "gpt-4o-mini"),
                base_url=get_env("COPYVARA_LLM_BASE_URL"),
                api_key=get_env("COPYVARA_LLM_API_KEY", fallback_key="OPENAI_API_KEY"),
                temperature=get_env("COPYVARA_LLM_TEMPERATURE", 0.0),
                max_tokens=get_env("COPYVARA_LLM_MAX_TOKENS", 2000),
                timeout=get_env("COPYVARA_LLM_TIMEOUT", 120.0),
            ),
            tokenizer=TokenizerConfig(
                provider=get_env("COPYVARA_TOKENIZER_PROVIDER", "tiktoken"),
                model=get_env("COPYVARA_TOKENIZER_MODEL", "cl100k_base"),
                chars_per_token=get_env("COPYVARA_TOKENIZER_CHARS_PER_TOKEN", 4.0),
            ),
            analysis=AnalysisConfig(
                max_input_tokens=get_env("COPYVARA_ANALYSIS_MAX_INPUT_TOKENS", 12000),
                max_tokens=get_env("COPYVARA_ANALYSIS_MAX_TOKENS", 2000),
            ),
            retrieval=RetrievalConfig(
                evidence_mode=get_env("COPYVARA_EVIDENCE_MODE", "ranked"),
                limit=get_env("COPYVARA_RETRIEVAL_LIMIT", 8),
                document_load_limit=get_env("COPYVARA_DOCUMENT_LOAD_LIMIT", 300),
                history_load_limit=get_env("COPYVARA_HISTORY_LOAD_LIMIT", 50),
                question_history_limit=get_env("COPYVARA_QUESTION_HISTORY_LIMIT", 30),
                max_memory_items=get_env("COPYVARA_MAX_MEMORY_ITEMS", 2000),
            ),
            links=LinkConfig(
                max_candidates=get_env("COPYVARA_LINK_MAX_CANDIDATES", 5),
                min_shared_tags=get_env("COPYVARA_LINK_MIN_SHARED_TAGS", 1),
            ),
            storage=StorageConfig(
                backend=get_env("COPYVARA_STORAGE_BACKEND", "sqlite"),
                sqlite_path=get_env("COPYVARA_SQLITE_PATH", "data/copyvara.db"),
                supabase_url=get_env("COPYVARA_SUPABASE_URL", fallback_key="VITE_SUPABASE_URL"),
                supabase_anon_key=get_env(
                    "COPYVARA_SUPABASE_ANON_KEY", fallback_key="VITE_SUPABASE_ANON_KEY"
                ),
                timeout=get_env("COPYVARA_STORAGE_TIMEOUT", 30.0),
            ),
            logging=LoggingConfig(
                level=get_env("COPYVARA_LOG_LEVEL", "INFO"),
                log_to_file=get_env("COPYVARA_LOG_TO_FILE", True),
                log_dir=get_env("COPYVARA_LOG_DIR", "logs"),
                file_rotation=get_env("COPYVARA_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("COPYVARA_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("COPYVARA_LOG_COMPRESSION", "zip"),
                serialize=get_env("COPYVARA_LOG_SERIALIZE", True),
            ),
            workspace_id=get_env("COPYVARA_WORKSPACE_ID", "w1"),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        final_dict = {**config_dict}

        # Env values that differ from defaults win over YAML
        default = cls()
        for section in (
            "llm", "tokenizer", "analysis", "retrieval", "links", "storage", "logging"
        ):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        if env_config.workspace_id != default.workspace_id:
            final_dict["workspace_id"] = env_config.workspace_id

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
