"""Factory for creating knowledge stores."""

from copyvara.config import Config
from copyvara.core.storage.base import KnowledgeStore
from copyvara.core.storage.sqlite_store import SQLiteKnowledgeStore
from copyvara.core.storage.supabase_store import SupabaseKnowledgeStore
from copyvara.utils.exceptions import ConfigurationError


def create_knowledge_store(config: Config) -> KnowledgeStore:
    """
    Factory function to create knowledge stores.

    Args:
        config: Application configuration (storage section selects the backend)

    Returns:
        KnowledgeStore instance

    Raises:
        ConfigurationError: If backend is not supported or misconfigured
    """
    storage = config.storage
    if storage.backend == "sqlite":
        return SQLiteKnowledgeStore(db_path=storage.sqlite_path, workspace_id=config.workspace_id)
    elif storage.backend == "supabase":
        return SupabaseKnowledgeStore(
            url=storage.supabase_url,
            anon_key=storage.supabase_anon_key,
            timeout=storage.timeout,
            workspace_id=config.workspace_id,
        )
    else:
        raise ConfigurationError(f"Unknown storage backend: {storage.backend}")
