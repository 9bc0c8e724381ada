"""
Persistence for documents and QA history.

Backends:
- SQLite (aiosqlite), local default
- Supabase (PostgREST over httpx)
"""

from copyvara.core.storage.base import KnowledgeStore
from copyvara.core.storage.factory import create_knowledge_store
from copyvara.core.storage.sqlite_store import SQLiteKnowledgeStore
from copyvara.core.storage.supabase_store import SupabaseKnowledgeStore, normalize_supabase_url

__all__ = [
    "KnowledgeStore",
    "SQLiteKnowledgeStore",
    "SupabaseKnowledgeStore",
    "create_knowledge_store",
    "normalize_supabase_url",
]
