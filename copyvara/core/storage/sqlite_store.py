"""
SQLite knowledge store using aiosqlite.
"""

import json
from pathlib import Path
from typing import Any

import aiosqlite

from copyvara.core.storage.base import KnowledgeStore
from copyvara.models.document import Document
from copyvara.models.rows import parse_document_rows, parse_session_rows
from copyvara.models.session import QASession
from copyvara.utils.exceptions import UpstreamPersistenceError
from copyvara.utils.id_generator import generate_document_id
from copyvara.utils.logger import get_logger
from copyvara.utils.timeutils import utc_now

logger = get_logger(__name__)


class SQLiteKnowledgeStore(KnowledgeStore):
    """
    SQLite-based store for documents and QA history.

    Lists, action plans, segments and viz data are stored as JSON text columns and
    decoded by the boundary row schemas on read.
    """

    def __init__(self, db_path: str = "data/copyvara.db", workspace_id: str = "w1"):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file
            workspace_id: Workspace assigned to loaded documents
        """
        self.db_path = db_path
        self.workspace_id = workspace_id
        self.connection: aiosqlite.Connection | None = None

        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            self.connection = await aiosqlite.connect(self.db_path)
            self.connection.row_factory = aiosqlite.Row
            await self.connection.execute("PRAGMA journal_mode = WAL")
            await self.connection.commit()

    async def initialize(self) -> None:
        """Initialize database schema."""
        try:
            await self.connect()

            await self.connection.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    raw_text TEXT,
                    summary TEXT,
                    bullets TEXT DEFAULT '[]',
                    tags TEXT DEFAULT '[]',
                    action_plan TEXT,
                    segments TEXT DEFAULT '[]',
                    viz_data TEXT,
                    source_type TEXT DEFAULT 'manual',
                    created_at TEXT NOT NULL
                )
            """
            )

            await self.connection.execute(
                """
                CREATE TABLE IF NOT EXISTS qa_history (
                    id TEXT PRIMARY KEY,
                    question TEXT NOT NULL,
                    answer TEXT NOT NULL,
                    evidence TEXT DEFAULT '[]',
                    created_at TEXT NOT NULL
                )
            """
            )

            # Databases created before viz_data was stored
            await self._ensure_column("documents", "viz_data", "TEXT")

            await self.connection.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at)"
            )
            await self.connection.execute(
                "CREATE INDEX IF NOT EXISTS idx_qa_history_created ON qa_history(created_at)"
            )

            await self.connection.commit()
        except aiosqlite.Error as e:
            raise UpstreamPersistenceError(f"Failed to initialize SQLite store: {e}") from e

    # ═══════════════════════════════════════════════════════════
    # DOCUMENT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def fetch_documents(self, limit: int = 300) -> list[Document]:
        """Fetch documents ordered by created_at descending."""
        rows = await self._fetch_all(
            "SELECT * FROM documents ORDER BY created_at DESC LIMIT ?", (limit,)
        )
        return parse_document_rows(rows, self.workspace_id)

    async def save_document(self, document: Document) -> Document:
        """Insert a document; temporary ids are replaced by a permanent one."""
        persisted = document.model_copy(deep=True)
        if persisted.id.startswith("temp-"):
            persisted.id = generate_document_id()

        await self._execute(
            """
            INSERT OR REPLACE INTO documents (
                id, title, raw_text, summary, bullets, tags,
                action_plan, segments, viz_data, source_type, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                persisted.id,
                persisted.title,
                persisted.raw_text,
                persisted.summary_text,
                json.dumps(persisted.summary_bullets, ensure_ascii=False),
                json.dumps(persisted.topic_tags, ensure_ascii=False),
                persisted.action_plan.model_dump_json() if persisted.action_plan else None,
                json.dumps(
                    [s.model_dump() for s in persisted.segments], ensure_ascii=False
                ),
                persisted.viz_data.model_dump_json() if persisted.viz_data else None,
                persisted.source_type,
                (persisted.created_at or utc_now()).isoformat(),
            ),
        )

        logger.debug(f"Saved document {persisted.id}")
        return persisted

    # ═══════════════════════════════════════════════════════════
    # QA HISTORY OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def fetch_sessions(self, limit: int = 50) -> list[QASession]:
        """Fetch QA history ordered by created_at descending."""
        rows = await self._fetch_all(
            "SELECT * FROM qa_history ORDER BY created_at DESC LIMIT ?", (limit,)
        )
        return parse_session_rows(rows)

    async def save_session(self, session: QASession) -> None:
        """Insert a QA session."""
        await self._execute(
            """
            INSERT OR REPLACE INTO qa_history (id, question, answer, evidence, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                session.id,
                session.question,
                session.answer,
                json.dumps([e.model_dump() for e in session.evidence], ensure_ascii=False),
                session.created_at.isoformat(),
            ),
        )

    # ═══════════════════════════════════════════════════════════
    # MAINTENANCE
    # ═══════════════════════════════════════════════════════════

    async def clear(self) -> None:
        """Delete all documents and QA history."""
        await self._execute("DELETE FROM documents")
        await self._execute("DELETE FROM qa_history")
        logger.info("Cleared SQLite knowledge store")

    async def close(self) -> None:
        """Close connection."""
        if self.connection:
            await self.connection.close()
            self.connection = None

    # ═══════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════

    async def _ensure_column(self, table: str, column: str, column_type: str) -> None:
        cursor = await self.connection.execute(f"PRAGMA table_info({table})")
        columns = {row["name"] for row in await cursor.fetchall()}
        if column not in columns:
            await self.connection.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
            logger.info(f"Added column {table}.{column}")

    async def _fetch_all(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        try:
            await self.connect()
            cursor = await self.connection.execute(query, params)
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]
        except aiosqlite.Error as e:
            raise UpstreamPersistenceError(f"SQLite query failed: {e}") from e

    async def _execute(self, query: str, params: tuple = ()) -> None:
        try:
            await self.connect()
            await self.connection.execute(query, params)
            await self.connection.commit()
        except aiosqlite.Error as e:
            raise UpstreamPersistenceError(f"SQLite write failed: {e}") from e
