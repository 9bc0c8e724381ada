"""
Supabase knowledge store over the PostgREST API (httpx).

Tables:
- documents: id, title, raw_text, summary, bullets, tags, action_plan, segments, viz_data, created_at
- qa_history: id, question, answer, created_at
"""

import re
from typing import Any

import httpx

from copyvara.core.storage.base import KnowledgeStore
from copyvara.models.document import Document
from copyvara.models.rows import parse_document_rows, parse_session_rows
from copyvara.models.session import QASession
from copyvara.utils.exceptions import ConfigurationError, UpstreamPersistenceError
from copyvara.utils.logger import get_logger

logger = get_logger(__name__)

CLIENT_VERSION = "copyvara-py-v0.3"

DOCUMENT_COLUMNS = "id,title,raw_text,summary,bullets,tags,action_plan,segments,viz_data,created_at"
SESSION_COLUMNS = "id,question,answer,created_at"

_DOUBLED_SCHEME = re.compile(r"^https?://https?://", re.IGNORECASE)


def normalize_supabase_url(raw_url: str | None) -> str:
    """
    Clean up a configured Supabase project URL.

    Trims whitespace, collapses an accidentally doubled scheme
    ("https://https://...") and drops a trailing slash.

    Args:
        raw_url: URL as configured

    Returns:
        Normalized https URL

    Raises:
        ConfigurationError: If the URL is missing or not https
    """
    url = (raw_url or "").strip()
    if not url:
        raise ConfigurationError("Supabase URL is not configured")

    url = _DOUBLED_SCHEME.sub("https://", url).rstrip("/")

    if not url.lower().startswith("https://"):
        raise ConfigurationError(f"Supabase URL must use https: {url}")

    return url


class SupabaseKnowledgeStore(KnowledgeStore):
    """
    Supabase-backed store.

    Uses the anon key for both the apikey header and the bearer token.
    Any transport error or non-success status becomes UpstreamPersistenceError.
    """

    def __init__(
        self,
        url: str | None,
        anon_key: str | None,
        timeout: float = 30.0,
        workspace_id: str = "w1",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize Supabase store.

        Args:
            url: Supabase project URL
            anon_key: Supabase anon key
            timeout: Request timeout in seconds
            workspace_id: Workspace assigned to loaded documents
            transport: Optional httpx transport (used by tests)
        """
        if not anon_key:
            raise ConfigurationError("Supabase anon key is not configured")

        self.url = normalize_supabase_url(url)
        self.workspace_id = workspace_id

        self.client = httpx.AsyncClient(
            base_url=f"{self.url}/rest/v1",
            headers={
                "Content-Type": "application/json",
                "apikey": anon_key,
                "Authorization": f"Bearer {anon_key}",
                "X-Client-Version": CLIENT_VERSION,
            },
            timeout=timeout,
            transport=transport,
        )

    async def initialize(self) -> None:
        """Tables are managed in Supabase; nothing to create."""
        logger.info(f"Using Supabase store at {self.url}")

    # ═══════════════════════════════════════════════════════════
    # DOCUMENT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def fetch_documents(self, limit: int = 300) -> list[Document]:
        """Fetch documents ordered by created_at descending."""
        rows = await self._request(
            "GET",
            "/documents",
            params={"select": DOCUMENT_COLUMNS, "order": "created_at.desc", "limit": str(limit)},
        )
        return parse_document_rows(rows if isinstance(rows, list) else [], self.workspace_id)

    async def save_document(self, document: Document) -> Document:
        """Insert a document and adopt the id Supabase assigns."""
        payload = {
            "title": document.title,
            "raw_text": document.raw_text,
            "summary": document.summary_text,
            "bullets": document.summary_bullets,
            "tags": document.topic_tags,
            "action_plan": document.action_plan.model_dump() if document.action_plan else None,
            "segments": [s.model_dump() for s in document.segments],
            "viz_data": document.viz_data.model_dump() if document.viz_data else None,
            "created_at": document.created_at.isoformat() if document.created_at else None,
        }

        rows = await self._request(
            "POST",
            "/documents",
            json=[payload],
            headers={"Prefer": "return=representation"},
        )

        persisted = document.model_copy(deep=True)
        if isinstance(rows, list) and rows and isinstance(rows[0], dict) and rows[0].get("id"):
            persisted.id = str(rows[0]["id"])
        else:
            raise UpstreamPersistenceError(
                "Supabase did not return the saved document",
                context={"response": str(rows)[:200]},
            )

        logger.debug(f"Saved document {persisted.id} to Supabase")
        return persisted

    # ═══════════════════════════════════════════════════════════
    # QA HISTORY OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def fetch_sessions(self, limit: int = 50) -> list[QASession]:
        """Fetch QA history ordered by created_at descending."""
        rows = await self._request(
            "GET",
            "/qa_history",
            params={"select": SESSION_COLUMNS, "order": "created_at.desc", "limit": str(limit)},
        )
        return parse_session_rows(rows if isinstance(rows, list) else [])

    async def save_session(self, session: QASession) -> None:
        """Insert a QA session (question and answer only)."""
        await self._request(
            "POST",
            "/qa_history",
            json=[
                {
                    "question": session.question,
                    "answer": session.answer,
                    "created_at": session.created_at.isoformat(),
                }
            ],
        )

    # ═══════════════════════════════════════════════════════════
    # MAINTENANCE
    # ═══════════════════════════════════════════════════════════

    async def clear(self) -> None:
        """Delete every row; PostgREST requires a filter, so match all ids."""
        await self._request("DELETE", "/documents", params={"id": "not.is.null"})
        await self._request("DELETE", "/qa_history", params={"id": "not.is.null"})
        logger.info("Cleared Supabase knowledge store")

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    # ═══════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Perform a REST call and decode the JSON body.

        Raises:
            UpstreamPersistenceError: On transport failure or non-2xx status
        """
        try:
            response = await self.client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase {method} {path} failed: {e}")
            raise UpstreamPersistenceError(f"Supabase request failed: {e}") from e

        if response.is_error:
            message = self._error_message(response)
            logger.error(f"Supabase {method} {path} returned {response.status_code}: {message}")
            raise UpstreamPersistenceError(
                message, context={"status_code": response.status_code, "path": path}
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if body.get("message"):
                return str(body["message"])
        return f"Supabase REST request failed ({response.status_code})"
