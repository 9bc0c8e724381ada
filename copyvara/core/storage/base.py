"""
Base interface for document and QA history persistence.

Stores return typed records; implementations validate rows at the boundary
(see copyvara.models.rows) and wrap transport failures in
UpstreamPersistenceError.
"""

from abc import ABC, abstractmethod

from copyvara.models.document import Document
from copyvara.models.session import QASession


class KnowledgeStore(ABC):
    """Abstract base class for knowledge persistence."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the store (create tables, open clients)."""
        pass

    # ═══════════════════════════════════════════════════════════
    # DOCUMENT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def fetch_documents(self, limit: int = 300) -> list[Document]:
        """
        Fetch persisted documents, newest first.

        Args:
            limit: Maximum number of documents

        Returns:
            Documents ordered by created_at descending
        """
        pass

    @abstractmethod
    async def save_document(self, document: Document) -> Document:
        """
        Append an analyzed document.

        Args:
            document: Document to persist

        Returns:
            The document as persisted (id assigned by the store)
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # QA HISTORY OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def fetch_sessions(self, limit: int = 50) -> list[QASession]:
        """
        Fetch QA history, newest first.

        Args:
            limit: Maximum number of sessions

        Returns:
            Sessions ordered by created_at descending
        """
        pass

    @abstractmethod
    async def save_session(self, session: QASession) -> None:
        """
        Append a QA session.

        Args:
            session: Session to persist
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # MAINTENANCE
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def clear(self) -> None:
        """Delete all documents and QA history (workspace reset)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass
