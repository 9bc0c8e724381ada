"""
Workspace coordinator.

Owns the application state (documents, memory items, QA history, question
history, link candidates and edges, last error) and runs the add-document
and ask-question flows.
Errors from those flows are recorded as `last_error` instead of being
raised to callers.
"""

import asyncio

from pydantic import BaseModel, Field

from copyvara.config import Config
from copyvara.core.llm.base import LLMProvider
from copyvara.core.storage.base import KnowledgeStore
from copyvara.core.tokenizer import TokenCounter
from copyvara.models.document import Document, DocumentStatus
from copyvara.models.graph import Edge, GraphNode, LinkCandidate
from copyvara.models.memory import MemoryItem
from copyvara.models.retrieval import RankedDocument
from copyvara.models.session import QASession
from copyvara.services import graph as link_graph
from copyvara.services.analyzer import DocumentAnalyzer, detect_source_type
from copyvara.services.memory_index import rebuild_all, replace_document_items
from copyvara.services.qa import QuestionAnswerer, validate_question
from copyvara.services.retriever import retrieve
from copyvara.services.sessions import SessionStore, evidence_refs
from copyvara.utils.exceptions import (
    CopyvaraError,
    NotFoundError,
    UpstreamGenerationError,
    UpstreamPersistenceError,
    ValidationError,
)
from copyvara.utils.id_generator import generate_temp_document_id
from copyvara.utils.logger import get_logger
from copyvara.utils.timeutils import parse_timestamp

logger = get_logger(__name__)

PROCESSING_TITLE = "AI 분석 중..."
FAILED_TITLE = "분석 실패"


class LastError(BaseModel):
    """Most recent user-visible failure."""

    kind: str = Field(..., description="Exception class name")
    message: str = Field(..., description="User-visible message")


class WorkspaceState(BaseModel):
    """Mutable application state owned by one KnowledgeWorkspace."""

    documents: list[Document] = Field(default_factory=list)
    memory_items: list[MemoryItem] = Field(default_factory=list)
    question_history: list[str] = Field(default_factory=list)
    candidates: list[LinkCandidate] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    last_error: LastError | None = None


def merge_with_transient(persisted: list[Document], current: list[Document]) -> list[Document]:
    """
    Merge freshly loaded documents with local ones still in flight.

    Non-done local documents are kept; a persisted document with the same id
    wins. Result is ordered by created_at descending.
    """
    merged: dict[str, Document] = {}
    for document in [*(d for d in current if not d.is_done()), *persisted]:
        merged[document.id] = document

    def sort_key(doc: Document) -> float:
        created = parse_timestamp(doc.created_at)
        return created.timestamp() if created else float("-inf")

    return sorted(merged.values(), key=sort_key, reverse=True)


class KnowledgeWorkspace:
    """
    Coordinates the knowledge workspace.

    Features:
    - Load documents and history from the knowledge store
    - Add documents (analysis, persistence, memory index update)
    - Answer questions with evidence and record sessions
    - Suggest, review and edit links between documents
    - Reset the workspace
    """

    def __init__(self, llm: LLMProvider, store: KnowledgeStore, config: Config | None = None):
        """
        Initialize workspace.

        Args:
            llm: Text-generation provider
            store: Document and history persistence
            config: Configuration object
        """
        self.llm = llm
        self.store = store
        self.config = config or Config()

        self.state = WorkspaceState()
        self.sessions = SessionStore()

        self.analyzer = DocumentAnalyzer(
            llm=llm,
            token_counter=TokenCounter(self.config.tokenizer),
            max_input_tokens=self.config.analysis.max_input_tokens,
            max_tokens=self.config.analysis.max_tokens,
        )
        self.answerer = QuestionAnswerer(
            llm=llm,
            config=self.config.retrieval,
            max_tokens=self.config.llm.max_tokens,
            temperature=self.config.llm.temperature,
        )

    # ═══════════════════════════════════════════════════════════
    # STATE ACCESS
    # ═══════════════════════════════════════════════════════════

    @property
    def documents(self) -> list[Document]:
        return self.state.documents

    @property
    def memory_items(self) -> list[MemoryItem]:
        return self.state.memory_items

    @property
    def qa_sessions(self) -> list[QASession]:
        return self.sessions.sessions

    @property
    def last_error(self) -> LastError | None:
        return self.state.last_error

    @property
    def candidates(self) -> list[LinkCandidate]:
        return self.state.candidates

    @property
    def edges(self) -> list[Edge]:
        return self.state.edges

    @property
    def nodes(self) -> list[GraphNode]:
        return link_graph.build_nodes(self.state.documents)

    def get_document(self, document_id: str) -> Document:
        """
        Look up a document by id.

        Raises:
            NotFoundError: If no document has this id
        """
        for document in self.state.documents:
            if document.id == document_id:
                return document
        raise NotFoundError(f"Document not found: {document_id}")

    def clear_error(self) -> None:
        self.state.last_error = None

    def _record_error(self, error: CopyvaraError) -> None:
        self.state.last_error = LastError(kind=type(error).__name__, message=error.message)

    # ═══════════════════════════════════════════════════════════
    # LOAD
    # ═══════════════════════════════════════════════════════════

    async def load(self) -> None:
        """
        Load documents and QA history.

        A failed fetch leaves its collection empty and records the error;
        the workspace stays usable with zero documents.
        """
        retrieval = self.config.retrieval
        documents_result, sessions_result = await asyncio.gather(
            self.store.fetch_documents(retrieval.document_load_limit),
            self.store.fetch_sessions(retrieval.history_load_limit),
            return_exceptions=True,
        )

        if isinstance(documents_result, BaseException):
            logger.error(f"Failed to load documents: {documents_result}")
            self._record_error(self._as_persistence_error(documents_result))
            documents_result = []

        if isinstance(sessions_result, BaseException):
            logger.error(f"Failed to load QA history: {sessions_result}")
            self._record_error(self._as_persistence_error(sessions_result))
            sessions_result = []

        self.state.documents = merge_with_transient(documents_result, self.state.documents)
        self.sessions.load(sessions_result)
        self.state.memory_items = rebuild_all(
            self.state.documents, max_items=retrieval.max_memory_items
        )

        logger.info(
            f"Workspace loaded: {len(self.state.documents)} documents, "
            f"{len(self.sessions)} sessions, {len(self.state.memory_items)} memory items"
        )

    @staticmethod
    def _as_persistence_error(error: BaseException) -> UpstreamPersistenceError:
        if isinstance(error, UpstreamPersistenceError):
            return error
        if isinstance(error, CopyvaraError):
            return UpstreamPersistenceError(error.message, context=error.context)
        return UpstreamPersistenceError(f"데이터 로드 실패: {error}")

    # ═══════════════════════════════════════════════════════════
    # ADD DOCUMENT
    # ═══════════════════════════════════════════════════════════

    async def add_document(self, text: str) -> Document | None:
        """
        Analyze and store pasted text.

        A placeholder document (status processing) is shown immediately.
        On success it becomes done with the persisted id; on analysis or save
        failure it stays visible as failed with the error as its body.

        Args:
            text: Raw text

        Returns:
            The resulting document, or None if the input was empty
        """
        self.clear_error()
        if not text or not text.strip():
            self._record_error(ValidationError("Document text cannot be empty"))
            return None

        placeholder = Document(
            id=generate_temp_document_id(),
            workspace_id=self.config.workspace_id,
            source_type=detect_source_type(text),
            title=PROCESSING_TITLE,
            raw_text=text,
            status=DocumentStatus.PROCESSING,
        )
        self.state.documents.insert(0, placeholder)

        try:
            analysis = await self.analyzer.analyze(text)
            analysis.apply_to(placeholder)
            persisted = await self.store.save_document(placeholder)
        except (UpstreamGenerationError, UpstreamPersistenceError, ValidationError) as e:
            logger.bind(document_id=placeholder.id, error_type=type(e).__name__).error(
                f"Add document failed: {e.message}"
            )
            self._mark_failed(placeholder, e.message)
            self._record_error(e)
            return placeholder

        persisted.advance(DocumentStatus.DONE)
        self._replace_document(placeholder, persisted)
        self.state.memory_items = replace_document_items(
            self.state.memory_items,
            persisted,
            max_items=self.config.retrieval.max_memory_items,
        )
        self._suggest_links(persisted)

        logger.bind(document_id=persisted.id, tags=persisted.topic_tags).info(
            f"Document added: {persisted.id}"
        )
        return persisted

    @staticmethod
    def _mark_failed(document: Document, message: str) -> None:
        document.advance(DocumentStatus.FAILED)
        document.title = FAILED_TITLE
        document.summary_text = message
        document.error_message = message

    def _replace_document(self, old: Document, new: Document) -> None:
        for idx, document in enumerate(self.state.documents):
            if document is old:
                self.state.documents[idx] = new
                return
        self.state.documents.insert(0, new)

    # ═══════════════════════════════════════════════════════════
    # ASK
    # ═══════════════════════════════════════════════════════════

    def rank(self, question: str, limit: int | None = None) -> list[RankedDocument]:
        """Relevance-ranked analyzed documents for a question (no generation)."""
        return retrieve(
            question,
            [d for d in self.state.documents if d.is_done()],
            list(self.state.memory_items),
            limit=self.config.retrieval.limit if limit is None else limit,
        )

    def _remember_question(self, question: str) -> None:
        history = [question, *(q for q in self.state.question_history if q != question)]
        self.state.question_history = history[: self.config.retrieval.question_history_limit]

    async def ask_question(self, question: str) -> QASession | None:
        """
        Answer a question and record the session.

        Validation and generation failures are recorded as last_error and
        leave the QA history untouched. A failed history save keeps the
        session locally and records the error.

        Args:
            question: Raw question text

        Returns:
            The new session, or None on failure
        """
        self.clear_error()

        try:
            trimmed = validate_question(question)
        except ValidationError as e:
            self._record_error(e)
            return None

        self._remember_question(trimmed)

        try:
            # Snapshot: a concurrent load becomes visible to the next ask only
            result = await self.answerer.answer(
                trimmed, list(self.state.documents), list(self.state.memory_items)
            )
        except (ValidationError, UpstreamGenerationError) as e:
            logger.bind(error_type=type(e).__name__).warning(f"Ask failed: {e.message}")
            self._record_error(e)
            return None

        session = self.sessions.append_session(
            result.question, result.answer, evidence_refs(result.evidence)
        )

        try:
            await self.store.save_session(session)
        except UpstreamPersistenceError as e:
            logger.error(f"Failed to save QA session {session.id}: {e.message}")
            self._record_error(e)

        return session

    # ═══════════════════════════════════════════════════════════
    # LINKS
    # ═══════════════════════════════════════════════════════════

    def _suggest_links(self, document: Document) -> None:
        links = self.config.links
        suggested = link_graph.suggest_links(
            document,
            self.state.documents,
            self.state.edges,
            max_candidates=links.max_candidates,
            min_shared_tags=links.min_shared_tags,
        )
        self.state.candidates.extend(suggested)
        self.state.edges.extend(link_graph.candidate_edge(c) for c in suggested)

    def accept_candidate(self, candidate_id: str) -> None:
        """
        Confirm a suggested link.

        Raises:
            NotFoundError: If no candidate has this id
        """
        self.state.candidates, self.state.edges = link_graph.accept_candidate(
            self.state.candidates, self.state.edges, candidate_id
        )

    def reject_candidate(self, candidate_id: str) -> None:
        """
        Discard a suggested link and its candidate edge.

        Raises:
            NotFoundError: If no candidate has this id
        """
        self.state.candidates, self.state.edges = link_graph.reject_candidate(
            self.state.candidates, self.state.edges, candidate_id
        )

    def delete_edge(self, edge_id: str) -> None:
        self.state.edges = link_graph.delete_edge(self.state.edges, edge_id)

    def update_edge(self, edge_id: str, relation: str) -> Edge:
        """
        Relabel an edge.

        Raises:
            ValidationError: If the relation is blank
            NotFoundError: If no edge has this id
        """
        self.state.edges = link_graph.update_edge(self.state.edges, edge_id, relation)
        return next(e for e in self.state.edges if e.id == edge_id)

    # ═══════════════════════════════════════════════════════════
    # RESET
    # ═══════════════════════════════════════════════════════════

    async def reset(self, purge: bool = False) -> None:
        """
        Clear every collection.

        Args:
            purge: Also delete persisted documents and history
        """
        if purge:
            try:
                await self.store.clear()
            except UpstreamPersistenceError as e:
                self._record_error(e)
                return

        self.state = WorkspaceState()
        self.sessions.clear()
        logger.bind(purge=purge).info("Workspace reset")
