"""
Copyvara FastAPI Application

A REST API server for the Copyvara knowledge workspace.
Provides endpoints for capturing documents, asking questions over them,
inspecting the ranked evidence behind an answer, and reviewing the
suggested links between documents.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from copyvara import __version__
from copyvara.config import Config
from copyvara.core.factory import LLMFactory
from copyvara.core.storage import create_knowledge_store
from copyvara.models import Document, Edge, GraphNode, LinkCandidate, MemoryItem, QASession
from copyvara.services.workspace import KnowledgeWorkspace, LastError
from copyvara.utils.exceptions import CopyvaraError, NotFoundError
from copyvara.utils.logger import get_logger, setup_logging

# Global workspace instance
workspace: KnowledgeWorkspace | None = None
logger = get_logger(__name__)

# last_error kind -> HTTP status
ERROR_STATUS = {
    "ValidationError": 400,
    "NotFoundError": 404,
    "UpstreamGenerationError": 502,
    "UpstreamPersistenceError": 502,
    "ConfigurationError": 500,
}


# Pydantic models for API
class AddDocumentRequest(BaseModel):
    """Request model for adding a document."""

    text: str = Field(..., description="Pasted text to analyze")


class AskRequest(BaseModel):
    """Request model for asking a question."""

    question: str = Field(..., description="Question text")


class RetrieveRequest(BaseModel):
    """Request model for ranked retrieval."""

    question: str = Field(..., description="Question text")
    limit: int = Field(default=8, ge=1, le=100, description="Max results")


class RetrieveResult(BaseModel):
    """Ranked document with score breakdown."""

    id: str
    title: str
    snippet: str
    lexical: float
    tag_overlap: float
    recency: float
    total: float


class ResetRequest(BaseModel):
    """Request model for resetting the workspace."""

    purge: bool = Field(default=False, description="Also delete persisted data")


class UpdateEdgeRequest(BaseModel):
    """Request model for relabeling an edge."""

    relation: str = Field(..., description="New relation label")


class GraphResponse(BaseModel):
    """Documents as nodes plus the edges between them."""

    nodes: list[GraphNode]
    edges: list[Edge]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    workspace_initialized: bool
    documents: int
    sessions: int
    last_error: LastError | None = None


def _require_workspace() -> KnowledgeWorkspace:
    if not workspace:
        raise HTTPException(status_code=503, detail="Workspace not initialized")
    return workspace


def _status_for(error: CopyvaraError) -> int:
    return ERROR_STATUS.get(type(error).__name__, 500)


def _raise_last_error(ws: KnowledgeWorkspace) -> None:
    error = ws.last_error
    if error is None:
        raise HTTPException(status_code=500, detail="Unknown error")
    raise HTTPException(status_code=ERROR_STATUS.get(error.kind, 500), detail=error.message)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global workspace

    # Load configuration from environment or use defaults
    config = Config.from_env()

    # Initialize logging with config
    setup_logging(
        level=config.logging.level,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir,
        file_rotation=config.logging.file_rotation,
        file_retention=config.logging.file_retention,
        compression=config.logging.compression,
        serialize=config.logging.serialize,
        workspace_id=config.workspace_id,
    )

    logger.info("Starting Copyvara server")
    logger.info(
        f"Configuration: LLM={config.llm.provider}/{config.llm.model}, "
        f"Storage={config.storage.backend}, Evidence={config.retrieval.evidence_mode}"
    )

    logger.info("Creating LLM provider")
    llm = LLMFactory.create(config.llm)

    logger.info("Creating knowledge store")
    store = create_knowledge_store(config)
    await store.initialize()

    workspace = KnowledgeWorkspace(llm=llm, store=store, config=config)
    await workspace.load()
    logger.info("Copyvara workspace initialized")

    yield

    # Cleanup
    logger.info("Shutting down Copyvara server")
    await store.close()
    await llm.close()
    workspace = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="Copyvara API",
    description="Personal knowledge capture with evidence-backed answers",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if workspace else "initializing",
        workspace_initialized=workspace is not None,
        documents=len(workspace.documents) if workspace else 0,
        sessions=len(workspace.qa_sessions) if workspace else 0,
        last_error=workspace.last_error if workspace else None,
    )


# Document endpoints
@app.get("/documents", response_model=list[Document])
async def list_documents():
    """List documents, most recent first, including in-flight and failed ones."""
    return _require_workspace().documents


@app.get("/documents/{document_id}", response_model=Document)
async def get_document(document_id: str):
    """Retrieve a specific document by ID."""
    try:
        return _require_workspace().get_document(document_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e


@app.post("/documents", response_model=Document)
async def add_document(request: AddDocumentRequest):
    """
    Capture pasted text as a document.

    The text is analyzed into title, summary, bullets, tags, action plan
    and segments, persisted, and indexed as memory items. A failed analysis
    or save is reported with the error; the failed document stays listed.
    """
    ws = _require_workspace()
    document = await ws.add_document(request.text)

    if document is None or ws.last_error is not None:
        _raise_last_error(ws)

    return document


# Question endpoints
@app.post("/ask", response_model=QASession)
async def ask(request: AskRequest):
    """
    Answer a question from the stored knowledge.

    The answer is grounded in the retrieved evidence documents and is
    always at least 500 characters long. A failed history save still
    returns the session.
    """
    ws = _require_workspace()
    session = await ws.ask_question(request.question)

    if session is None:
        _raise_last_error(ws)

    if ws.last_error is not None:
        logger.warning(f"Session returned with error: {ws.last_error.message}")

    return session


@app.get("/sessions", response_model=list[QASession])
async def list_sessions():
    """QA history, most recent first."""
    return _require_workspace().qa_sessions


@app.get("/memory-items", response_model=list[MemoryItem])
async def list_memory_items():
    """Derived memory items for all documents."""
    return _require_workspace().memory_items


@app.post("/retrieve", response_model=list[RetrieveResult])
async def retrieve_documents(request: RetrieveRequest):
    """Rank documents for a question without generating an answer."""
    ws = _require_workspace()
    ranked = ws.rank(request.question, limit=request.limit)

    return [
        RetrieveResult(
            id=r.document.id,
            title=r.document.title,
            snippet=r.document.snippet(),
            lexical=r.score.lexical,
            tag_overlap=r.score.tag_overlap,
            recency=r.score.recency,
            total=r.score.total,
        )
        for r in ranked
    ]


# Graph endpoints
@app.get("/graph", response_model=GraphResponse)
async def get_graph():
    """Document nodes and the candidate and confirmed edges between them."""
    ws = _require_workspace()
    return GraphResponse(nodes=ws.nodes, edges=ws.edges)


@app.get("/candidates", response_model=list[LinkCandidate])
async def list_candidates():
    """Suggested links awaiting review."""
    return _require_workspace().candidates


@app.post("/candidates/{candidate_id}/accept")
async def accept_candidate(candidate_id: str):
    """Confirm a suggested link."""
    try:
        _require_workspace().accept_candidate(candidate_id)
    except CopyvaraError as e:
        raise HTTPException(status_code=_status_for(e), detail=e.message) from e
    return {"status": "accepted", "candidate_id": candidate_id}


@app.post("/candidates/{candidate_id}/reject")
async def reject_candidate(candidate_id: str):
    """Discard a suggested link and its candidate edge."""
    try:
        _require_workspace().reject_candidate(candidate_id)
    except CopyvaraError as e:
        raise HTTPException(status_code=_status_for(e), detail=e.message) from e
    return {"status": "rejected", "candidate_id": candidate_id}


@app.patch("/edges/{edge_id}", response_model=Edge)
async def update_edge(edge_id: str, request: UpdateEdgeRequest):
    """Relabel an edge."""
    try:
        return _require_workspace().update_edge(edge_id, request.relation)
    except CopyvaraError as e:
        raise HTTPException(status_code=_status_for(e), detail=e.message) from e


@app.delete("/edges/{edge_id}")
async def delete_edge(edge_id: str):
    """Remove an edge."""
    try:
        _require_workspace().delete_edge(edge_id)
    except CopyvaraError as e:
        raise HTTPException(status_code=_status_for(e), detail=e.message) from e
    return {"status": "deleted", "edge_id": edge_id}


# Workspace endpoints
@app.post("/workspace/reset")
async def reset_workspace(request: ResetRequest):
    """Clear the workspace; with purge, also delete persisted data."""
    ws = _require_workspace()
    await ws.reset(purge=request.purge)

    if ws.last_error is not None:
        _raise_last_error(ws)

    return {"status": "reset", "purge": request.purge}


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Copyvara API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
