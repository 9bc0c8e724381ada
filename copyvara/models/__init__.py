"""
Data models for Copyvara.

Core models:
- Document: captured knowledge with lifecycle status
- ActionPlan, ActionItem, ApplicationPoint, KnowledgeSegment: analysis output
- MemoryItem, MemoryCategory: derived fragments used to enrich scoring
- QASession, EvidenceRef: append-only question/answer history
- RetrievalScore, RankedDocument: transient ranking results
- DocumentRow, QASessionRow: boundary schemas for persisted rows
- LinkCandidate, Edge, GraphNode: document graph
- VizData: visualization payload from analysis
"""

from copyvara.models.document import (
    ActionItem,
    ActionPlan,
    ApplicationPoint,
    Document,
    DocumentStatus,
    KnowledgeSegment,
)
from copyvara.models.graph import Edge, EdgeStatus, GraphNode, LinkCandidate, LinkStatus
from copyvara.models.memory import MemoryCategory, MemoryItem
from copyvara.models.retrieval import RankedDocument, RetrievalScore
from copyvara.models.rows import (
    DocumentRow,
    QASessionRow,
    parse_document_rows,
    parse_session_rows,
)
from copyvara.models.session import EvidenceRef, QASession
from copyvara.models.visualization import (
    ConceptEdge,
    ConceptGraph,
    ConceptNode,
    QuadrantPoint,
    TimelineEvent,
    TopicGroup,
    VizData,
)

__all__ = [
    # Document models
    "Document",
    "DocumentStatus",
    "ActionPlan",
    "ActionItem",
    "ApplicationPoint",
    "KnowledgeSegment",
    # Memory models
    "MemoryItem",
    "MemoryCategory",
    # Session models
    "QASession",
    "EvidenceRef",
    # Retrieval models
    "RetrievalScore",
    "RankedDocument",
    # Graph models
    "LinkCandidate",
    "LinkStatus",
    "Edge",
    "EdgeStatus",
    "GraphNode",
    # Visualization models
    "VizData",
    "ConceptGraph",
    "ConceptNode",
    "ConceptEdge",
    "TimelineEvent",
    "TopicGroup",
    "QuadrantPoint",
    # Boundary schemas
    "DocumentRow",
    "QASessionRow",
    "parse_document_rows",
    "parse_session_rows",
]
