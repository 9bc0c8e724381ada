"""
Boundary schemas for persisted rows.

Rows coming back from a store are loosely shaped (nullable columns, JSON
blobs of unknown type). They are validated here and converted into typed
records with explicit defaults, so nothing downstream sees a missing field.
"""

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaError

from copyvara.models.document import ActionPlan, Document, DocumentStatus, KnowledgeSegment
from copyvara.models.session import EvidenceRef, QASession
from copyvara.models.visualization import VizData
from copyvara.utils.logger import get_logger
from copyvara.utils.timeutils import parse_timestamp, utc_now

logger = get_logger(__name__)

UNTITLED_DOCUMENT = "제목 없는 문서"
PERSISTED_KNOWLEDGE_SCORE = 50


def _decode_json(value: Any) -> Any:
    """Decode JSON text columns; pass other values through."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


def _valid_items(value: Any, model: type[BaseModel]) -> list[BaseModel]:
    """Validate each dict in a JSON list on its own; items that fail are dropped."""
    value = _decode_json(value)
    if not isinstance(value, list):
        return []

    items = []
    for item in value:
        if not isinstance(item, dict):
            continue
        try:
            items.append(model.model_validate(item))
        except SchemaError as e:
            logger.warning(f"Dropping malformed {model.__name__}: {e.error_count()} errors")
    return items


def _valid_object(value: Any, model: type[BaseModel]) -> BaseModel | None:
    value = _decode_json(value)
    if not isinstance(value, dict):
        return None
    try:
        return model.model_validate(value)
    except SchemaError as e:
        logger.warning(f"Dropping malformed {model.__name__}: {e.error_count()} errors")
        return None


def _string_list(value: Any) -> list[str]:
    value = _decode_json(value)
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None and str(v)]


class DocumentRow(BaseModel):
    """Persisted document row (documents table)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    raw_text: str = ""
    summary: str = ""
    bullets: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    action_plan: ActionPlan | None = None
    segments: list[KnowledgeSegment] = Field(default_factory=list)
    viz_data: VizData | None = None
    source_type: str = "manual"
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("title", "raw_text", "summary", "source_type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("bullets", "tags", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        return _string_list(value)

    @field_validator("action_plan", mode="before")
    @classmethod
    def _coerce_plan(cls, value: Any) -> ActionPlan | None:
        return _valid_object(value, ActionPlan)

    @field_validator("segments", mode="before")
    @classmethod
    def _coerce_segments(cls, value: Any) -> list[KnowledgeSegment]:
        return _valid_items(value, KnowledgeSegment)

    @field_validator("viz_data", mode="before")
    @classmethod
    def _coerce_viz(cls, value: Any) -> VizData | None:
        return _valid_object(value, VizData)

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    def to_document(self, workspace_id: str = "w1") -> Document:
        """
        Convert to a typed Document.

        Persisted documents are always analyzed, so status is DONE.
        """
        source_type = self.source_type.lower()
        if source_type not in ("manual", "chatgpt", "gemini", "claude", "url"):
            source_type = "manual"

        return Document(
            id=self.id,
            workspace_id=workspace_id,
            source_type=source_type,
            title=self.title or UNTITLED_DOCUMENT,
            raw_text=self.raw_text,
            summary_text=self.summary,
            summary_bullets=self.bullets,
            topic_tags=self.tags,
            action_plan=self.action_plan,
            segments=self.segments,
            viz_data=self.viz_data,
            knowledge_score=PERSISTED_KNOWLEDGE_SCORE,
            status=DocumentStatus.DONE,
            created_at=self.created_at or utc_now(),
        )


class QASessionRow(BaseModel):
    """Persisted QA history row (qa_history table)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    question: str = ""
    answer: str = ""
    evidence: list[EvidenceRef] = Field(default_factory=list)
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("question", "answer", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("evidence", mode="before")
    @classmethod
    def _coerce_evidence(cls, value: Any) -> list[EvidenceRef]:
        return _valid_items(value, EvidenceRef)

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    def to_session(self) -> QASession:
        """Convert to a typed QASession."""
        return QASession(
            id=self.id,
            question=self.question,
            answer=self.answer,
            evidence=tuple(self.evidence),
            created_at=self.created_at or utc_now(),
        )


def parse_document_rows(rows: list[dict[str, Any]], workspace_id: str = "w1") -> list[Document]:
    """
    Validate a batch of document rows.

    Rows without an id or failing validation are skipped with a warning;
    the rest of the batch is kept.

    Args:
        rows: Raw rows from a store
        workspace_id: Workspace to assign

    Returns:
        Typed documents in input order
    """
    documents = []
    for row in rows or []:
        if not isinstance(row, dict) or row.get("id") is None:
            logger.warning(f"Skipping malformed document row: {row!r:.120}")
            continue
        try:
            documents.append(DocumentRow.model_validate(row).to_document(workspace_id))
        except SchemaError as e:
            logger.warning(f"Skipping invalid document row {row['id']}: {e.error_count()} errors")
    return documents


def parse_session_rows(rows: list[dict[str, Any]]) -> list[QASession]:
    """
    Validate a batch of QA history rows.

    Rows without an id or failing validation are skipped with a warning.

    Args:
        rows: Raw rows from a store

    Returns:
        Typed sessions in input order
    """
    sessions = []
    for row in rows or []:
        if not isinstance(row, dict) or row.get("id") is None:
            logger.warning(f"Skipping malformed QA history row: {row!r:.120}")
            continue
        try:
            sessions.append(QASessionRow.model_validate(row).to_session())
        except SchemaError as e:
            logger.warning(f"Skipping invalid QA history row {row['id']}: {e.error_count()} errors")
    return sessions
