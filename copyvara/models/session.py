"""
QA session model: one question/answer exchange with its evidence.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from copyvara.utils.timeutils import utc_now


class EvidenceRef(BaseModel):
    """Reference to a document used to ground an answer."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Document ID")
    title: str = Field(default="", description="Document title")
    snippet: str = Field(default="", description="Leading text of summary or raw text")


class QASession(BaseModel):
    """
    Immutable question/answer record.

    Sessions are append-only and displayed most-recent-first.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique session ID (qa-xxx)")
    question: str = Field(..., description="Trimmed question text")
    answer: str = Field(..., description="Final (length-guaranteed) answer")
    evidence: tuple[EvidenceRef, ...] = Field(default=(), description="Ordered evidence")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
