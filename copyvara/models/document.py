"""
Document model for captured knowledge.

A Document is created when the user submits raw text. It is filled in place
when the external analysis completes (title, summary, tags, plan) and its
status only moves forward: queued -> processing -> done | failed.
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from copyvara.models.visualization import VizData
from copyvara.utils.exceptions import ValidationError
from copyvara.utils.timeutils import utc_now


class DocumentStatus(str, Enum):
    """Document lifecycle status."""

    QUEUED = "queued"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


# Allowed forward moves; done and failed are terminal
_TRANSITIONS: dict[DocumentStatus, set[DocumentStatus]] = {
    DocumentStatus.QUEUED: {
        DocumentStatus.PROCESSING,
        DocumentStatus.DONE,
        DocumentStatus.FAILED,
    },
    DocumentStatus.PROCESSING: {DocumentStatus.DONE, DocumentStatus.FAILED},
    DocumentStatus.DONE: set(),
    DocumentStatus.FAILED: set(),
}

SourceType = Literal["manual", "chatgpt", "gemini", "claude", "url"]


class KnowledgeSegment(BaseModel):
    """A refined insight extracted from a region of the raw text."""

    category: str = Field(default="", description="Broad area, e.g. Frontend, Marketing")
    topic: str = Field(default="", description="Specific topic of the segment")
    content: str = Field(default="", description="The refined insight")
    relevance: int = Field(default=0, description="Relevance score 0-100")


class ActionItem(BaseModel):
    """One step of an action plan."""

    step: str = Field(default="", description="Step name")
    description: str = Field(default="", description="Detailed instructions")
    priority: str = Field(default="Medium", description="High, Medium or Low")


class ApplicationPoint(BaseModel):
    """Where and how the knowledge applies."""

    context: str = ""
    suggestion: str = ""


class ActionPlan(BaseModel):
    """Action plan derived from a document."""

    goal: str = ""
    steps: list[ActionItem] = Field(default_factory=list)
    applications: list[ApplicationPoint] = Field(default_factory=list)


class Document(BaseModel):
    """
    Unit of captured knowledge.

    Invariants:
    - id is unique within the workspace
    - created_at is set once and never mutated
    - status transitions only move forward (see advance())
    """

    # Core identity
    id: str = Field(..., description="Unique document ID")
    workspace_id: str = Field(default="w1", description="Owning workspace")
    source_type: SourceType = Field(default="manual", description="Where the text came from")

    # Content
    title: str = Field(default="", description="Document title")
    raw_text: str = Field(default="", description="Text as pasted by the user")
    summary_text: str | None = Field(default=None, description="3-5 line summary")
    summary_bullets: list[str] = Field(default_factory=list, description="Key points")
    topic_tags: list[str] = Field(default_factory=list, description="Ordered topic tags")
    action_plan: ActionPlan | None = Field(default=None, description="Derived action plan")
    segments: list[KnowledgeSegment] = Field(default_factory=list, description="Extracted segments")
    viz_data: VizData | None = Field(default=None, description="Graph, timeline, topic map, quadrant")

    # Metrics
    knowledge_score: int = Field(default=0, ge=0, le=100, description="Quantified knowledge 0-100")

    # Status
    status: DocumentStatus = Field(default=DocumentStatus.QUEUED, description="Lifecycle status")
    error_message: str | None = Field(default=None, description="Diagnostic for failed analysis")

    # Timestamps
    created_at: datetime | None = Field(default_factory=utc_now, description="Creation timestamp")

    @property
    def content_preview(self) -> str:
        """
        Summary if present, otherwise raw text.

        Returns:
            Text used for snippets and supplementary answer lines
        """
        return self.summary_text or self.raw_text or ""

    def snippet(self, length: int = 180) -> str:
        """First `length` characters of the content preview."""
        return self.content_preview[:length]

    def advance(self, status: DocumentStatus) -> None:
        """
        Move the document to a later lifecycle status.

        Args:
            status: Target status

        Raises:
            ValidationError: If the move is backward or from a terminal status
        """
        if status not in _TRANSITIONS[self.status]:
            raise ValidationError(
                f"Invalid status transition: {self.status.value} -> {status.value}",
                context={"document_id": self.id},
            )
        self.status = status

    def is_done(self) -> bool:
        """
        Check if analysis completed.

        Returns:
            True if status is DONE
        """
        return self.status == DocumentStatus.DONE
