"""
Transient retrieval results. Computed per ask; never persisted.
"""

from pydantic import BaseModel, Field

from copyvara.models.document import Document


class RetrievalScore(BaseModel):
    """Sub-scores for one (question, document) pair and their weighted total."""

    lexical: float = Field(..., ge=0.0, le=1.0, description="Query token overlap with enriched text")
    tag_overlap: float = Field(..., ge=0.0, le=1.0, description="Query token overlap with tags")
    recency: float = Field(..., ge=0.0, le=1.0, description="Age decay score")
    total: float = Field(..., ge=0.0, le=1.0, description="Weighted total")


class RankedDocument(BaseModel):
    """A document with its retrieval score."""

    document: Document
    score: RetrievalScore
