"""
Memory items: small-grained knowledge fragments derived from a document.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from copyvara.utils.timeutils import utc_now


class MemoryCategory(str, Enum):
    """Kinds of derived memory items."""

    SUMMARY = "summary"
    FACT = "fact"
    ACTION = "action"
    SEGMENT = "segment"


class MemoryItem(BaseModel):
    """
    Derived fragment owned by exactly one Document.

    Items are never edited by the user: the whole set is rebuilt whenever
    the document collection is (re)loaded. A document_id may dangle after
    its document disappears; retrieval ignores such items.
    """

    id: str = Field(..., description="Deterministic ID (mem-<document_id>-<category>[-N])")
    document_id: str = Field(..., description="Owning document ID")
    title: str = Field(default="", description="Display title")
    category: MemoryCategory = Field(..., description="Memory category")
    content: str = Field(default="", description="Fragment text")
    tags: list[str] = Field(default_factory=list, description="Tags inherited from the document")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update timestamp")
