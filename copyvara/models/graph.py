"""
Knowledge graph models.

Documents are the graph's nodes. Links between documents start as
suggested LinkCandidates, each mirrored by a candidate Edge; accepting a
candidate confirms its edge, rejecting it removes both.
"""

from enum import Enum

from pydantic import BaseModel, Field

from copyvara.models.document import DocumentStatus


class LinkStatus(str, Enum):
    """Review status of a suggested link."""

    CANDIDATE = "candidate"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class EdgeStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANDIDATE = "candidate"


class LinkCandidate(BaseModel):
    """Suggested link from one document to another, awaiting review."""

    id: str = Field(..., description="Unique candidate ID")
    from_id: str = Field(..., description="Document the suggestion was made for")
    to_id: str = Field(..., description="Suggested related document")
    to_title: str = Field(default="", description="Title of the target document")
    to_snippet: str = Field(default="", description="Leading text of the target document")
    relation: str = Field(default="related_to", description="Relation label")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description="Suggestion strength 0-1")
    rationale: str = Field(default="", description="Why the link was suggested")
    status: LinkStatus = Field(default=LinkStatus.CANDIDATE)


class Edge(BaseModel):
    """Directed link between two documents."""

    id: str = Field(..., description="Unique edge ID")
    source: str = Field(..., description="Source document ID")
    target: str = Field(..., description="Target document ID")
    relation: str = Field(default="related_to", description="Relation label")
    status: EdgeStatus = Field(default=EdgeStatus.CANDIDATE)

    def connects(self, a: str, b: str) -> bool:
        """True if the edge joins a and b in either direction."""
        return {self.source, self.target} == {a, b}


class GraphNode(BaseModel):
    """Document as drawn in the graph; val sizes the node by knowledge score."""

    id: str
    title: str
    group: int = Field(default=1, description="1: document")
    status: DocumentStatus
    val: int = 0
    tags: list[str] = Field(default_factory=list)
