"""
Visualization data produced by document analysis.

Four views of one document: a concept graph, a timeline, a topic map and a
strategy quadrant (x: importance, y: urgency, both 0-100). Every field has a
default so a partial reply from the generator still validates.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConceptNode(BaseModel):
    """Key concept in the concept graph."""

    id: str = ""
    label: str = ""


class ConceptEdge(BaseModel):
    """Relation between two concepts."""

    source: str = ""
    target: str = ""
    relation: str = ""


class ConceptGraph(BaseModel):
    nodes: list[ConceptNode] = Field(default_factory=list)
    edges: list[ConceptEdge] = Field(default_factory=list)


class TimelineEvent(BaseModel):
    """Event or phase with its period."""

    event: str = ""
    date: str = Field(default="", description="Point in time or period, free text")
    description: str = ""


class TopicGroup(BaseModel):
    category: str = ""
    topics: list[str] = Field(default_factory=list)


class QuadrantPoint(BaseModel):
    """Item placed on the importance/urgency quadrant."""

    label: str = ""
    x: float = Field(default=50, description="Importance 0-100")
    y: float = Field(default=50, description="Urgency 0-100")
    reason: str = ""

    @field_validator("x", "y", mode="before")
    @classmethod
    def _clamp_axis(cls, value) -> float:
        try:
            return max(0.0, min(100.0, float(value)))
        except (TypeError, ValueError):
            return 50.0


class VizData(BaseModel):
    """Visualization payload attached to an analyzed document."""

    model_config = ConfigDict(extra="ignore")

    graph: ConceptGraph = Field(default_factory=ConceptGraph)
    timeline: list[TimelineEvent] = Field(default_factory=list)
    topic_map: list[TopicGroup] = Field(default_factory=list)
    quadrant: list[QuadrantPoint] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.graph.nodes or self.graph.edges or self.timeline or self.topic_map or self.quadrant
        )
