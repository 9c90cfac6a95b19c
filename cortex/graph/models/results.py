"""Query, statistics and export results for the knowledge graph."""

from pydantic import BaseModel, Field, JsonValue

from cortex.graph.models.entity import Entity
from cortex.graph.models.relationship import Relationship


class RelatedEntity(BaseModel):
    """A neighbor of some entity together with the edge reaching it."""

    entity: Entity
    relationship: Relationship


class GraphPath(BaseModel):
    """One path: n entities joined by n - 1 relationships."""

    entities: list[Entity] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)


class PathResult(BaseModel):
    """Result of find_paths().

    `entities` and `relationships` are the de-duplicated union over all
    recorded paths, in first-seen order.
    """

    entities: list[Entity] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    paths: list[GraphPath] = Field(default_factory=list)


class GraphStats(BaseModel):
    """Graph size and entity type distribution."""

    entity_count: int
    relationship_count: int
    type_distribution: dict[str, int] = Field(default_factory=dict)


class GraphNode(BaseModel):
    """Entity projected for visualization."""

    id: str
    type: str
    label: str
    properties: dict[str, JsonValue] = Field(default_factory=dict)


class GraphEdge(BaseModel):
    """Relationship projected for visualization."""

    id: str
    source: str
    target: str
    type: str
    weight: float | None = None


class GraphExport(BaseModel):
    """Whole-graph export as nodes and edges."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
