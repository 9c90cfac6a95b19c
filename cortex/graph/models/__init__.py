"""Knowledge graph models.

Contains all Pydantic models for the knowledge graph:
- Entities for typed nodes
- Relationships for typed, optionally weighted edges
- Query, statistics and export results
"""

from cortex.graph.models.entity import Entity, EntityMetadata
from cortex.graph.models.relationship import Relationship, RelationshipMetadata
from cortex.graph.models.results import (
    GraphEdge,
    GraphExport,
    GraphNode,
    GraphPath,
    GraphStats,
    PathResult,
    RelatedEntity,
)

__all__ = [
    "Entity",
    "EntityMetadata",
    "Relationship",
    "RelationshipMetadata",
    "RelatedEntity",
    "GraphPath",
    "PathResult",
    "GraphStats",
    "GraphNode",
    "GraphEdge",
    "GraphExport",
]
