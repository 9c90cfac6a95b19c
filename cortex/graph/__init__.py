"""Knowledge graph: typed entities, relationships and path discovery."""

from cortex.graph.knowledge_graph import KnowledgeGraph
from cortex.graph.models import (
    Entity,
    GraphExport,
    GraphPath,
    GraphStats,
    PathResult,
    RelatedEntity,
    Relationship,
)

__all__ = [
    "KnowledgeGraph",
    "Entity",
    "Relationship",
    "RelatedEntity",
    "GraphPath",
    "PathResult",
    "GraphStats",
    "GraphExport",
]
