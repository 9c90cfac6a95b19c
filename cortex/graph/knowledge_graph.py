"""In-memory knowledge graph of typed entities and relationships.

Four structures are owned per instance: the entity map, the relationship
map, an adjacency index (entity id -> ids of touching relationships) and a
type index (entity type -> entity ids). Index buckets are insertion-ordered
dicts used as ordered sets so that query results are deterministic.
"""

import math
import time
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any
from uuid import uuid4

from cortex.config.models.graph import GraphConfig
from cortex.graph.models import (
    Entity,
    EntityMetadata,
    GraphEdge,
    GraphExport,
    GraphNode,
    GraphPath,
    GraphStats,
    PathResult,
    RelatedEntity,
    Relationship,
    RelationshipMetadata,
)
from cortex.graph.models.entity import utc_now
from cortex.observability.logging import get_logger
from cortex.observability.metrics import observe_path_search, record_graph_operation

logger = get_logger(__name__)

# Frontier item: (entity id, entities on path, relationships on path, depth)
Frontier = tuple[str, list[Entity], list[Relationship], int]


class KnowledgeGraph:
    """Typed knowledge graph with referential integrity and path discovery.

    Entities are upserted by id and never deleted individually;
    relationships are append-only. Only clear() removes data.
    """

    def __init__(
        self,
        config: GraphConfig | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize an empty graph."""
        self._config = config or GraphConfig()
        self._clock = clock

        self._entities: dict[str, Entity] = {}
        self._relationships: dict[str, Relationship] = {}
        self._adjacency: dict[str, dict[str, None]] = {}
        self._type_index: dict[str, dict[str, None]] = {}

    # Entity operations
    def add_entity(
        self,
        entity_type: str,
        properties: Mapping[str, Any],
        entity_id: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Entity:
        """Add an entity, or replace the one with the same id.

        A replaced entity keeps its original creation time; its type,
        properties and tags are overwritten.
        """
        entity_id = entity_id or str(uuid4())
        now = self._clock()
        existing = self._entities.get(entity_id)

        entity = Entity(
            id=entity_id,
            type=entity_type,
            properties=dict(properties),
            metadata=EntityMetadata(
                created=existing.metadata.created if existing else now,
                updated=now,
                tags=list(tags) if tags is not None else None,
            ),
        )

        if existing is not None and existing.type != entity_type:
            _discard(self._type_index, existing.type, entity_id)

        self._entities[entity_id] = entity
        self._type_index.setdefault(entity_type, {})[entity_id] = None

        record_graph_operation("add_entity", "updated" if existing else "created")
        logger.debug(
            "entity_added",
            entity_id=entity_id,
            entity_type=entity_type,
            replaced=existing is not None,
        )
        return entity

    def get_entity(self, entity_id: str) -> Entity | None:
        """Get an entity by ID."""
        return self._entities.get(entity_id)

    def get_entities_by_type(self, entity_type: str) -> list[Entity]:
        """Get all entities of a type, in insertion order."""
        ids = self._type_index.get(entity_type, {})
        return [self._entities[eid] for eid in ids if eid in self._entities]

    # Relationship operations
    def add_relationship(
        self,
        source_id: str,
        target_id: str,
        relationship_type: str,
        properties: Mapping[str, Any] | None = None,
        weight: float | None = None,
    ) -> Relationship | None:
        """Connect two existing entities.

        Returns:
            The new relationship, or None (with no mutation) when either
            endpoint does not exist
        """
        if source_id not in self._entities or target_id not in self._entities:
            record_graph_operation("add_relationship", "rejected")
            logger.debug(
                "relationship_rejected",
                source_id=source_id,
                target_id=target_id,
                relationship_type=relationship_type,
            )
            return None

        relationship = Relationship(
            source_id=source_id,
            target_id=target_id,
            type=relationship_type,
            properties=dict(properties) if properties is not None else None,
            metadata=RelationshipMetadata(created=self._clock(), weight=weight),
        )

        self._relationships[relationship.id] = relationship
        # Indexed under both ends; a self-loop lands in one bucket once
        self._adjacency.setdefault(source_id, {})[relationship.id] = None
        self._adjacency.setdefault(target_id, {})[relationship.id] = None

        record_graph_operation("add_relationship")
        logger.debug(
            "relationship_added",
            relationship_id=relationship.id,
            source_id=source_id,
            target_id=target_id,
            relationship_type=relationship_type,
        )
        return relationship

    def get_entity_relationships(self, entity_id: str) -> list[Relationship]:
        """All relationships touching an entity, in either direction."""
        ids = self._adjacency.get(entity_id, {})
        return [self._relationships[rid] for rid in ids if rid in self._relationships]

    def get_related_entities(
        self,
        entity_id: str,
        relationship_type: str | None = None,
    ) -> list[RelatedEntity]:
        """Neighbors of an entity paired with the relationship reaching them.

        Relationships whose other endpoint cannot be resolved are skipped.
        """
        results: list[RelatedEntity] = []
        for relationship in self.get_entity_relationships(entity_id):
            if relationship_type and relationship.type != relationship_type:
                continue

            other = self._entities.get(relationship.other_end(entity_id))
            if other is not None:
                results.append(RelatedEntity(entity=other, relationship=relationship))
        return results

    # Search
    def search_entities(
        self,
        query: str,
        entity_type: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> list[Entity]:
        """Case-insensitive search over type names, property values and tags.

        A candidate matches as soon as its type name, any property value
        (spelled as JSON scalars: null, true, 1 for 1.0), or any of its own tags contains the query. Only
        candidates failing all three fall through to the `tags` filter,
        where they match when they carry every requested tag. The tag filter
        therefore widens the result set rather than narrowing it.
        """
        needle = query.lower()
        required = list(tags or ())

        if entity_type:
            candidates = self.get_entities_by_type(entity_type)
        else:
            candidates = list(self._entities.values())

        return [
            entity for entity in candidates if _matches(entity, needle, required)
        ]

    # Traversal
    def find_paths(
        self,
        source_id: str,
        target_id: str,
        max_depth: int | None = None,
    ) -> PathResult:
        """Breadth-first path enumeration between two entities.

        Nodes are marked visited when dequeued, so several partial paths to
        the same node may sit in the frontier at once; a visited node is
        never expanded again. Reaching the target records the path and
        stops that branch. Branches stop expanding at `max_depth` hops.
        """
        if max_depth is None:
            max_depth = self._config.default_max_depth

        source = self._entities.get(source_id)
        if source is None:
            record_graph_operation("find_paths", "not_found")
            return PathResult()

        started = time.perf_counter()
        visited: set[str] = set()
        queue: deque[Frontier] = deque([(source_id, [source], [], 0)])
        paths: list[GraphPath] = []

        while queue:
            current_id, entities, relationships, depth = queue.popleft()

            if current_id == target_id:
                paths.append(GraphPath(entities=entities, relationships=relationships))
                continue
            if depth >= max_depth:
                continue
            if current_id in visited:
                continue
            visited.add(current_id)

            for related in self.get_related_entities(current_id):
                if related.entity.id in visited:
                    continue
                queue.append(
                    (
                        related.entity.id,
                        [*entities, related.entity],
                        [*relationships, related.relationship],
                        depth + 1,
                    )
                )

        all_entities: dict[str, Entity] = {}
        all_relationships: dict[str, Relationship] = {}
        for path in paths:
            for entity in path.entities:
                all_entities.setdefault(entity.id, entity)
            for relationship in path.relationships:
                all_relationships.setdefault(relationship.id, relationship)

        observe_path_search(time.perf_counter() - started, len(paths))
        record_graph_operation("find_paths")
        logger.debug(
            "paths_found",
            source_id=source_id,
            target_id=target_id,
            max_depth=max_depth,
            path_count=len(paths),
        )
        return PathResult(
            entities=list(all_entities.values()),
            relationships=list(all_relationships.values()),
            paths=paths,
        )

    # Reporting
    def get_stats(self) -> GraphStats:
        """Entity and relationship counts plus type distribution."""
        return GraphStats(
            entity_count=len(self._entities),
            relationship_count=len(self._relationships),
            type_distribution={
                entity_type: len(ids) for entity_type, ids in self._type_index.items()
            },
        )

    def export_graph(self) -> GraphExport:
        """Project the graph to labelled nodes and weighted edges."""
        nodes = [
            GraphNode(
                id=entity.id,
                type=entity.type,
                label=entity.label,
                properties=entity.properties,
            )
            for entity in self._entities.values()
        ]
        edges = [
            GraphEdge(
                id=rel.id,
                source=rel.source_id,
                target=rel.target_id,
                type=rel.type,
                weight=rel.metadata.weight,
            )
            for rel in self._relationships.values()
        ]
        return GraphExport(nodes=nodes, edges=edges)

    def clear(self) -> None:
        """Remove all entities, relationships and index entries."""
        self._entities.clear()
        self._relationships.clear()
        self._adjacency.clear()
        self._type_index.clear()
        logger.debug("graph_cleared")


def _matches(entity: Entity, needle: str, required_tags: list[str]) -> bool:
    if needle in entity.type.lower():
        return True

    if any(needle in _stringify(value).lower() for value in entity.properties.values()):
        return True

    own_tags = entity.tags
    if any(needle in tag.lower() for tag in own_tags):
        return True

    if required_tags:
        return all(tag in own_tags for tag in required_tags)
    return False


def _stringify(value: Any) -> str:
    """Render a property value for substring search.

    Scalars use JSON spelling (null, true, 1 for 1.0) and lists join their
    items with commas. Nested mappings render empty and never match.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, list | tuple):
        return ",".join("" if item is None else _stringify(item) for item in value)
    if isinstance(value, Mapping):
        return ""
    return str(value)


def _discard(index: dict[str, dict[str, None]], key: str, member: str) -> None:
    """Remove a member from an index bucket, dropping the bucket once empty."""
    bucket = index.get(key)
    if bucket is None:
        return
    bucket.pop(member, None)
    if not bucket:
        del index[key]
