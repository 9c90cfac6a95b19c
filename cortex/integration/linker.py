"""Memory entry <-> graph entity linking.

A link is the `entity_id` field of a memory entry. Nothing cascades across
it: deleting an entry leaves the entity alone, and clearing the graph leaves
entries pointing at ids that may no longer resolve.
"""

from cortex.graph import Entity, KnowledgeGraph
from cortex.memory import MemoryEntry, MemoryStore
from cortex.observability.logging import get_logger

logger = get_logger(__name__)


class MemoryGraphLinker:
    """Attach memory entries to entities and look them up either way."""

    def __init__(self, memory: MemoryStore, graph: KnowledgeGraph) -> None:
        self._memory = memory
        self._graph = graph

    def link_memory_to_entity(self, memory_id: str, entity_id: str) -> MemoryEntry | None:
        """Point a memory entry at an entity.

        Returns:
            The linked entry, or None (with no mutation) when either the
            entry or the entity does not exist
        """
        if self._memory.get(memory_id) is None or self._graph.get_entity(entity_id) is None:
            logger.debug("memory_entity_link_rejected", memory_id=memory_id, entity_id=entity_id)
            return None

        entry = self._memory.update(memory_id, entity_id=entity_id)
        logger.debug("memory_entity_linked", memory_id=memory_id, entity_id=entity_id)
        return entry

    def unlink_memory(self, memory_id: str) -> bool:
        """Drop an entry's entity link. False if the entry has no link."""
        entry = self._memory.get(memory_id)
        if entry is None or entry.entity_id is None:
            return False
        self._memory.update(memory_id, entity_id=None)
        return True

    def get_memories_by_entity(self, entity_id: str) -> list[MemoryEntry]:
        """Entries linked to an entity; empty if the entity is unknown."""
        if self._graph.get_entity(entity_id) is None:
            return []
        return self._memory.get_by_entity(entity_id)

    def get_linked_entity(self, memory_id: str) -> Entity | None:
        """The entity an entry is linked to, if both still exist."""
        entry = self._memory.get(memory_id)
        if entry is None or entry.entity_id is None:
            return None
        return self._graph.get_entity(entry.entity_id)
