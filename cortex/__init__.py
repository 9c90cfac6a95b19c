"""Cortex: process-local associative memory and knowledge graph.

Two in-memory components sit at the core:
- MemoryStore: scored, multi-indexed store of free-form memory entries
- KnowledgeGraph: typed entities and relationships with path discovery

MemorySystem wires both together with the linker and reasoning log.
"""

from cortex.graph import KnowledgeGraph
from cortex.memory import MemoryStore
from cortex.system import MemorySystem, create_memory_system

__all__ = [
    "KnowledgeGraph",
    "MemoryStore",
    "MemorySystem",
    "create_memory_system",
]
