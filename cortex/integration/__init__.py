"""Links between memory entries and knowledge graph entities."""

from cortex.integration.linker import MemoryGraphLinker

__all__ = ["MemoryGraphLinker"]
