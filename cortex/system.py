"""MemorySystem facade and factory.

Wires one MemoryStore, one KnowledgeGraph, the linker between them and a
reasoning log from a Settings object. Surrounding layers (transports,
renderers) talk to this object and translate its sentinel results into
user-facing messages.
"""

from pydantic import BaseModel

from cortex.config import Settings, get_settings
from cortex.graph import GraphStats, KnowledgeGraph
from cortex.integration import MemoryGraphLinker
from cortex.memory import MemoryStats, MemoryStore
from cortex.observability.logging import configure_logging, get_logger
from cortex.observability.metrics import setup_metrics
from cortex.reasoning import ReasoningLog

logger = get_logger(__name__)


class SystemStats(BaseModel):
    """Combined statistics of the memory store and the graph."""

    memory: MemoryStats
    graph: GraphStats


class MemorySystem:
    """Single-process memory: entries, graph, links and reasoning history."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.memory = MemoryStore(self.settings.memory)
        self.graph = KnowledgeGraph(self.settings.graph)
        self.linker = MemoryGraphLinker(self.memory, self.graph)
        self.reasoning = ReasoningLog()

    def get_stats(self) -> SystemStats:
        return SystemStats(memory=self.memory.get_stats(), graph=self.graph.get_stats())

    def clear(self) -> None:
        """Empty the store, the graph and the reasoning log."""
        self.memory.clear()
        self.graph.clear()
        self.reasoning.clear()


def create_memory_system(settings: Settings | None = None) -> MemorySystem:
    """Build a MemorySystem and configure logging and metrics for it.

    Args:
        settings: Explicit settings; loaded via get_settings() when omitted
    """
    settings = settings or get_settings()
    configure_logging(settings.observability.logging)
    setup_metrics(settings.observability.metrics.enabled)

    system = MemorySystem(settings)
    logger.info("memory_system_created", app_name=settings.app_name, debug=settings.debug)
    return system
