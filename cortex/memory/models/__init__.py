"""Memory domain models.

Contains all Pydantic models for the memory store:
- MemoryEntry for stored memory units
- TimeRange for recall windows
- MemoryStats and consolidation results for reporting
"""

from cortex.memory.models.entry import MemoryEntry, MetadataValue, TimeRange
from cortex.memory.models.results import (
    ConsolidationPattern,
    ConsolidationResult,
    MemoryStats,
)

__all__ = [
    "MemoryEntry",
    "MetadataValue",
    "TimeRange",
    "ConsolidationPattern",
    "ConsolidationResult",
    "MemoryStats",
]
