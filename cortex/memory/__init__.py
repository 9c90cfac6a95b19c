"""Associative memory: scored, multi-indexed entries with auto-linking.

Entries are ranked by query relevance or by a composite of recency,
importance and access frequency, and similar entries are linked to each
other as they are stored.
"""

from cortex.memory.models import (
    ConsolidationPattern,
    ConsolidationResult,
    MemoryEntry,
    MemoryStats,
    TimeRange,
)
from cortex.memory.store import MemoryStore

__all__ = [
    "MemoryStore",
    "MemoryEntry",
    "TimeRange",
    "MemoryStats",
    "ConsolidationPattern",
    "ConsolidationResult",
]
