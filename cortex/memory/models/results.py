"""Reporting models returned by MemoryStore."""

from datetime import datetime

from pydantic import BaseModel, Field


class MemoryStats(BaseModel):
    """Snapshot of store size and shape."""

    total_memories: int
    total_contexts: int
    total_tags: int
    oldest_memory: datetime | None = None
    newest_memory: datetime | None = None
    avg_importance: float = 0.0


class ConsolidationPattern(BaseModel):
    """A tag shared by more than one entry."""

    pattern: str = Field(..., description="The shared tag")
    count: int = Field(..., description="Number of entries carrying the tag")
    memory_ids: list[str] = Field(default_factory=list)


class ConsolidationResult(BaseModel):
    """Output of consolidate(): mined patterns plus a text summary."""

    patterns: list[ConsolidationPattern] = Field(default_factory=list)
    summary: str
