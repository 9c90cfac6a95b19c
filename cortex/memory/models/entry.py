"""Memory entry model."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, JsonValue, field_validator

# Open key/value maps accept JSON shapes only: strings, numbers, booleans,
# nested maps and sequences.
MetadataValue = JsonValue


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def generate_memory_id() -> str:
    """Return a fresh, never reused memory id."""
    return f"mem_{uuid4().hex}"


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class MemoryEntry(BaseModel):
    """Unit of stored memory content with ranking metadata.

    Entries are mutable in place: the store hands out the live object, and
    recall() bumps access_count/last_accessed on whatever it returns.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: str = Field(default_factory=generate_memory_id, description="Unique identifier")
    content: str = Field(..., description="Memory content")
    timestamp: AwareDatetime = Field(default_factory=utc_now, description="Creation time")
    context: str | None = Field(default=None, description="Context or category label")
    tags: list[str] = Field(default_factory=list, description="Categorization labels")
    importance: float = Field(default=0.5, description="Importance score, clamped to [0, 1]")
    access_count: int = Field(default=0, ge=0, description="Times returned by recall")
    last_accessed: AwareDatetime | None = Field(default=None, description="Last recall time")
    metadata: dict[str, MetadataValue] = Field(
        default_factory=dict, description="Open key/value metadata"
    )
    related_memories: list[str] = Field(
        default_factory=list, description="Ids of linked entries, no duplicates"
    )
    entity_id: str | None = Field(default=None, description="Linked knowledge graph entity")

    @field_validator("context")
    @classmethod
    def _empty_context_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("importance")
    @classmethod
    def _clamp_importance(cls, value: float) -> float:
        return min(max(value, 0.0), 1.0)

    @field_validator("tags", "related_memories")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return _unique(value)


class TimeRange(BaseModel):
    """Inclusive recall window; either bound may be omitted."""

    start: AwareDatetime | None = None
    end: AwareDatetime | None = None

    def contains(self, moment: datetime) -> bool:
        """Check whether a timestamp falls within the window."""
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True
