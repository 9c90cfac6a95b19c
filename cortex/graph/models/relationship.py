"""Relationship model for the knowledge graph."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, JsonValue


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class RelationshipMetadata(BaseModel):
    """Creation time and optional weight of a relationship."""

    model_config = ConfigDict(frozen=True)

    created: AwareDatetime = Field(default_factory=utc_now, description="When recorded")
    weight: float | None = Field(default=None, description="Optional edge weight")


class Relationship(BaseModel):
    """Connection between two entities.

    Source and target are kept for display, but traversal treats the edge
    as bidirectional. Relationships are immutable once created.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique identifier")
    source_id: str = Field(..., description="Source entity")
    target_id: str = Field(..., description="Target entity")
    type: str = Field(..., description="Type: depends_on, owns, deploys_to, etc.")
    properties: dict[str, JsonValue] | None = Field(
        default=None, description="Relationship properties"
    )
    metadata: RelationshipMetadata = Field(default_factory=RelationshipMetadata)

    def other_end(self, entity_id: str) -> str:
        """The endpoint that is not `entity_id` (the target for self-loops)."""
        return self.target_id if self.source_id == entity_id else self.source_id
