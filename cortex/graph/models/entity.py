"""Entity model for the knowledge graph."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, JsonValue


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class EntityMetadata(BaseModel):
    """Bookkeeping for an entity.

    `created` survives re-adds under the same id; `updated` is refreshed
    by every add_entity() call.
    """

    created: AwareDatetime = Field(default_factory=utc_now, description="First added")
    updated: AwareDatetime = Field(default_factory=utc_now, description="Last (re-)added")
    tags: list[str] | None = Field(default=None, description="Optional labels")


class Entity(BaseModel):
    """Typed node in the knowledge graph."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique identifier")
    type: str = Field(..., description="Type: service, person, project, etc.")
    properties: dict[str, JsonValue] = Field(
        default_factory=dict, description="Open key/value properties"
    )
    metadata: EntityMetadata = Field(default_factory=EntityMetadata)

    @property
    def tags(self) -> list[str]:
        """The entity's own tags (empty when none were given)."""
        return self.metadata.tags or []

    @property
    def label(self) -> str:
        """Display label: the name property, else title, else the id."""
        label = self.properties.get("name") or self.properties.get("title")
        return str(label) if label else self.id
