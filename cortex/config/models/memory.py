"""Memory store configuration model."""

from pydantic import BaseModel, Field


class MemoryConfig(BaseModel):
    """Tuning knobs for MemoryStore ranking, linking and summaries."""

    default_importance: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Importance assigned when store() gets none",
    )
    link_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Similarity must exceed this to auto-link two entries",
    )
    default_limit: int = Field(
        default=10,
        ge=0,
        description="Result cap for recall() and its convenience wrappers",
    )
    recency_decay_days: float = Field(
        default=7.0,
        gt=0.0,
        description="Time constant of the recency term in the composite score",
    )
    important_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Default minimum importance for get_important()",
    )
    summary_top_n: int = Field(
        default=5,
        ge=0,
        description="Entries listed in a consolidation summary",
    )
    summary_preview_chars: int = Field(
        default=100,
        ge=1,
        description="Content preview length in a consolidation summary",
    )
