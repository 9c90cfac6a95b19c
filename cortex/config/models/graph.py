"""Knowledge graph configuration model."""

from pydantic import BaseModel, Field


class GraphConfig(BaseModel):
    """Knowledge graph configuration."""

    default_max_depth: int = Field(
        default=5,
        ge=0,
        description="Depth bound used by find_paths() when none is given",
    )
