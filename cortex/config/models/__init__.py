"""Configuration model exports.

    from cortex.config.models import MemoryConfig, GraphConfig
"""

from cortex.config.models.graph import GraphConfig
from cortex.config.models.memory import MemoryConfig
from cortex.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)

__all__ = [
    "GraphConfig",
    "MemoryConfig",
    # Observability
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
]
