"""Prometheus metrics for Cortex.

Counts store and graph operations by outcome and tracks the cost of
path discovery. Recording a metric never affects an operation's result.
"""

from prometheus_client import Counter, Histogram

MEMORY_OPERATIONS = Counter(
    "cortex_memory_operations_total",
    "Total number of memory store operations",
    labelnames=["operation", "outcome"],
)

RECALL_RESULTS = Histogram(
    "cortex_recall_results",
    "Number of entries returned per recall",
    buckets=(0, 1, 2, 5, 10, 20, 50, 100),
)

GRAPH_OPERATIONS = Counter(
    "cortex_graph_operations_total",
    "Total number of knowledge graph operations",
    labelnames=["operation", "outcome"],
)

PATH_SEARCH_LATENCY = Histogram(
    "cortex_path_search_latency_seconds",
    "Latency of find_paths breadth-first searches",
    buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)

PATHS_FOUND = Histogram(
    "cortex_paths_found",
    "Number of paths recorded per find_paths call",
    buckets=(0, 1, 2, 5, 10, 25, 50, 100),
)

_enabled = True


def setup_metrics(enabled: bool = True) -> None:
    """Turn metric recording on or off for the process.

    Metrics are registered with the default registry when this module is
    imported; disabling only stops new observations.
    """
    global _enabled
    _enabled = enabled


def metrics_enabled() -> bool:
    """Return whether metric recording is active."""
    return _enabled


def record_memory_operation(operation: str, outcome: str = "ok") -> None:
    """Count a memory store operation."""
    if _enabled:
        MEMORY_OPERATIONS.labels(operation=operation, outcome=outcome).inc()


def record_graph_operation(operation: str, outcome: str = "ok") -> None:
    """Count a knowledge graph operation."""
    if _enabled:
        GRAPH_OPERATIONS.labels(operation=operation, outcome=outcome).inc()


def observe_recall(result_count: int) -> None:
    """Record how many entries a recall returned."""
    if _enabled:
        RECALL_RESULTS.observe(result_count)


def observe_path_search(latency_seconds: float, path_count: int) -> None:
    """Record latency and result size of a path search."""
    if _enabled:
        PATH_SEARCH_LATENCY.observe(latency_seconds)
        PATHS_FOUND.observe(path_count)
