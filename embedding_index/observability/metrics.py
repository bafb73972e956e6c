"""Prometheus metrics for the embedding index.

Provides metrics instrumentation for:
- Embedding and LLM request latency and counts
- Similarity query latency and result sizes
- Reindex outcomes and table size
- Table load/save latency
"""

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

EMBEDDING_BATCH_SIZE = Histogram(
    "embedding_batch_size",
    "Embedding batch size",
    ["model"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500],
)

# LLM Metrics
LLM_REQUEST_DURATION = Histogram(
    "llm_request_duration_seconds",
    "LLM request duration in seconds",
    ["model", "status"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

LLM_REQUEST_TOTAL = Counter(
    "llm_requests_total",
    "Total LLM requests",
    ["model", "status"],
)

LLM_TOKENS_TOTAL = Counter(
    "llm_tokens_total",
    "Total LLM tokens used",
    ["model", "type"],  # "type" label values: prompt, completion
)

# Query Metrics
INDEX_QUERY_DURATION = Histogram(
    "index_query_duration_seconds",
    "Similarity query duration in seconds",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5],
)

INDEX_QUERY_RESULTS = Histogram(
    "index_query_results",
    "Number of results returned per similarity query",
    buckets=[0, 1, 5, 10, 25, 50, 100, 250],
)

INDEX_QUERY_TOP_SCORE = Histogram(
    "index_query_top_score",
    "Top similarity score per query",
    buckets=[-0.5, 0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# Index Lifecycle Metrics
INDEX_REINDEX_TOTAL = Counter(
    "index_reindex_total",
    "Staleness checks by outcome",
    ["outcome"],  # reindexed, unchanged, error
)

INDEX_ENTRIES = Gauge(
    "index_entries",
    "Number of entries in the loaded vector table",
)

INDEX_STORAGE_DURATION = Histogram(
    "index_storage_duration_seconds",
    "Vector table load/save duration",
    ["operation", "status"],
    buckets=[0.001, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def track_embedding_request(
    model: str,
    duration: float,
    batch_size: int,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        batch_size: Number of texts in the batch.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()
    EMBEDDING_BATCH_SIZE.labels(model=model).observe(batch_size)


def track_llm_request(
    model: str,
    duration: float,
    prompt_tokens: int,
    completion_tokens: int,
    success: bool = True,
) -> None:
    """Track LLM request metrics.

    Args:
        model: LLM model name.
        duration: Request duration in seconds.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    LLM_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    LLM_REQUEST_TOTAL.labels(model=model, status=status).inc()

    if success:
        LLM_TOKENS_TOTAL.labels(model=model, type="prompt").inc(prompt_tokens)
        LLM_TOKENS_TOTAL.labels(model=model, type="completion").inc(completion_tokens)


def track_query(duration: float, results_returned: int, top_score: float | None) -> None:
    """Track a similarity query.

    Args:
        duration: Scan duration in seconds.
        results_returned: Number of results returned.
        top_score: Highest score, or None when nothing matched.
    """
    INDEX_QUERY_DURATION.observe(duration)
    INDEX_QUERY_RESULTS.observe(results_returned)
    if top_score is not None:
        INDEX_QUERY_TOP_SCORE.observe(top_score)


def track_reindex(outcome: str, entries: int | None = None) -> None:
    """Track the outcome of a staleness check.

    Args:
        outcome: One of ``reindexed``, ``unchanged`` or ``error``.
        entries: Table size after the check, when known.
    """
    INDEX_REINDEX_TOTAL.labels(outcome=outcome).inc()
    if entries is not None:
        INDEX_ENTRIES.set(entries)


def track_storage_operation(
    operation: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track a table load or save."""
    status = "success" if success else "error"
    INDEX_STORAGE_DURATION.labels(operation=operation, status=status).observe(duration)
