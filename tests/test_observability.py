"""Tests for observability module."""

from embedding_index.observability.metrics import (
    get_metrics,
    track_embedding_request,
    track_llm_request,
    track_query,
    track_reindex,
    track_storage_operation,
)


class TestMetricsFunctions:
    """Tests for metrics tracking functions."""

    def test_get_metrics_returns_bytes(self) -> None:
        """get_metrics returns bytes."""
        assert isinstance(get_metrics(), bytes)

    def test_track_embedding_request(self) -> None:
        """track_embedding_request records request."""
        track_embedding_request(model="test-model", duration=0.1, batch_size=10)

        metrics = get_metrics().decode()
        assert "embedding_request_duration_seconds" in metrics
        assert "embedding_batch_size" in metrics

    def test_track_llm_request_failure(self) -> None:
        """track_llm_request records failed request."""
        track_llm_request(
            model="test-model",
            duration=0.5,
            prompt_tokens=0,
            completion_tokens=0,
            success=False,
        )

        assert 'llm_requests_total{model="test-model",status="error"}' in get_metrics().decode()

    def test_track_query(self) -> None:
        """track_query records latency and result size."""
        track_query(duration=0.002, results_returned=3, top_score=0.9)
        track_query(duration=0.001, results_returned=0, top_score=None)

        metrics = get_metrics().decode()
        assert "index_query_duration_seconds" in metrics
        assert "index_query_results" in metrics
        assert "index_query_top_score" in metrics

    def test_track_reindex_sets_entries(self) -> None:
        """track_reindex counts outcomes and updates the table size gauge."""
        track_reindex("reindexed", entries=42)

        metrics = get_metrics().decode()
        assert 'index_reindex_total{outcome="reindexed"}' in metrics
        assert "index_entries 42.0" in metrics

    def test_track_storage_operation(self) -> None:
        """track_storage_operation records load/save timings."""
        track_storage_operation("save", 0.01)
        assert "index_storage_duration_seconds" in get_metrics().decode()
