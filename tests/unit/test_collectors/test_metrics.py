"""Unit tests for collector metrics."""

from src.collectors.metrics import CollectorMetrics


class TestCollectorMetrics:
    """Tests for the collector metrics singleton."""

    def test_singleton(self) -> None:
        """Test get_instance returns the same object until reset."""
        first = CollectorMetrics.get_instance()

        assert CollectorMetrics.get_instance() is first
        CollectorMetrics.reset()
        assert CollectorMetrics.get_instance() is not first

    def test_to_dict(self) -> None:
        """Test counters are exported per tag."""
        metrics = CollectorMetrics.get_instance()
        metrics.record_page("xchallenge", 30)
        metrics.record_page("xchallenge", 1)
        metrics.record_classification("xchallenge", kept=25, dropped=6)
        metrics.record_failure("ychallenge")

        assert metrics.to_dict() == {
            "pages_by_tag": {"xchallenge": 2},
            "articles_fetched_by_tag": {"xchallenge": 31},
            "articles_kept_by_tag": {"xchallenge": 25},
            "articles_dropped_by_tag": {"xchallenge": 6},
            "failures_by_tag": {"ychallenge": 1},
        }
