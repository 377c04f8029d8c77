"""Metrics collection for the challenge collector."""

from collections import Counter
from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class CollectorMetrics:
    """Metrics for collector operations.

    Tracks pages and articles per tag. Use get_instance() for singleton
    access.
    """

    pages_by_tag: Counter[str] = field(default_factory=Counter)
    articles_fetched_by_tag: Counter[str] = field(default_factory=Counter)
    articles_kept_by_tag: Counter[str] = field(default_factory=Counter)
    articles_dropped_by_tag: Counter[str] = field(default_factory=Counter)
    failures_by_tag: Counter[str] = field(default_factory=Counter)

    _instance: ClassVar["CollectorMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "CollectorMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_page(self, tag: str, article_count: int) -> None:
        """Record one fetched page.

        Args:
            tag: Tag being fetched.
            article_count: Articles on the page.
        """
        self.pages_by_tag[tag] += 1
        self.articles_fetched_by_tag[tag] += article_count

    def record_classification(self, tag: str, kept: int, dropped: int) -> None:
        """Record the outcome of classifying a tag's articles."""
        self.articles_kept_by_tag[tag] += kept
        self.articles_dropped_by_tag[tag] += dropped

    def record_failure(self, tag: str) -> None:
        """Record a failed fetch for a tag."""
        self.failures_by_tag[tag] += 1

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Convert metrics to dictionary."""
        return {
            "pages_by_tag": dict(self.pages_by_tag),
            "articles_fetched_by_tag": dict(self.articles_fetched_by_tag),
            "articles_kept_by_tag": dict(self.articles_kept_by_tag),
            "articles_dropped_by_tag": dict(self.articles_dropped_by_tag),
            "failures_by_tag": dict(self.failures_by_tag),
        }
