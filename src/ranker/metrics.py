"""Metrics collection for the ranker module."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class RankerMetrics:
    """Metrics for relevance scoring and its cache.

    Attributes:
        cache_hits: Lookups answered from the cache.
        cache_misses: Lookups that had to recompute.
        cache_evictions: Entries deleted for being expired or corrupt.
        articles_scored: Articles scored on cache misses.
    """

    cache_hits: int = 0
    cache_misses: int = 0
    cache_evictions: int = 0
    articles_scored: int = 0

    _instance: ClassVar["RankerMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RankerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_hit(self) -> None:
        """Record a cache hit."""
        self.cache_hits += 1

    def record_miss(self) -> None:
        """Record a cache miss."""
        self.cache_misses += 1

    def record_eviction(self) -> None:
        """Record an evicted entry."""
        self.cache_evictions += 1

    def record_scored(self, count: int) -> None:
        """Record articles scored.

        Args:
            count: Number of articles in the scored set.
        """
        self.articles_scored += count

    @property
    def hit_rate(self) -> float:
        """Share of lookups served from the cache."""
        lookups = self.cache_hits + self.cache_misses
        return self.cache_hits / lookups if lookups else 0.0

    def to_dict(self) -> dict[str, int | float]:
        """Convert metrics to dictionary."""
        return {
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "cache_evictions": self.cache_evictions,
            "articles_scored": self.articles_scored,
            "hit_rate": self.hit_rate,
        }
