"""Relevance ranking for challenge submissions.

Scores each article of a tag from reactions, comments and recency relative
to the rest of the set, and caches the result under a content hash so
unchanged data is never rescored.
"""

from src.ranker.cache import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    RelevanceCache,
    open_file_cache,
)
from src.ranker.hash import article_fingerprint, compute_data_hash, rolling_hash
from src.ranker.metrics import RankerMetrics
from src.ranker.models import (
    CachedScore,
    RelevanceCacheEntry,
    ScoreComponents,
    ScoredArticle,
)
from src.ranker.query import filter_articles, sort_articles
from src.ranker.ranker import get_relevance_scores, rank_by_relevance
from src.ranker.scorer import (
    RelevanceScorer,
    calculate_relevance_scores,
    recency_instant,
)


__all__ = [
    "CachedScore",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "RankerMetrics",
    "RelevanceCache",
    "RelevanceCacheEntry",
    "RelevanceScorer",
    "ScoreComponents",
    "ScoredArticle",
    "article_fingerprint",
    "calculate_relevance_scores",
    "compute_data_hash",
    "filter_articles",
    "get_relevance_scores",
    "open_file_cache",
    "rank_by_relevance",
    "recency_instant",
    "rolling_hash",
    "sort_articles",
]
