"""Cached relevance ranking for one tag's submissions."""

from datetime import datetime

import structlog

from src.collectors.models import Article
from src.ranker.cache import RelevanceCache
from src.ranker.constants import COMPONENT_RANKER
from src.ranker.hash import compute_data_hash
from src.ranker.metrics import RankerMetrics
from src.ranker.scorer import calculate_relevance_scores


logger = structlog.get_logger()


def get_relevance_scores(
    tag: str,
    articles: list[Article],
    cache: RelevanceCache,
    now: datetime,
) -> dict[int, float]:
    """Return relevance scores for a tag, computing them only when stale.

    The scores are relative to ``articles`` as a whole, so callers should
    pass the full submission set and filter afterwards.

    Args:
        tag: Tag the articles belong to.
        articles: Full submission set for the tag.
        cache: Cache consulted and refreshed.
        now: Current time, used for expiry and the entry timestamp.

    Returns:
        Scores keyed by article id.
    """
    data_hash = compute_data_hash(articles)
    cached = cache.get(tag, data_hash, now)
    if cached is not None:
        return cached

    scores = calculate_relevance_scores(articles)
    RankerMetrics.get_instance().record_scored(len(articles))
    cache.put(tag, data_hash, scores, now)
    logger.info(
        "relevance_scores_computed",
        component=COMPONENT_RANKER,
        tag=tag,
        articles=len(articles),
        data_hash=data_hash,
    )
    return scores


def rank_by_relevance(
    articles: list[Article], scores: dict[int, float]
) -> list[Article]:
    """Order articles by descending score.

    The sort is stable: equal scores keep their input order. Articles
    missing from ``scores`` count as 0.
    """
    return sorted(articles, key=lambda a: scores.get(a.id, 0.0), reverse=True)
