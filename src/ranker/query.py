"""Search and sort helpers for listing a tag's submissions."""

from src.collectors.models import Article, to_epoch_ms
from src.ranker.constants import (
    SORT_COMMENTS,
    SORT_LATEST,
    SORT_OPTIONS,
    SORT_POPULAR,
    SORT_RELEVANT,
)
from src.ranker.ranker import rank_by_relevance


def filter_articles(articles: list[Article], term: str | None) -> list[Article]:
    """Keep articles whose title, description or author name contain a term.

    Matching is case-insensitive. A blank term keeps everything.
    """
    if not term or not term.strip():
        return list(articles)

    needle = term.strip().lower()
    return [
        article
        for article in articles
        if needle in article.title.lower()
        or needle in (article.description or "").lower()
        or needle in article.author_name.lower()
    ]


def sort_articles(
    articles: list[Article],
    sort_by: str = SORT_LATEST,
    scores: dict[int, float] | None = None,
) -> list[Article]:
    """Sort articles for display.

    Args:
        articles: Articles to sort.
        sort_by: One of ``latest``, ``popular``, ``comments``, ``relevant``.
        scores: Relevance scores, required for ``relevant``.

    Returns:
        A new sorted list; ties keep their input order.

    Raises:
        ValueError: If ``sort_by`` is unknown, or ``relevant`` is requested
            without scores.
    """
    if sort_by == SORT_LATEST:
        return sorted(articles, key=lambda a: to_epoch_ms(a.published_at), reverse=True)
    if sort_by == SORT_POPULAR:
        return sorted(articles, key=lambda a: a.positive_reactions_count, reverse=True)
    if sort_by == SORT_COMMENTS:
        return sorted(articles, key=lambda a: a.comments_count, reverse=True)
    if sort_by == SORT_RELEVANT:
        if scores is None:
            raise ValueError("Relevance sort requires scores")
        return rank_by_relevance(articles, scores)

    msg = f"Unknown sort option '{sort_by}', expected one of {', '.join(SORT_OPTIONS)}"
    raise ValueError(msg)
