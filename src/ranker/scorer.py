"""Relevance scoring for challenge submissions."""

from __future__ import annotations

import structlog

from src.collectors.models import Article, to_epoch_ms
from src.ranker.constants import (
    COMMENT_WEIGHT,
    COMPONENT_RANKER,
    REACTION_WEIGHT,
    RECENCY_WEIGHT,
)
from src.ranker.models import ScoreComponents, ScoredArticle


logger = structlog.get_logger()


def recency_instant(article: Article) -> int:
    """Latest activity of an article in epoch milliseconds.

    The later of the edit and publish timestamps; a missing edit counts as 0.
    """
    return max(to_epoch_ms(article.edited_at), to_epoch_ms(article.published_at))


class RelevanceScorer:
    """Scores articles relative to the set they are ranked in.

    Scoring formula:
        score = reaction_score + comment_score + recency_score

    Where:
        - reaction_score: reactions / max reactions * 50 (0 if max is 0)
        - comment_score: comments / max comments * 30 (0 if max is 0)
        - recency_score: (instant - oldest) / (newest - oldest) * 20, or the
          full 20 when every article shares the same instant

    Scores are only comparable within one call; adding an article to the set
    can change every other article's score.
    """

    def __init__(self, run_id: str = "") -> None:
        """Initialize the scorer.

        Args:
            run_id: Run identifier for logging.
        """
        self._log = logger.bind(
            component=COMPONENT_RANKER,
            subcomponent="scorer",
            run_id=run_id,
        )

    def score_articles(self, articles: list[Article]) -> list[ScoredArticle]:
        """Score every article against the whole set.

        Args:
            articles: Articles to score together.

        Returns:
            ScoredArticle objects in input order.
        """
        if not articles:
            return []

        max_reactions = max(a.positive_reactions_count for a in articles)
        max_comments = max(a.comments_count for a in articles)
        instants = [recency_instant(a) for a in articles]
        newest = max(instants)
        oldest = min(instants)

        scored: list[ScoredArticle] = []
        for article, instant in zip(articles, instants, strict=True):
            reaction_score = (
                article.positive_reactions_count / max_reactions * REACTION_WEIGHT
                if max_reactions > 0
                else 0.0
            )
            comment_score = (
                article.comments_count / max_comments * COMMENT_WEIGHT
                if max_comments > 0
                else 0.0
            )
            recency_score = (
                (instant - oldest) / (newest - oldest) * RECENCY_WEIGHT
                if newest > oldest
                else RECENCY_WEIGHT
            )
            scored.append(
                ScoredArticle(
                    article=article,
                    components=ScoreComponents(
                        reaction_score=reaction_score,
                        comment_score=comment_score,
                        recency_score=recency_score,
                        total_score=reaction_score + comment_score + recency_score,
                    ),
                )
            )

        self._log.debug(
            "scoring_complete",
            articles_scored=len(scored),
            min_score=min(s.score for s in scored),
            max_score=max(s.score for s in scored),
        )
        return scored


def calculate_relevance_scores(articles: list[Article]) -> dict[int, float]:
    """Pure function API for relevance scores keyed by article id.

    Args:
        articles: Articles to score together.

    Returns:
        Mapping of article id to score.
    """
    scorer = RelevanceScorer(run_id="pure")
    return {s.article.id: s.score for s in scorer.score_articles(articles)}
