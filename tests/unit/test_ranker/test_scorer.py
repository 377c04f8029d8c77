"""Unit tests for relevance scoring."""

import pytest

from src.collectors.models import Article
from src.ranker.scorer import (
    RelevanceScorer,
    calculate_relevance_scores,
    recency_instant,
)
from tests.helpers.forem import make_article


def _article(article_id: int, **kwargs: object) -> Article:
    return Article.model_validate(make_article(article_id, **kwargs))


class TestRecencyInstant:
    """Tests for the recency instant."""

    def test_uses_later_of_edit_and_publish(self) -> None:
        """Test an edit after publication wins."""
        article = _article(
            1,
            published_at="1970-01-01T00:00:01Z",
            edited_at="1970-01-01T00:00:05Z",
        )

        assert recency_instant(article) == 5000

    def test_missing_edit(self) -> None:
        """Test the publish instant is used without an edit."""
        assert recency_instant(_article(1, published_at="1970-01-01T00:00:02Z")) == 2000


class TestCalculateRelevanceScores:
    """Tests for the scoring formula."""

    def test_empty(self) -> None:
        """Test no articles gives no scores."""
        assert calculate_relevance_scores([]) == {}

    def test_weights(self) -> None:
        """Test the 50/30/20 split with linear normalization."""
        articles = [
            _article(1, reactions=10, comments=4, published_at="2024-10-02T00:00:00Z"),
            _article(2, reactions=5, comments=0, published_at="2024-10-01T00:00:00Z"),
            _article(3, reactions=0, comments=2, published_at="2024-10-01T12:00:00Z"),
        ]

        scores = calculate_relevance_scores(articles)

        assert scores[1] == pytest.approx(100.0)
        assert scores[2] == pytest.approx(25.0)
        assert scores[3] == pytest.approx(0.0 + 15.0 + 10.0)

    def test_zero_engagement(self) -> None:
        """Test zero maxima give no engagement credit, only recency."""
        articles = [
            _article(1, published_at="2024-10-01T00:00:00Z"),
            _article(2, published_at="2024-10-03T00:00:00Z"),
        ]

        scores = calculate_relevance_scores(articles)

        assert scores == {1: pytest.approx(0.0), 2: pytest.approx(20.0)}

    def test_identical_instants_get_full_recency(self) -> None:
        """Test recency is not divided by zero when all instants match."""
        articles = [_article(1), _article(2)]

        assert calculate_relevance_scores(articles) == {
            1: pytest.approx(20.0),
            2: pytest.approx(20.0),
        }

    def test_single_article_scores_full(self) -> None:
        """Test a lone engaged article scores 100."""
        scores = calculate_relevance_scores([_article(1, reactions=1, comments=1)])

        assert scores[1] == pytest.approx(100.0)

    def test_unparsable_timestamp_counts_as_oldest(self) -> None:
        """Test a bad timestamp maps to instant 0."""
        articles = [
            _article(1, published_at="garbage"),
            _article(2, published_at="2024-10-01T00:00:00Z"),
        ]

        scores = calculate_relevance_scores(articles)

        assert scores[1] == pytest.approx(0.0)
        assert scores[2] == pytest.approx(20.0)

    def test_scores_within_bounds(self) -> None:
        """Test every score lies in [0, 100]."""
        articles = [
            _article(
                i,
                reactions=(i * 7) % 13,
                comments=(i * 3) % 5,
                published_at=f"2024-10-{(i % 28) + 1:02d}T00:00:00Z",
            )
            for i in range(1, 40)
        ]

        scores = calculate_relevance_scores(articles)

        assert all(0.0 <= s <= 100.0 for s in scores.values())


class TestRelevanceScorer:
    """Tests for the component breakdown."""

    def test_components_sum_to_total(self) -> None:
        """Test total equals the sum of components."""
        scored = RelevanceScorer().score_articles(
            [_article(1, reactions=4, comments=1), _article(2, reactions=2)]
        )

        second = scored[1].components
        assert second.reaction_score == pytest.approx(25.0)
        assert second.comment_score == pytest.approx(0.0)
        assert second.total_score == pytest.approx(
            second.reaction_score + second.comment_score + second.recency_score
        )
        assert scored[1].score == second.total_score

    def test_preserves_input_order(self) -> None:
        """Test results follow input order."""
        scored = RelevanceScorer().score_articles([_article(3), _article(1)])

        assert [s.article.id for s in scored] == [3, 1]
