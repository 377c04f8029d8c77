"""Data models for the relevance ranker."""

from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from src.collectors.models import Article


@dataclass(frozen=True)
class ScoreComponents:
    """Breakdown of an article's relevance score.

    Attributes:
        reaction_score: Share of the set's top reaction count, up to 50.
        comment_score: Share of the set's top comment count, up to 30.
        recency_score: Position between the oldest and newest activity, up to 20.
        total_score: Sum of all components, within [0, 100].
    """

    reaction_score: float
    comment_score: float
    recency_score: float
    total_score: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {
            "reaction_score": self.reaction_score,
            "comment_score": self.comment_score,
            "recency_score": self.recency_score,
            "total_score": self.total_score,
        }


@dataclass(frozen=True)
class ScoredArticle:
    """An article with its computed relevance."""

    article: Article
    components: ScoreComponents

    @property
    def score(self) -> float:
        """Total relevance score."""
        return self.components.total_score


class CachedScore(BaseModel):
    """One article's score inside a cache entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    article_id: int = Field(alias="articleId")
    score: float
    data_hash: str = Field(alias="dataHash")


class RelevanceCacheEntry(BaseModel):
    """Memoized scores for one tag's data snapshot.

    Serialized with camelCase keys so entries written by the browser
    front-end and by this package are interchangeable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tag: str
    data_hash: str = Field(alias="dataHash")
    scores: list[CachedScore] = Field(default_factory=list)
    timestamp: Annotated[int, Field(ge=0, description="Epoch milliseconds")]

    def score_map(self) -> dict[int, float]:
        """Scores keyed by article id."""
        return {item.article_id: item.score for item in self.scores}
