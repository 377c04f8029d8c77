"""Result types returned by the submission service."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from src.collectors.models import Article, TagDataset


@dataclass(frozen=True)
class FetchOutcome:
    """Result of fetching one tag.

    Attributes:
        tag: Tag that was fetched.
        fetched_at: ISO-8601 UTC fetch timestamp.
        dataset: Persisted dataset, or None when nothing qualified.
        articles_fetched: Raw articles returned by the source.
        dropped_count: Articles without the marker tag.
        backup_path: Backup made before an update, if any.
    """

    tag: str
    fetched_at: str
    dataset: TagDataset | None = None
    articles_fetched: int = 0
    dropped_count: int = 0
    backup_path: Path | None = None

    @property
    def saved(self) -> bool:
        """True when documents were written for the tag."""
        return self.dataset is not None

    @property
    def submissions_count(self) -> int:
        """Number of submissions kept."""
        return len(self.dataset.submissions) if self.dataset else 0

    @property
    def announcements_count(self) -> int:
        """Number of announcements kept."""
        return len(self.dataset.announcements) if self.dataset else 0


@dataclass(frozen=True)
class TagUpdateOutcome:
    """Per-tag entry of a batch update."""

    tag: str
    outcome: FetchOutcome | None = None
    error: str | None = None
    error_class: str | None = None

    @property
    def success(self) -> bool:
        """True when the tag updated without error."""
        return self.error is None


@dataclass
class BatchUpdateResult:
    """Result of updating every indexed tag."""

    started_at: datetime
    finished_at: datetime
    outcomes: list[TagUpdateOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[TagUpdateOutcome]:
        """Tags that updated."""
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[TagUpdateOutcome]:
        """Tags whose update raised."""
        return [o for o in self.outcomes if not o.success]

    @property
    def total_submissions(self) -> int:
        """Submissions across all updated tags."""
        return sum(o.outcome.submissions_count for o in self.succeeded if o.outcome)

    @property
    def duration_ms(self) -> float:
        """Get total duration in milliseconds."""
        return (self.finished_at - self.started_at).total_seconds() * 1000


@dataclass(frozen=True)
class RemovalResult:
    """Result of removing a tag."""

    tag: str
    backup_path: Path | None
    removed_files: list[Path] = field(default_factory=list)
    index_updated: bool = False


@dataclass(frozen=True)
class SubmissionListing:
    """Filtered and sorted view of one tag's submissions.

    Attributes:
        tag: Tag listed.
        total: Submissions stored for the tag before filtering.
        matched: Submissions matching the search term.
        articles: Matching submissions in display order, after the limit.
        scores: Relevance scores over the full set, when computed.
    """

    tag: str
    total: int
    matched: int
    articles: list[Article] = field(default_factory=list)
    scores: dict[int, float] | None = None
