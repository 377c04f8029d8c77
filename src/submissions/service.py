"""Submission service: fetch, update, remove and read challenge tags.

This is the single entry point the CLI and the MCP server share. Every
operation is synchronous; pauses between requests go through an injectable
``sleep`` so tests never wait.
"""

import time
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from src.collectors.classifier import classify_submissions, validate_tag_name
from src.collectors.constants import (
    ANNOUNCEMENT_ORGANIZATION,
    DEFAULT_PER_PAGE,
    DEFAULT_TAG_DELAY_SECONDS,
    MARKER_TAG,
)
from src.collectors.errors import CollectorError, TagValidationError
from src.collectors.forem import ForemArticleClient
from src.collectors.metrics import CollectorMetrics
from src.collectors.models import TagDataset, format_timestamp
from src.ranker.cache import RelevanceCache
from src.ranker.constants import SORT_LATEST, SORT_RELEVANT
from src.ranker.query import filter_articles, sort_articles
from src.ranker.ranker import get_relevance_scores
from src.store.errors import NoTagsError, StoreError
from src.store.store import TagStore, is_safe_tag
from src.submissions.models import (
    BatchUpdateResult,
    FetchOutcome,
    RemovalResult,
    SubmissionListing,
    TagUpdateOutcome,
)


logger = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SubmissionService:
    """Coordinates the Forem client, the classifier and the tag store."""

    def __init__(  # noqa: PLR0913
        self,
        client: ForemArticleClient,
        store: TagStore,
        cache: RelevanceCache | None = None,
        per_page: int = DEFAULT_PER_PAGE,
        tag_delay_seconds: float = DEFAULT_TAG_DELAY_SECONDS,
        clock: Callable[[], datetime] = _utc_now,
        sleep: Callable[[float], None] = time.sleep,
        run_id: str = "",
    ) -> None:
        """Initialize the service.

        Args:
            client: Paginated article client.
            store: Tag document store.
            cache: Relevance cache used by listings sorted by relevance.
            per_page: Page size for fetches.
            tag_delay_seconds: Pause between tags in a batch update.
            clock: Source of the current time.
            sleep: Sleep function, injectable for tests.
            run_id: Run identifier for logging.
        """
        self._client = client
        self._store = store
        self._cache = cache
        self._per_page = per_page
        self._tag_delay_seconds = tag_delay_seconds
        self._clock = clock
        self._sleep = sleep
        self._metrics = CollectorMetrics.get_instance()
        self._log = logger.bind(component="submissions", run_id=run_id)

    @property
    def store(self) -> TagStore:
        """Underlying tag store."""
        return self._store

    # Writes

    def fetch_submissions(self, tag: str) -> FetchOutcome:
        """Fetch, classify and persist every submission for a tag.

        When no article carries the marker tag nothing is written and the
        outcome reports zero submissions.

        Args:
            tag: Challenge tag to fetch.

        Returns:
            FetchOutcome describing what was fetched and saved.

        Raises:
            TagValidationError: If the tag is not an allowed challenge tag.
            UpstreamError: If any page request fails.
            ParseError: If a page body is malformed.
            PersistenceError: If a document cannot be written.
        """
        self._validate(tag)
        self._store.ensure_directories()

        log = self._log.bind(tag=tag)
        log.info("fetch_started")

        articles = self._client.fetch_all(tag, self._per_page)
        classified = classify_submissions(
            articles,
            marker_tag=MARKER_TAG,
            announcement_org=ANNOUNCEMENT_ORGANIZATION,
            tag=tag,
        )
        self._metrics.record_classification(
            tag, kept=classified.kept_count, dropped=len(classified.dropped)
        )
        fetched_at = format_timestamp(self._clock())

        if classified.is_empty:
            log.warning("no_valid_submissions", articles_fetched=len(articles))
            return FetchOutcome(
                tag=tag,
                fetched_at=fetched_at,
                articles_fetched=len(articles),
                dropped_count=len(classified.dropped),
            )

        dataset = TagDataset(
            tag=tag,
            submissions=classified.submissions,
            announcements=classified.announcements,
            fetched_at=fetched_at,
        )
        self._store.save(dataset)
        self._store.index_add(tag)

        log.info(
            "fetch_complete",
            submissions=len(dataset.submissions),
            announcements=len(dataset.announcements),
            dropped=len(classified.dropped),
        )
        return FetchOutcome(
            tag=tag,
            fetched_at=fetched_at,
            dataset=dataset,
            articles_fetched=len(articles),
            dropped_count=len(classified.dropped),
        )

    def update_tag(self, tag: str) -> FetchOutcome:
        """Back up a tag's current document, then fetch it again.

        Args:
            tag: Challenge tag to update.

        Returns:
            FetchOutcome, carrying the backup path when one was made.

        Raises:
            TagValidationError: If the tag is not an allowed challenge tag.
            UpstreamError: If any page request fails.
            ParseError: If a page body is malformed.
            PersistenceError: If the backup or a document write fails.
        """
        self._validate(tag)
        backup_path = self._store.backup(tag)
        if backup_path is None:
            self._log.info("update_without_backup", tag=tag)

        outcome = self.fetch_submissions(tag)
        return FetchOutcome(
            tag=outcome.tag,
            fetched_at=outcome.fetched_at,
            dataset=outcome.dataset,
            articles_fetched=outcome.articles_fetched,
            dropped_count=outcome.dropped_count,
            backup_path=backup_path,
        )

    def update_all_tags(self) -> BatchUpdateResult:
        """Update every tag in the index, one after another.

        A failing tag is recorded and the batch moves on to the next one.

        Returns:
            BatchUpdateResult with one entry per indexed tag.

        Raises:
            NoTagsError: If the index is empty.
        """
        tags = self._store.read_index()
        if not tags:
            raise NoTagsError

        started_at = self._clock()
        self._log.info("batch_update_started", tag_count=len(tags))
        outcomes: list[TagUpdateOutcome] = []

        for position, tag in enumerate(tags):
            if position > 0:
                self._sleep(self._tag_delay_seconds)
            try:
                outcome = self.update_tag(tag)
            except (CollectorError, StoreError) as e:
                error_class = (
                    e.error_class.value
                    if isinstance(e, CollectorError)
                    else type(e).__name__
                )
                self._log.warning(
                    "tag_update_failed", tag=tag, error_class=error_class, error=str(e)
                )
                outcomes.append(
                    TagUpdateOutcome(tag=tag, error=str(e), error_class=error_class)
                )
                continue
            outcomes.append(TagUpdateOutcome(tag=tag, outcome=outcome))

        result = BatchUpdateResult(
            started_at=started_at, finished_at=self._clock(), outcomes=outcomes
        )
        self._log.info(
            "batch_update_complete",
            tags_succeeded=len(result.succeeded),
            tags_failed=len(result.failed),
            total_submissions=result.total_submissions,
        )
        return result

    def remove_tag(self, tag: str) -> RemovalResult:
        """Back up and delete a tag's documents and drop it from the index.

        Args:
            tag: Tag to remove.

        Returns:
            RemovalResult listing what was deleted.

        Raises:
            PersistenceError: If the backup fails.
        """
        backup_path = self._store.backup(tag)
        removed = self._store.remove(tag)
        index_updated = self._store.index_remove(tag)
        self._store.touch_refresh()

        self._log.info(
            "tag_removal_complete",
            tag=tag,
            files_removed=len(removed),
            index_updated=index_updated,
        )
        return RemovalResult(
            tag=tag,
            backup_path=backup_path,
            removed_files=removed,
            index_updated=index_updated,
        )

    # Reads

    def get_existing_tags(self) -> list[str]:
        """Tags in the index, sorted."""
        return self._store.read_index()

    def get_tag_data(self, tag: str) -> TagDataset | None:
        """Stored dataset for a tag, or None."""
        return self._store.load(tag)

    def get_all_tag_data(self) -> list[TagDataset]:
        """Stored datasets for every indexed tag that can be read."""
        datasets = []
        for tag in self.get_existing_tags():
            dataset = self._store.load(tag)
            if dataset is None:
                self._log.warning("indexed_tag_missing", tag=tag)
                continue
            datasets.append(dataset)
        return datasets

    def list_submissions(
        self,
        tag: str,
        sort_by: str = SORT_LATEST,
        search: str | None = None,
        limit: int | None = None,
    ) -> SubmissionListing | None:
        """Search and sort a tag's stored submissions.

        Relevance scores are computed over the full stored set and only
        then is the search applied, so filtering never changes a score.

        Args:
            tag: Tag to list.
            sort_by: Sort option.
            search: Case-insensitive term matched on title, description and
                author name.
            limit: Maximum number of submissions returned.

        Returns:
            SubmissionListing, or None when the tag has no stored data.

        Raises:
            ValueError: If ``sort_by`` is unknown.
        """
        dataset = self._store.load(tag)
        if dataset is None:
            return None

        scores = None
        if sort_by == SORT_RELEVANT:
            cache = self._cache or RelevanceCache.in_memory()
            scores = get_relevance_scores(tag, dataset.submissions, cache, self._clock())

        matched = filter_articles(dataset.submissions, search)
        ordered = sort_articles(matched, sort_by, scores)
        if limit is not None:
            ordered = ordered[:limit]

        return SubmissionListing(
            tag=tag,
            total=len(dataset.submissions),
            matched=len(matched),
            articles=ordered,
            scores=scores,
        )

    def sweep_cache(self) -> int:
        """Delete expired relevance cache entries.

        Returns:
            Number of entries deleted; 0 when no cache is configured.
        """
        if self._cache is None:
            return 0
        return self._cache.sweep_expired(self._clock())

    def _validate(self, tag: str) -> None:
        validate_tag_name(tag)
        if not is_safe_tag(tag):
            msg = f'Invalid tag "{tag}" - tags may only contain letters, digits, ".", "_" and "-"'
            raise TagValidationError(msg, tag=tag, rule="characters")
