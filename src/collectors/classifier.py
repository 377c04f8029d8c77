"""Tag validation and submission classification."""

from dataclasses import dataclass, field

import structlog

from src.collectors.constants import (
    ANNOUNCEMENT_ORGANIZATION,
    CHALLENGE_TAG_SUFFIX,
    COMPONENT_COLLECTOR,
    MARKER_TAG,
    RESERVED_BROAD_TAG,
)
from src.collectors.errors import TagValidationError
from src.collectors.models import Article


logger = structlog.get_logger()


@dataclass(frozen=True)
class ClassifiedArticles:
    """Articles split by role.

    Attributes:
        submissions: Marker-tagged articles from anyone but the announcement
            organization.
        announcements: Marker-tagged articles from the announcement
            organization.
        dropped: Articles without the marker tag.
    """

    submissions: list[Article] = field(default_factory=list)
    announcements: list[Article] = field(default_factory=list)
    dropped: list[Article] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when nothing qualified as a submission or announcement."""
        return not self.submissions and not self.announcements

    @property
    def kept_count(self) -> int:
        """Number of marker-tagged articles."""
        return len(self.submissions) + len(self.announcements)


def validate_tag_name(
    tag: str,
    reserved_tag: str = RESERVED_BROAD_TAG,
    suffix: str = CHALLENGE_TAG_SUFFIX,
) -> None:
    """Reject tags that must not be fetched.

    Args:
        tag: Requested tag.
        reserved_tag: Tag that is too broad to fetch directly.
        suffix: Suffix every challenge tag must end with.

    Raises:
        TagValidationError: Naming the rule the tag breaks.
    """
    if not tag or not tag.strip():
        raise TagValidationError("Tag must be a non-empty string", tag=tag, rule="empty")

    normalized = tag.lower()
    if normalized == reserved_tag.lower():
        msg = (
            f'Cannot fetch "{reserved_tag}" tag directly - it contains too many '
            "submissions. Use a specific challenge tag such as "
            '"hacktoberfestchallenge" or "algoliachallenge".'
        )
        raise TagValidationError(msg, tag=tag, rule="reserved")

    if not normalized.endswith(suffix.lower()):
        msg = (
            f'Invalid tag "{tag}" - only challenge tags ending with "{suffix}" '
            "are allowed. Examples: hacktoberfestchallenge, algoliachallenge"
        )
        raise TagValidationError(msg, tag=tag, rule="suffix")


def classify_submissions(
    articles: list[Article],
    marker_tag: str = MARKER_TAG,
    announcement_org: str = ANNOUNCEMENT_ORGANIZATION,
    tag: str | None = None,
) -> ClassifiedArticles:
    """Split raw articles into submissions, announcements and noise.

    Args:
        articles: Articles in source order.
        marker_tag: Tag that qualifies a genuine submission (case-insensitive).
        announcement_org: Organization username whose posts are announcements.
        tag: Tag being processed, for logging only.

    Returns:
        ClassifiedArticles preserving relative order within each group.
    """
    log = logger.bind(component=COMPONENT_COLLECTOR, tag=tag)
    result = ClassifiedArticles()

    for article in articles:
        if not article.has_tag(marker_tag):
            log.debug("article_dropped", article_id=article.id, reason="no_marker_tag")
            result.dropped.append(article)
        elif article.organization_username == announcement_org:
            result.announcements.append(article)
        else:
            result.submissions.append(article)

    log.info(
        "classification_complete",
        submissions=len(result.submissions),
        announcements=len(result.announcements),
        dropped=len(result.dropped),
    )
    return result
