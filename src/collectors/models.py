"""Data models for Forem articles and persisted tag datasets."""

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class User(BaseModel):
    """Author of an article. Upstream fields not listed here are preserved."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = ""
    username: str = ""


class Organization(BaseModel):
    """Publishing organization of an article.

    The ``username`` is the identifier compared against the announcement
    organization.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = ""
    username: str = ""
    slug: str = ""


class Article(BaseModel):
    """One article as returned by the Forem articles endpoint.

    Timestamps are kept exactly as sent upstream so that persisted JSON and
    the relevance content hash stay faithful to the source. Any field the
    model does not name is carried through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: int
    title: str
    description: str | None = None
    published_at: str
    edited_at: str | None = None
    positive_reactions_count: Annotated[int, Field(ge=0)] = 0
    comments_count: Annotated[int, Field(ge=0)] = 0
    tag_list: list[str] = Field(default_factory=list)
    user: User | None = None
    organization: Organization | None = None

    @field_validator("tag_list", mode="before")
    @classmethod
    def split_tag_string(cls, v: Any) -> Any:
        """Accept the comma separated form some Forem endpoints return."""
        if isinstance(v, str):
            return [tag.strip() for tag in v.split(",") if tag.strip()]
        return v

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive tag membership check."""
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tag_list)

    @property
    def author_name(self) -> str:
        """Display name of the author, empty when unknown."""
        return self.user.name if self.user else ""

    @property
    def organization_username(self) -> str | None:
        """Username of the publishing organization, if any."""
        return self.organization.username if self.organization else None

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize using only the fields the source actually provided."""
        return self.model_dump(mode="json", exclude_unset=True)


class TagDataset(BaseModel):
    """Everything fetched for one challenge tag.

    Attributes:
        tag: Tag name as requested.
        submissions: Marker-tagged articles not authored by the announcement
            organization, in source order.
        announcements: Marker-tagged articles from the announcement
            organization, in source order.
        fetched_at: ISO-8601 UTC timestamp of the fetch (``fetchedAt`` on disk).
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    tag: Annotated[str, Field(min_length=1)]
    submissions: list[Article] = Field(default_factory=list)
    announcements: list[Article] = Field(default_factory=list)
    fetched_at: str = Field(alias="fetchedAt")

    def submissions_document(self) -> dict[str, Any]:
        """Document written to ``<tag>.json`` (announcements excluded)."""
        return {
            "tag": self.tag,
            "submissions": [article.to_json_dict() for article in self.submissions],
            "fetchedAt": self.fetched_at,
        }

    def announcements_document(self) -> dict[str, Any]:
        """Document written to ``<tag>-announcements.json``."""
        return {
            "tag": self.tag,
            "announcements": [
                article.to_json_dict() for article in self.announcements
            ],
            "fetchedAt": self.fetched_at,
        }


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with milliseconds and a ``Z`` suffix.

    Naive datetimes are taken to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    utc = moment.astimezone(UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_epoch_ms(value: str | datetime | None) -> int:
    """Convert an ISO-8601 timestamp to epoch milliseconds.

    Missing or unparsable values map to 0, which sorts before any real
    instant.
    """
    if value is None or value == "":
        return 0
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(value)
        except ValueError:
            return 0
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return (moment - _EPOCH) // timedelta(milliseconds=1)
