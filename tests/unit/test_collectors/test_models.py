"""Unit tests for Forem article models and timestamp helpers."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.collectors.models import Article, TagDataset, format_timestamp, to_epoch_ms
from tests.helpers.forem import make_article
from tests.helpers.time import FIXED_NOW


class TestArticle:
    """Tests for the Article model."""

    def test_preserves_unknown_fields(self) -> None:
        """Test upstream fields not modelled survive serialization."""
        raw = make_article(1)
        raw["cover_image"] = "https://example.com/cover.png"

        article = Article.model_validate(raw)

        assert article.to_json_dict()["cover_image"] == "https://example.com/cover.png"
        assert article.to_json_dict()["url"] == raw["url"]

    def test_omits_fields_not_sent(self) -> None:
        """Test defaults for absent fields are not written back."""
        article = Article.model_validate(
            {"id": 1, "title": "t", "published_at": "2024-10-01T10:00:00Z"}
        )

        assert article.to_json_dict() == {
            "id": 1,
            "title": "t",
            "published_at": "2024-10-01T10:00:00Z",
        }

    def test_tag_list_string_form(self) -> None:
        """Test a comma separated tag_list is split."""
        article = Article.model_validate(
            make_article(1) | {"tag_list": "devchallenge, xchallenge,"}
        )

        assert article.tag_list == ["devchallenge", "xchallenge"]

    def test_negative_counts_rejected(self) -> None:
        """Test reaction counts must not be negative."""
        with pytest.raises(ValidationError):
            Article.model_validate(make_article(1, reactions=-1))

    def test_frozen(self) -> None:
        """Test articles are immutable."""
        article = Article.model_validate(make_article(1))

        with pytest.raises(ValidationError):
            article.title = "changed"  # type: ignore[misc]

    def test_author_and_organization(self) -> None:
        """Test convenience accessors."""
        article = Article.model_validate(
            make_article(1, author="Ada", organization="devteam")
        )

        assert article.author_name == "Ada"
        assert article.organization_username == "devteam"
        assert Article.model_validate(make_article(2)).organization_username is None


class TestTagDataset:
    """Tests for the persisted tag dataset."""

    def test_documents_split_announcements(self) -> None:
        """Test the submissions document excludes announcements."""
        dataset = TagDataset(
            tag="xchallenge",
            submissions=[Article.model_validate(make_article(1))],
            announcements=[Article.model_validate(make_article(2, organization="devteam"))],
            fetched_at="2024-10-15T12:00:00.000Z",
        )

        submissions = dataset.submissions_document()
        announcements = dataset.announcements_document()

        assert set(submissions) == {"tag", "submissions", "fetchedAt"}
        assert [a["id"] for a in submissions["submissions"]] == [1]
        assert [a["id"] for a in announcements["announcements"]] == [2]

    def test_accepts_camel_case_key(self) -> None:
        """Test documents on disk use fetchedAt."""
        dataset = TagDataset.model_validate(
            {"tag": "xchallenge", "submissions": [], "fetchedAt": "x"}
        )

        assert dataset.fetched_at == "x"
        assert dataset.announcements == []


class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_format_timestamp(self) -> None:
        """Test ISO format with milliseconds and Z suffix."""
        assert format_timestamp(FIXED_NOW) == "2024-10-15T12:00:00.000Z"

    def test_format_naive_as_utc(self) -> None:
        """Test naive datetimes are treated as UTC."""
        assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5, 678000)) == (
            "2024-01-02T03:04:05.678Z"
        )

    def test_to_epoch_ms_parses_z_suffix(self) -> None:
        """Test upstream timestamps convert to epoch millis."""
        assert to_epoch_ms("1970-01-01T00:00:01Z") == 1000
        assert to_epoch_ms("1970-01-01T00:00:00.250+00:00") == 250

    def test_to_epoch_ms_datetime(self) -> None:
        """Test datetimes convert exactly."""
        assert to_epoch_ms(datetime(1970, 1, 1, 0, 0, 2, tzinfo=UTC)) == 2000

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_to_epoch_ms_missing(self, value: str | None) -> None:
        """Test missing or invalid values map to 0."""
        assert to_epoch_ms(value) == 0
