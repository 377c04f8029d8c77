"""Unit tests for the tag store."""

import json
from datetime import timedelta
from pathlib import Path

import pytest

from src.collectors.models import Article, TagDataset, to_epoch_ms
from src.store.errors import PersistenceError
from src.store.metrics import StoreMetrics
from src.store.store import TagStore, is_safe_tag
from tests.helpers.forem import make_article
from tests.helpers.time import FIXED_NOW


def _dataset(
    tag: str = "xchallenge",
    submission_ids: tuple[int, ...] = (1, 2),
    announcement_ids: tuple[int, ...] = (),
) -> TagDataset:
    return TagDataset(
        tag=tag,
        submissions=[Article.model_validate(make_article(i)) for i in submission_ids],
        announcements=[
            Article.model_validate(make_article(i, organization="devteam"))
            for i in announcement_ids
        ],
        fetched_at="2024-10-15T12:00:00.000Z",
    )


@pytest.fixture
def store(tmp_path: Path) -> TagStore:
    """Store over temporary data and backup directories."""
    return TagStore(tmp_path / "data", tmp_path / "backup", clock=lambda: FIXED_NOW)


class TestIsSafeTag:
    """Tests for tag file name safety."""

    @pytest.mark.parametrize("tag", ["xchallenge", "x-challenge", "x_challenge.v2"])
    def test_safe(self, tag: str) -> None:
        """Test ordinary tags are safe."""
        assert is_safe_tag(tag)

    @pytest.mark.parametrize("tag", ["", "../xchallenge", "a/b", ".hidden", "a..b"])
    def test_unsafe(self, tag: str) -> None:
        """Test path-like tags are refused."""
        assert not is_safe_tag(tag)


class TestSaveAndLoad:
    """Tests for saving and loading datasets."""

    def test_save_without_announcements(self, store: TagStore) -> None:
        """Test only the submissions document is written."""
        written = store.save(_dataset())

        assert [w.path for w in written] == ["xchallenge.json"]
        document = json.loads(store.tag_path("xchallenge").read_text(encoding="utf-8"))
        assert document["tag"] == "xchallenge"
        assert document["fetchedAt"] == "2024-10-15T12:00:00.000Z"
        assert [a["id"] for a in document["submissions"]] == [1, 2]
        assert "announcements" not in document
        assert not store.announcements_path("xchallenge").exists()

    def test_save_with_announcements(self, store: TagStore) -> None:
        """Test announcements go to their own document."""
        store.save(_dataset(announcement_ids=(7,)))

        document = json.loads(
            store.announcements_path("xchallenge").read_text(encoding="utf-8")
        )
        assert document["tag"] == "xchallenge"
        assert [a["id"] for a in document["announcements"]] == [7]

    def test_save_removes_stale_announcements(self, store: TagStore) -> None:
        """Test a refetch without announcements deletes the old companion file."""
        store.save(_dataset(announcement_ids=(7,)))
        store.save(_dataset())

        assert not store.announcements_path("xchallenge").exists()

    def test_save_touches_refresh(self, store: TagStore) -> None:
        """Test the refresh marker holds the current epoch millis."""
        store.save(_dataset())

        assert store.read_refresh() == str(to_epoch_ms(FIXED_NOW))

    def test_save_unsafe_tag(self, store: TagStore) -> None:
        """Test unsafe tags are never written."""
        with pytest.raises(PersistenceError):
            store.save(_dataset(tag="../evilchallenge"))

    def test_load_merges_announcements(self, store: TagStore) -> None:
        """Test load returns submissions and announcements together."""
        store.save(_dataset(announcement_ids=(7, 8)))

        dataset = store.load("xchallenge")

        assert dataset is not None
        assert [a.id for a in dataset.submissions] == [1, 2]
        assert [a.id for a in dataset.announcements] == [7, 8]

    def test_load_missing(self, store: TagStore) -> None:
        """Test a missing tag loads as None."""
        assert store.load("nochallenge") is None

    def test_load_corrupt(self, store: TagStore) -> None:
        """Test an unparsable document loads as None."""
        store.ensure_directories()
        store.tag_path("xchallenge").write_text("{oops", encoding="utf-8")

        assert store.load("xchallenge") is None

    def test_load_ignores_undecodable_announcements(self, store: TagStore) -> None:
        """Test announcements that are not UTF-8 are treated as absent."""
        store.save(_dataset(announcement_ids=(7,)))
        store.announcements_path("xchallenge").write_bytes(b"\xff\xfe\x00garbage")

        dataset = store.load("xchallenge")

        assert dataset is not None
        assert [a.id for a in dataset.submissions] == [1, 2]
        assert dataset.announcements == []

    def test_roundtrip_preserves_extra_fields(self, store: TagStore) -> None:
        """Test fields the model does not name survive save and load."""
        store.save(_dataset())

        dataset = store.load("xchallenge")

        assert dataset is not None
        assert dataset.submissions[0].to_json_dict()["url"].startswith("https://dev.to/")


class TestIndex:
    """Tests for the tag index."""

    def test_missing_index_is_empty(self, store: TagStore) -> None:
        """Test no index file means no tags."""
        assert store.read_index() == []

    def test_malformed_index_is_empty(self, store: TagStore) -> None:
        """Test a non-array index means no tags."""
        store.ensure_directories()
        store.index_path.write_text('{"tags": []}', encoding="utf-8")

        assert store.read_index() == []

    def test_undecodable_index_is_empty(self, store: TagStore) -> None:
        """Test an index that is not UTF-8 means no tags."""
        store.ensure_directories()
        store.index_path.write_bytes(b"\xff\xfe[\"xchallenge\"]")

        assert store.read_index() == []

    def test_add_keeps_sorted_and_unique(self, store: TagStore) -> None:
        """Test tags are stored sorted without duplicates."""
        assert store.index_add("ychallenge") is True
        assert store.index_add("achallenge") is True
        assert store.index_add("ychallenge") is False

        assert json.loads(store.index_path.read_text(encoding="utf-8")) == [
            "achallenge",
            "ychallenge",
        ]
        assert StoreMetrics.get_instance().index_writes_skipped == 1

    def test_remove(self, store: TagStore) -> None:
        """Test removing a tag rewrites the index."""
        store.index_add("achallenge")
        store.index_add("bchallenge")

        assert store.index_remove("achallenge") is True
        assert store.index_remove("achallenge") is False
        assert store.read_index() == ["bchallenge"]


class TestBackupAndRemove:
    """Tests for backups and removal."""

    def test_backup_name_uses_epoch_millis(self, store: TagStore) -> None:
        """Test backups are named <tag>_<millis>.json."""
        store.save(_dataset())

        backup = store.backup("xchallenge")

        assert backup is not None
        assert backup.name == f"xchallenge_{to_epoch_ms(FIXED_NOW)}.json"
        assert backup.read_bytes() == store.tag_path("xchallenge").read_bytes()

    def test_backup_missing_tag(self, store: TagStore) -> None:
        """Test nothing is backed up when no document exists."""
        assert store.backup("xchallenge") is None

    def test_successive_backups_do_not_collide(self, tmp_path: Path) -> None:
        """Test backups taken at different instants are kept side by side."""
        moments = iter([FIXED_NOW, FIXED_NOW + timedelta(seconds=1)])
        store = TagStore(tmp_path / "data", tmp_path / "backup", clock=lambda: next(moments))
        store.ensure_directories()
        store.tag_path("xchallenge").write_text("{}", encoding="utf-8")

        first = store.backup("xchallenge")
        second = store.backup("xchallenge")

        assert first != second
        assert len(list((tmp_path / "backup").iterdir())) == 2

    def test_remove_deletes_both_documents(self, store: TagStore) -> None:
        """Test remove deletes submissions and announcements."""
        store.save(_dataset(announcement_ids=(7,)))

        removed = store.remove("xchallenge")

        assert sorted(p.name for p in removed) == [
            "xchallenge-announcements.json",
            "xchallenge.json",
        ]
        assert not store.exists("xchallenge")

    def test_remove_missing_is_quiet(self, store: TagStore) -> None:
        """Test removing an unknown tag deletes nothing."""
        assert store.remove("xchallenge") == []


class TestRefreshAndPublish:
    """Tests for the refresh marker and publishing."""

    def test_refresh_failure_is_swallowed(self, tmp_path: Path) -> None:
        """Test a refresh marker that cannot be written is only logged."""
        blocker = tmp_path / "data"
        blocker.write_text("not a directory", encoding="utf-8")
        store = TagStore(blocker, tmp_path / "backup", clock=lambda: FIXED_NOW)

        store.touch_refresh()

        assert StoreMetrics.get_instance().refresh_failures == 1

    def test_undecodable_refresh_marker_is_absent(self, store: TagStore) -> None:
        """Test a refresh marker that is not UTF-8 reads as absent."""
        store.ensure_directories()
        store.refresh_path.write_bytes(b"\xff\xfe")

        assert store.read_refresh() is None

    def test_publish_copies_data_files(self, store: TagStore, tmp_path: Path) -> None:
        """Test every data document and the marker are copied."""
        store.save(_dataset(announcement_ids=(7,)))
        store.index_add("xchallenge")
        target = tmp_path / "public"

        copied = store.publish(target)

        assert sorted(p.name for p in copied) == [
            ".refresh",
            "tags.json",
            "xchallenge-announcements.json",
            "xchallenge.json",
        ]
        assert (target / "tags.json").read_text(encoding="utf-8") == (
            store.index_path.read_text(encoding="utf-8")
        )

    def test_publish_without_data(self, store: TagStore, tmp_path: Path) -> None:
        """Test publishing before any fetch copies nothing."""
        assert store.publish(tmp_path / "public") == []
