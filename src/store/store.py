"""Filesystem-backed store for tag datasets and the tag index.

Layout of the data directory::

    <tag>.json                 submissions for one tag
    <tag>-announcements.json   announcements, only when there are any
    tags.json                  sorted array of known tags
    .refresh                   epoch millis of the last mutation

Backups of ``<tag>.json`` go to a separate directory as
``<tag>_<epochMillis>.json``.
"""

import re
import shutil
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import structlog
from pydantic import ValidationError

from src.collectors.models import TagDataset, to_epoch_ms
from src.store.constants import (
    ANNOUNCEMENTS_SUFFIX,
    COMPONENT_STORE,
    INDEX_FILENAME,
    PUBLISHED_PATTERNS,
    REFRESH_FILENAME,
)
from src.store.errors import PersistenceError
from src.store.io import AtomicWriter, read_optional_json
from src.store.metrics import StoreMetrics
from src.store.models import WrittenFile


logger = structlog.get_logger()

# Tags become file names; anything that could escape the directory is refused
_SAFE_TAG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def is_safe_tag(tag: str) -> bool:
    """Check that a tag can be used as a file name inside the data directory."""
    return bool(_SAFE_TAG_PATTERN.match(tag)) and ".." not in tag


class TagStore:
    """JSON document store for challenge tag data.

    Writes are atomic per file but the store is not transactional across
    files: a crash between a backup and an overwrite leaves the backup in
    place.
    """

    def __init__(
        self,
        data_dir: Path,
        backup_dir: Path,
        clock: Callable[[], datetime] = _utc_now,
        run_id: str | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            data_dir: Directory holding tag documents and the index.
            backup_dir: Directory receiving timestamped backups.
            clock: Source of the current time.
            run_id: Optional run ID for logging context.
        """
        self._data_dir = Path(data_dir)
        self._backup_dir = Path(backup_dir)
        self._clock = clock
        self._writer = AtomicWriter(self._data_dir, run_id=run_id)
        self._metrics = StoreMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_STORE)
        if run_id:
            self._log = self._log.bind(run_id=run_id)

    @property
    def data_dir(self) -> Path:
        """Directory holding tag documents."""
        return self._data_dir

    @property
    def backup_dir(self) -> Path:
        """Directory holding backups."""
        return self._backup_dir

    @property
    def index_path(self) -> Path:
        """Path of the tag index document."""
        return self._data_dir / INDEX_FILENAME

    @property
    def refresh_path(self) -> Path:
        """Path of the refresh marker."""
        return self._data_dir / REFRESH_FILENAME

    def tag_path(self, tag: str) -> Path:
        """Path of the submissions document for a tag."""
        return self._data_dir / f"{tag}.json"

    def announcements_path(self, tag: str) -> Path:
        """Path of the announcements document for a tag."""
        return self._data_dir / f"{tag}{ANNOUNCEMENTS_SUFFIX}.json"

    def ensure_directories(self) -> None:
        """Create the data and backup directories if missing."""
        for directory in (self._data_dir, self._backup_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PersistenceError(directory, f"Failed to create directory ({e})") from e

    def exists(self, tag: str) -> bool:
        """Check whether a submissions document exists for a tag."""
        return is_safe_tag(tag) and self.tag_path(tag).is_file()

    # Datasets

    def save(self, dataset: TagDataset) -> list[WrittenFile]:
        """Write a tag dataset.

        The submissions document is always written. The announcements
        document is written only when there are announcements; otherwise any
        stale copy from an earlier fetch is deleted so that its absence keeps
        meaning "no announcements".

        Args:
            dataset: Dataset to persist.

        Returns:
            Files written.

        Raises:
            PersistenceError: If a document cannot be written.
        """
        self._require_safe(dataset.tag)
        self._ensure_data_dir()

        written = [
            self._writer.write_json(
                self.tag_path(dataset.tag), dataset.submissions_document()
            )
        ]

        announcements_path = self.announcements_path(dataset.tag)
        if dataset.announcements:
            written.append(
                self._writer.write_json(
                    announcements_path, dataset.announcements_document()
                )
            )
        elif announcements_path.exists():
            self._unlink_quietly(announcements_path)

        for file_info in written:
            self._metrics.record_write(file_info.bytes_written)

        self._log.info(
            "tag_saved",
            tag=dataset.tag,
            submissions=len(dataset.submissions),
            announcements=len(dataset.announcements),
            files=[file_info.path for file_info in written],
        )
        self.touch_refresh()
        return written

    def load(self, tag: str) -> TagDataset | None:
        """Read a tag dataset, merging its announcements document if present.

        Args:
            tag: Tag to read.

        Returns:
            The dataset, or None when missing or unreadable.
        """
        if not is_safe_tag(tag):
            return None

        document = read_optional_json(self.tag_path(tag))
        if not isinstance(document, dict):
            return None

        announcements = read_optional_json(self.announcements_path(tag))
        if isinstance(announcements, dict) and isinstance(
            announcements.get("announcements"), list
        ):
            document = {**document, "announcements": announcements["announcements"]}

        try:
            return TagDataset.model_validate(document)
        except ValidationError as e:
            self._log.warning("tag_document_invalid", tag=tag, error=str(e))
            return None

    # Index

    def read_index(self) -> list[str]:
        """Read the tag index; missing or malformed means empty."""
        data = read_optional_json(self.index_path)
        if not isinstance(data, list):
            return []
        return [tag for tag in data if isinstance(tag, str)]

    def index_add(self, tag: str) -> bool:
        """Add a tag to the index.

        Args:
            tag: Tag to add.

        Returns:
            True if the index was written, False if it already held the tag.
        """
        existing = self.read_index()
        if tag in existing:
            self._metrics.record_index_skip()
            self._log.debug("index_unchanged", tag=tag)
            return False

        tags = sorted({*existing, tag})
        self._write_index(tags)
        self._log.info("index_tag_added", tag=tag, total_tags=len(tags))
        return True

    def index_remove(self, tag: str) -> bool:
        """Remove a tag from the index.

        Args:
            tag: Tag to remove.

        Returns:
            True if the tag was present and the index rewritten.
        """
        existing = self.read_index()
        if tag not in existing:
            return False

        tags = sorted({t for t in existing if t != tag})
        self._write_index(tags)
        self._log.info("index_tag_removed", tag=tag, total_tags=len(tags))
        return True

    def _write_index(self, tags: list[str]) -> None:
        self._ensure_data_dir()
        file_info = self._writer.write_json(self.index_path, tags)
        self._metrics.record_write(file_info.bytes_written)
        self.touch_refresh()

    # Backup and removal

    def backup(self, tag: str) -> Path | None:
        """Copy the current submissions document to the backup directory.

        Args:
            tag: Tag to back up.

        Returns:
            Path of the backup, or None when there was nothing to back up.

        Raises:
            PersistenceError: If the copy fails.
        """
        if not self.exists(tag):
            return None

        millis = to_epoch_ms(self._clock())
        target = self._backup_dir / f"{tag}_{millis}.json"
        try:
            self._backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.tag_path(tag), target)
        except OSError as e:
            raise PersistenceError(target, f"Failed to back up tag '{tag}' ({e})") from e

        self._metrics.record_backup()
        self._log.info("tag_backed_up", tag=tag, backup=str(target))
        return target

    def remove(self, tag: str) -> list[Path]:
        """Delete a tag's documents.

        Each deletion is independent; a file that does not exist is skipped.

        Args:
            tag: Tag to remove.

        Returns:
            Paths that were deleted.
        """
        if not is_safe_tag(tag):
            return []

        removed = [
            path
            for path in (self.tag_path(tag), self.announcements_path(tag))
            if self._unlink_quietly(path)
        ]
        self._log.info("tag_removed", tag=tag, files=[str(p) for p in removed])
        self.touch_refresh()
        return removed

    def _unlink_quietly(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            self._log.warning("file_delete_failed", path=str(path), error=str(e))
            return False
        self._metrics.record_removal()
        return True

    # Change signal

    def touch_refresh(self) -> None:
        """Write the current epoch millis to the refresh marker.

        The marker is only a hint for pollers; failures are logged and
        otherwise ignored.
        """
        millis = to_epoch_ms(self._clock())
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            self.refresh_path.write_text(str(millis), encoding="utf-8")
        except OSError as e:
            self._metrics.record_refresh_failure()
            self._log.warning("refresh_marker_failed", error=str(e))

    def read_refresh(self) -> str | None:
        """Read the refresh marker, if any."""
        try:
            return self.refresh_path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            return None

    # Publishing

    def publish(self, target_dir: Path) -> list[Path]:
        """Copy every data document to another directory for static hosting.

        Args:
            target_dir: Destination directory, created if missing.

        Returns:
            Paths written in the destination.

        Raises:
            PersistenceError: If a copy fails.
        """
        target_dir = Path(target_dir)
        if not self._data_dir.is_dir():
            self._log.info("publish_skipped", reason="no_data_directory")
            return []

        copied: list[Path] = []
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            for pattern in PUBLISHED_PATTERNS:
                for source in sorted(self._data_dir.glob(pattern)):
                    if source.is_file():
                        destination = target_dir / source.name
                        shutil.copy2(source, destination)
                        copied.append(destination)
        except OSError as e:
            raise PersistenceError(target_dir, f"Failed to publish data ({e})") from e

        self._log.info("data_published", target=str(target_dir), files=len(copied))
        return copied

    def _ensure_data_dir(self) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(self._data_dir, f"Failed to create directory ({e})") from e

    def _require_safe(self, tag: str) -> None:
        if not is_safe_tag(tag):
            raise PersistenceError(self._data_dir / tag, "Refusing unsafe tag name")
