"""Metrics collection for the tag store."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class StoreMetrics:
    """Metrics for tag store operations.

    Attributes:
        documents_written: JSON documents written.
        bytes_written: Total bytes written.
        backups_created: Backup copies made.
        documents_removed: Documents deleted.
        index_writes_skipped: Index writes skipped because nothing changed.
        refresh_failures: Refresh marker writes that failed.
    """

    documents_written: int = 0
    bytes_written: int = 0
    backups_created: int = 0
    documents_removed: int = 0
    index_writes_skipped: int = 0
    refresh_failures: int = 0

    _instance: ClassVar["StoreMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "StoreMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_write(self, bytes_written: int) -> None:
        """Record a written document."""
        self.documents_written += 1
        self.bytes_written += bytes_written

    def record_backup(self) -> None:
        """Record a backup copy."""
        self.backups_created += 1

    def record_removal(self) -> None:
        """Record a deleted document."""
        self.documents_removed += 1

    def record_index_skip(self) -> None:
        """Record a skipped index write."""
        self.index_writes_skipped += 1

    def record_refresh_failure(self) -> None:
        """Record a failed refresh marker write."""
        self.refresh_failures += 1

    def to_dict(self) -> dict[str, int]:
        """Convert metrics to dictionary."""
        return {
            "documents_written": self.documents_written,
            "bytes_written": self.bytes_written,
            "backups_created": self.backups_created,
            "documents_removed": self.documents_removed,
            "index_writes_skipped": self.index_writes_skipped,
            "refresh_failures": self.refresh_failures,
        }
